import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from kpi_report.api.deps import build_assembler
from kpi_report.api.routes.health import router as health_router
from kpi_report.api.routes.report import router as report_router
from kpi_report.services.layout.pdfplumber_client import PdfPlumberLayoutClient
from kpi_report.state import global_state

from kpi_report.core.logging import setup_logging

# configure logging before the app is created
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting KPI Report Service...")

    logger.info("Loading report template...")
    global_state.assembler = build_assembler()
    logger.info(
        "Template %s loaded: charts=%s strategy=%s",
        global_state.assembler.template.name,
        [chart.key for chart in global_state.assembler.template.charts],
        global_state.assembler.strategy.name,
    )

    global_state.layout_client = PdfPlumberLayoutClient()

    logger.info("System ready!")
    yield
    logger.info("Shutting down service...")


app = FastAPI(title="KPI Report Service", lifespan=lifespan)

app.include_router(health_router, prefix="/api")
app.include_router(report_router, prefix="/api")
