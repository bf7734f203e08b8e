from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException

from kpi_report.core.config import settings
from kpi_report.services.layout.base import BaseLayoutClient
from kpi_report.services.rules.chart_assembler import ChartAssembler
from kpi_report.services.rules.region_locator import build_region_strategy
from kpi_report.services.rules.template_loader import get_template
from kpi_report.state import global_state


@lru_cache(maxsize=1)
def build_assembler() -> ChartAssembler:
    template_dir = Path(settings.template_dir) if settings.template_dir else None
    template = get_template(settings.report_template, template_dir)
    strategy = build_region_strategy(
        settings.region_strategy,
        template,
        column_mode=settings.title_column_mode,
    )
    return ChartAssembler(template, strategy)


async def get_layout_client() -> BaseLayoutClient:
    if not global_state.layout_client:
        raise HTTPException(status_code=503, detail="Layout service not initialized")
    return global_state.layout_client


async def get_assembler() -> ChartAssembler:
    if global_state.assembler is None:
        global_state.assembler = build_assembler()
    return global_state.assembler


LayoutClientDep = Annotated[BaseLayoutClient, Depends(get_layout_client)]
AssemblerDep = Annotated[ChartAssembler, Depends(get_assembler)]
