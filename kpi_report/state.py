from kpi_report.services.layout.base import BaseLayoutClient
from kpi_report.services.rules.chart_assembler import ChartAssembler


class AppState:
    layout_client: BaseLayoutClient | None = None
    assembler: ChartAssembler | None = None


global_state = AppState()
