"""Usage: rule-based KPI chart extraction helpers."""

from kpi_report.services.rules.chart_assembler import ChartAssembler, NoChartsDetectedError
from kpi_report.services.rules.pseudonymize import build_pseudonym_map, mask_ranking

__all__ = ["ChartAssembler", "NoChartsDetectedError", "build_pseudonym_map", "mask_ranking"]
