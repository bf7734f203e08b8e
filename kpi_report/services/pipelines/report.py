"""Usage: KPI report extraction pipeline (layout -> chart rules)."""

from __future__ import annotations

import logging
import time

from kpi_report.schemas.layout import DocumentLayout
from kpi_report.schemas.report import ReportExtractionResult
from kpi_report.services.layout.base import BaseLayoutClient
from kpi_report.services.rules.chart_assembler import ChartAssembler

logger = logging.getLogger(__name__)


class ReportExtractionPipeline:
    """Pipeline orchestrating layout extraction and chart assembly."""

    def __init__(self, layout_client: BaseLayoutClient, *, assembler: ChartAssembler) -> None:
        self.layout_client = layout_client
        self.assembler = assembler

    async def run(
        self,
        source: str | bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> ReportExtractionResult:
        """Read the page layout, then rebuild the ranked chart tables from it.

        Raises NoChartsDetectedError when the document yields no chart at all.
        """

        start_time = time.perf_counter()
        logger.info("[TIMER] Pipeline started for file: %s", filename)

        t0 = time.perf_counter()
        layout = await self.layout_client.extract(
            source,
            filename=filename,
            content_type=content_type,
        )
        layout_duration = time.perf_counter() - t0
        logger.info("[TIMER] Step 1: Layout finished. Duration: %.4fs", layout_duration)

        result = self._run_rules(layout)
        if result.warnings:
            logger.warning(
                "Structural warnings: template=%s charts=%s",
                self.assembler.template.name,
                [warning.key for warning in result.warnings],
            )

        total_duration = time.perf_counter() - start_time
        logger.info(
            "[TIMER] Pipeline completed. Total: %.4fs (layout: %.2fs) charts=%s",
            total_duration,
            layout_duration,
            list(result.charts),
        )
        return result

    def _run_rules(self, layout: DocumentLayout) -> ReportExtractionResult:
        return self.assembler.assemble(layout)
