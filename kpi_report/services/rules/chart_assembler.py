"""Usage: rule-based KPI chart extraction from a document's positional layout."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from kpi_report.schemas.layout import DocumentLayout, PageLayout, Rect
from kpi_report.schemas.report import (
    ChartResult,
    DebugRegion,
    ReportExtractionResult,
    StructuralWarning,
)
from kpi_report.services.rules.chart_spec import ChartSpec, ReportTemplate
from kpi_report.services.rules.pairing import PairingOutcome, pair
from kpi_report.services.rules.region_locator import RegionStrategy, find_title_token
from kpi_report.services.rules.scalar_extractor import extract_network_average, extract_scalar
from kpi_report.services.rules.token_classifier import TokenClassifier

logger = logging.getLogger(__name__)


class NoChartsDetectedError(ValueError):
    """Raised when no configured chart yields a single ranking row."""


@dataclass(frozen=True)
class _ChartAttempt:
    rect: Rect
    result: ChartResult
    pairing: PairingOutcome


class ChartAssembler:
    def __init__(
        self,
        template: ReportTemplate,
        strategy: RegionStrategy,
        *,
        classifier: TokenClassifier | None = None,
    ) -> None:
        self.template = template
        self.strategy = strategy
        self.classifier = classifier or TokenClassifier(template.registry)

    def assemble(self, layout: DocumentLayout) -> ReportExtractionResult:
        if not layout.pages:
            raise NoChartsDetectedError("Document has no pages; no KPI charts detected.")

        charts: dict[str, ChartResult] = {}
        debug_regions: list[DebugRegion] = []
        warnings: list[StructuralWarning] = []

        for spec in self.template.charts:
            page = layout.page(spec.page)
            if page is None:
                logger.debug("Chart skipped: chart=%s page=%s missing", spec.key, spec.page)
                continue
            attempt = self._assemble_chart(page, spec)
            if attempt is None:
                continue

            debug_regions.append(
                DebugRegion(
                    page=page.page_number,
                    key=spec.key,
                    rect=attempt.rect,
                    label_count=attempt.pairing.label_count,
                    value_count=attempt.pairing.value_count,
                )
            )
            if not attempt.result.ranking:
                logger.warning(
                    "Chart has no paired rows: chart=%s labels=%d values=%d",
                    spec.key,
                    attempt.pairing.label_count,
                    attempt.pairing.value_count,
                )
                continue

            charts[spec.key] = attempt.result
            warning = self._structural_warning(spec, attempt.pairing)
            if warning is not None:
                logger.warning(warning.message)
                warnings.append(warning)

        if not charts:
            logger.warning(
                "Rule extraction failed: no_charts_detected template=%s regions=%d",
                self.template.name,
                len(debug_regions),
            )
            raise NoChartsDetectedError(
                "No KPI charts detected in the report. "
                f"The document does not look like a {self.template.name} report."
            )

        return ReportExtractionResult(
            charts=charts,
            codes=distinct_codes(charts.values()),
            debug_regions=debug_regions,
            warnings=warnings,
        )

    def _assemble_chart(self, page: PageLayout, spec: ChartSpec) -> _ChartAttempt | None:
        rect = self.strategy.locate(page, spec)
        if rect is None:
            logger.info("Chart region not located: chart=%s strategy=%s", spec.key, self.strategy.name)
            return None

        classification = self.classifier.classify(page, rect, spec)
        pairing = pair(
            classification.labels,
            classification.values,
            spec.tolerance,
            spec.relaxed_tolerance,
            expected_rows=self.template.expected_rows,
        )

        title = find_title_token(page, spec, self.template.title_scan)
        target = extract_scalar(page, title, rect, spec.unit, self.template.target)

        network_avg = None
        tiles = self.template.summary_tiles
        if tiles is not None and spec.summary_tile is not None and tiles.page == page.page_number:
            network_avg = extract_network_average(page, tiles, spec.summary_tile)

        logger.debug(
            "Chart extracted: chart=%s rows=%d target=%s network_avg=%s tolerance=%s",
            spec.key,
            pairing.count,
            target,
            network_avg,
            pairing.tolerance,
        )
        result = ChartResult(
            key=spec.key,
            target=target,
            network_avg=network_avg,
            ranking=pairing.entries,
        )
        return _ChartAttempt(rect=rect, result=result, pairing=pairing)

    def _structural_warning(self, spec: ChartSpec, pairing: PairingOutcome) -> StructuralWarning | None:
        expected = self.template.expected_rows
        if expected <= 0 or pairing.count == expected:
            return None
        if pairing.label_count < expected or pairing.value_count < expected:
            kind = "tokens_missing"
            reason = "the page layout did not yield enough base or value tokens"
        else:
            kind = "pairs_missing"
            reason = "tokens were found but could not all be paired by position"
        message = (
            f"{spec.key}: extracted {pairing.count} of {expected} rows "
            f"(labels={pairing.label_count}, values={pairing.value_count}); "
            f"{reason}. This is a parsing gap, not a display filter."
        )
        return StructuralWarning(
            key=spec.key,
            kind=kind,
            expected=expected,
            actual=pairing.count,
            label_count=pairing.label_count,
            value_count=pairing.value_count,
            message=message,
        )


def distinct_codes(charts) -> list[str]:
    seen: list[str] = []
    for chart in charts:
        for entry in chart.ranking:
            if entry.code not in seen:
                seen.append(entry.code)
    return seen
