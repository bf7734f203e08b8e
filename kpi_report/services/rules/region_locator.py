"""Usage: map a (page, chart) pair to the chart's bounding rectangle."""

from __future__ import annotations

import logging
import math
from typing import Protocol, runtime_checkable

from kpi_report.schemas.layout import PageLayout, Rect, Token, clip_rect, make_rect
from kpi_report.services.rules.chart_spec import ChartSpec, ReportTemplate, TitleScan

logger = logging.getLogger(__name__)


@runtime_checkable
class RegionStrategy(Protocol):
    name: str

    def locate(self, page: PageLayout, spec: ChartSpec) -> Rect | None:
        """Return the chart's rectangle on the page, or None if it cannot be placed."""
        ...


def find_title_token(
    page: PageLayout,
    spec: ChartSpec,
    scan: TitleScan,
    *,
    min_x: float = -math.inf,
    max_x: float = math.inf,
) -> Token | None:
    """Topmost token matching the chart title inside the vertical scan band.

    The band keeps out repeats of the title in page headers, legends and
    footers.
    """

    regex = spec.title_regex
    min_y = page.height * scan.min_y_frac
    max_y = page.height * scan.max_y_frac
    candidates = [
        token
        for token in page.tokens
        if regex.search(token.text) and min_y < token.y < max_y and min_x <= token.x <= max_x
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda token: (token.y, token.x))


def column_rect(
    page: PageLayout,
    index: int,
    columns: int,
    *,
    margin: float,
    y1: float,
    y2: float,
) -> Rect | None:
    col_w = page.width / columns
    rect = make_rect(index * col_w + margin, y1, (index + 1) * col_w - margin, y2)
    if rect is None:
        return None
    return clip_rect(rect, page.width, page.height)


class DeterministicRegionStrategy:
    """Fixed fractional geometry per page; ignores token content."""

    name = "deterministic"

    def __init__(self, template: ReportTemplate) -> None:
        self._template = template

    def locate(self, page: PageLayout, spec: ChartSpec) -> Rect | None:
        if spec.page != page.page_number:
            return None
        geometry = self._template.pages.get(page.page_number)
        if geometry is None:
            logger.debug("No page geometry for page=%s chart=%s", page.page_number, spec.key)
            return None
        if not 0 <= spec.column < geometry.columns:
            logger.warning(
                "Chart column out of range: chart=%s column=%s columns=%s",
                spec.key,
                spec.column,
                geometry.columns,
            )
            return None
        return column_rect(
            page,
            spec.column,
            geometry.columns,
            margin=geometry.margin,
            y1=page.height * geometry.y1_frac,
            y2=page.height * geometry.y2_frac,
        )


class TitleAnchoredRegionStrategy:
    """Region hangs below the chart's title token.

    ``column_mode="position"`` takes the column from the title's x position;
    ``column_mode="rank"`` takes it from the title's left-to-right rank among
    every chart title found on the same page, for layouts whose titles are not
    left-aligned in their column.
    """

    name = "title"

    def __init__(self, template: ReportTemplate, *, column_mode: str = "position") -> None:
        if column_mode not in {"position", "rank"}:
            raise ValueError(f"Unknown title column mode: {column_mode}")
        self._template = template
        self.column_mode = column_mode

    def locate(self, page: PageLayout, spec: ChartSpec) -> Rect | None:
        if spec.page != page.page_number:
            return None
        geometry = self._template.pages.get(page.page_number)
        if geometry is None:
            return None
        title = find_title_token(page, spec, self._template.title_scan)
        if title is None:
            logger.debug("Chart title not found: chart=%s page=%s", spec.key, page.page_number)
            return None

        columns = geometry.title_columns
        if self.column_mode == "rank":
            index = self._title_rank(page, spec)
        else:
            index = math.floor(title.x / (page.width / columns))
        index = max(0, min(columns - 1, index))

        return column_rect(
            page,
            index,
            columns,
            margin=geometry.title_margin,
            y1=title.y + geometry.title_top_offset,
            y2=min(page.height - geometry.title_margin, title.y + geometry.title_height),
        )

    def _title_rank(self, page: PageLayout, spec: ChartSpec) -> int:
        located: list[tuple[float, str]] = []
        for sibling in self._template.charts_on_page(page.page_number):
            token = find_title_token(page, sibling, self._template.title_scan)
            if token is not None:
                located.append((token.x, sibling.key))
        located.sort()
        keys = [key for _, key in located]
        return keys.index(spec.key)


def build_region_strategy(
    name: str,
    template: ReportTemplate,
    *,
    column_mode: str = "position",
) -> RegionStrategy:
    if name == "deterministic":
        return DeterministicRegionStrategy(template)
    if name == "title":
        return TitleAnchoredRegionStrategy(template, column_mode=column_mode)
    raise ValueError(f"Unknown region strategy: {name}")
