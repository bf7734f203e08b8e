"""Usage: read single annotated scalars (chart target, network average) off a page."""

from __future__ import annotations

import logging
import re

from kpi_report.schemas.layout import PageLayout, Rect, Token, clip_rect, make_rect
from kpi_report.schemas.report import Unit
from kpi_report.services.rules.chart_spec import SummaryTiles, TargetRule
from kpi_report.services.rules.layout_text import join_text, reading_order, tokens_in_rect
from kpi_report.services.rules.token_classifier import parse_percent

logger = logging.getLogger(__name__)

_UNIT_SUFFIX = {
    Unit.PERCENT: (r"\d{1,3}", r"%"),
    Unit.MASS: (r"\d{1,5}", r"kg"),
}


def _target_regex(marker: str, unit: Unit) -> re.Pattern[str]:
    digits, suffix = _UNIT_SUFFIX[unit]
    return re.compile(rf"{marker}\s*({digits})\s*{suffix}", re.IGNORECASE)


def _scan_window(page: PageLayout, window: Rect | None, regex: re.Pattern[str]) -> int | None:
    if window is None:
        return None
    tokens = reading_order(tokens_in_rect(page.tokens, window))
    joined = join_text(tokens)
    match = regex.search(joined)
    if not match:
        return None
    return int(match.group(1))


def anchor_window(page: PageLayout, anchor: Token, rule: TargetRule) -> Rect | None:
    offsets = rule.anchor_window
    rect = make_rect(
        anchor.x - offsets.left,
        anchor.y - offsets.above,
        anchor.x + offsets.right,
        anchor.y + offsets.below,
    )
    return clip_rect(rect, page.width, page.height) if rect else None


def band_window(page: PageLayout, region: Rect, rule: TargetRule) -> Rect | None:
    offsets = rule.band_window
    rect = make_rect(region.x1, region.y1 - offsets.above, region.x2, region.y1 + offsets.below)
    return clip_rect(rect, page.width, page.height) if rect else None


def extract_scalar(
    page: PageLayout,
    anchor: Token | None,
    region: Rect,
    unit: Unit,
    rule: TargetRule,
) -> int | None:
    """Target annotation ("FY26 Target 80%") near the chart.

    With an anchor the window hangs off the title token; without one the band
    straddling the region's top edge is scanned instead. Returns None when
    neither window holds the annotation.
    """

    regex = _target_regex(rule.marker, unit)
    if anchor is not None:
        value = _scan_window(page, anchor_window(page, anchor, rule), regex)
        if value is not None:
            return value
        logger.debug("Target not found near title %r, scanning region band", anchor.text)
    return _scan_window(page, band_window(page, region, rule), regex)


def summary_tile_rect(page: PageLayout, tiles: SummaryTiles, column: int) -> Rect | None:
    if not 0 <= column < tiles.columns:
        return None
    col_w = page.width / tiles.columns
    rect = make_rect(
        column * col_w + tiles.margin,
        page.height * tiles.y1_frac,
        (column + 1) * col_w - tiles.margin,
        page.height * tiles.y2_frac,
    )
    return clip_rect(rect, page.width, page.height) if rect else None


def extract_network_average(page: PageLayout, tiles: SummaryTiles, column: int) -> int | None:
    rect = summary_tile_rect(page, tiles, column)
    if rect is None:
        return None
    for token in reading_order(tokens_in_rect(page.tokens, rect)):
        value = parse_percent(token.text)
        if value is not None:
            return value
    return None
