"""Usage: split the tokens of a chart region into base labels and metric values."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from kpi_report.schemas.layout import PageLayout, Rect, inset_rect
from kpi_report.schemas.report import Unit
from kpi_report.services.rules.chart_spec import ChartSpec, TokenRegistry
from kpi_report.services.rules.layout_text import sort_top_to_bottom, tokens_in_rect

logger = logging.getLogger(__name__)

_PERCENT_RE = re.compile(r"^(\d{1,3})%$")
_MASS_RE = re.compile(r"^(\d{2,6})\s*(?:k+g+)?$", re.IGNORECASE)

# Mass values are sometimes rendered with every glyph pair doubled, so that
# "220kg" comes out as "220099kkgg". Any digit run of MASS_GLITCH_MIN_DIGITS
# or more is that artifact and is read as its first MASS_CANONICAL_DIGITS
# digits. Only the 3-digit doubled form has been observed.
MASS_GLITCH_MIN_DIGITS = 6
MASS_CANONICAL_DIGITS = 3
MASS_RANGE = (100, 2000)
PERCENT_RANGE = (0, 100)


@dataclass(frozen=True)
class LabelToken:
    code: str
    y: float
    x: float = 0.0


@dataclass(frozen=True)
class ValueToken:
    value: int
    y: float
    x: float = 0.0


@dataclass(frozen=True)
class Classification:
    labels: list[LabelToken]
    values: list[ValueToken]

    @property
    def label_count(self) -> int:
        return len(self.labels)

    @property
    def value_count(self) -> int:
        return len(self.values)


def parse_percent(text: str) -> int | None:
    match = _PERCENT_RE.match(text)
    if not match:
        return None
    value = int(match.group(1))
    low, high = PERCENT_RANGE
    if not low <= value <= high:
        return None
    return value


def normalize_mass_digits(digits: str) -> int:
    if len(digits) >= MASS_GLITCH_MIN_DIGITS:
        return int(digits[:MASS_CANONICAL_DIGITS])
    return int(digits)


def parse_mass(text: str) -> int | None:
    match = _MASS_RE.match(text)
    if not match:
        return None
    value = normalize_mass_digits(match.group(1))
    low, high = MASS_RANGE
    if not low <= value <= high:
        return None
    return value


def parse_value(text: str, unit: Unit) -> int | None:
    if unit is Unit.PERCENT:
        return parse_percent(text)
    return parse_mass(text)


class TokenClassifier:
    def __init__(self, registry: TokenRegistry) -> None:
        self.registry = registry

    def classify(self, page: PageLayout, rect: Rect, spec: ChartSpec) -> Classification:
        inner = inset_rect(rect, top=spec.inset_top, bottom=spec.inset_bottom)
        if inner is None:
            logger.debug("Region too small after inset: chart=%s rect=%s", spec.key, rect.as_xyxy())
            return Classification(labels=[], values=[])

        region_tokens = sort_top_to_bottom(tokens_in_rect(page.tokens, inner))
        label_max_x = rect.x1 + rect.width * spec.label_split
        value_min_x = rect.x1 + rect.width * spec.value_split

        labels: list[LabelToken] = []
        seen: set[str] = set()
        values: list[ValueToken] = []
        for token in region_tokens:
            if token.x <= label_max_x and self.registry.is_code(token.text):
                if token.text not in seen:
                    seen.add(token.text)
                    labels.append(LabelToken(code=token.text, y=token.y, x=token.x))
            if token.x >= value_min_x and not self.registry.is_axis_tick(token.text, spec.unit):
                value = parse_value(token.text, spec.unit)
                if value is not None:
                    values.append(ValueToken(value=value, y=token.y, x=token.x))

        logger.debug(
            "Classified chart=%s tokens=%d labels=%d values=%d",
            spec.key,
            len(region_tokens),
            len(labels),
            len(values),
        )
        return Classification(labels=labels, values=values)
