"""Usage: mask every base in a ranking except the selected one."""

from __future__ import annotations

from typing import Mapping, Sequence

from kpi_report.schemas.report import MaskedEntry, RankingEntry

DEFAULT_ALIAS_PREFIX = "ALIAS"


def _norm(code: str | None) -> str:
    return str(code or "").strip().upper()


def build_pseudonym_map(
    ranking: Sequence[RankingEntry],
    subject: str | None,
    *,
    prefix: str = DEFAULT_ALIAS_PREFIX,
) -> dict[str, str]:
    """Sequential aliases in ranking order; the subject keeps its own code."""

    selected = _norm(subject)
    mapping: dict[str, str] = {}
    n = 1
    for entry in ranking:
        code = _norm(entry.code)
        if not code or code == selected or code in mapping:
            continue
        mapping[code] = f"{prefix}{n}"
        n += 1
    if selected:
        mapping[selected] = selected
    return mapping


def mask_ranking(
    ranking: Sequence[RankingEntry],
    mapping: Mapping[str, str],
    subject: str | None,
    *,
    prefix: str = DEFAULT_ALIAS_PREFIX,
) -> list[MaskedEntry]:
    selected = _norm(subject)
    masked: list[MaskedEntry] = []
    for entry in ranking:
        code = _norm(entry.code)
        alias = selected if code == selected else mapping.get(code, prefix)
        masked.append(MaskedEntry(code=entry.code, value=entry.value, alias=alias))
    return masked


def unmasked_ranking(ranking: Sequence[RankingEntry]) -> list[MaskedEntry]:
    return [MaskedEntry(code=entry.code, value=entry.value, alias=entry.code) for entry in ranking]
