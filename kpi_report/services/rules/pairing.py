"""Usage: greedy nearest-vertical-neighbour pairing of labels and values.

Each label, top to bottom, takes the closest still-unused value if it lies
within the tolerance. There is no backtracking: an earlier label can claim the
value a later label needed. Tolerance tiers are tried in order; a later tier
only runs while the result is short of the expected row count with exactly
that many labels and values on hand, and it only replaces the current best
when it yields strictly more pairs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from kpi_report.schemas.report import RankingEntry
from kpi_report.services.rules.token_classifier import LabelToken, ValueToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PairingAttempt:
    tolerance: float
    entries: list[RankingEntry]

    @property
    def count(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class PairingOutcome:
    entries: list[RankingEntry]
    label_count: int
    value_count: int
    attempts: list[PairingAttempt] = field(default_factory=list)
    tolerance: float | None = None

    @property
    def count(self) -> int:
        return len(self.entries)


def match_greedy(
    labels: Sequence[LabelToken],
    values: Sequence[ValueToken],
    tolerance: float,
) -> list[RankingEntry]:
    used = [False] * len(values)
    entries: list[RankingEntry] = []
    for label in labels:
        best_idx = -1
        best_dy = float("inf")
        for idx, value in enumerate(values):
            if used[idx]:
                continue
            dy = abs(value.y - label.y)
            if dy < best_dy:
                best_dy = dy
                best_idx = idx
        if best_idx >= 0 and best_dy <= tolerance:
            used[best_idx] = True
            entries.append(RankingEntry(code=label.code, value=values[best_idx].value))
    return entries


def _should_retry(best: PairingAttempt, label_count: int, value_count: int, expected_rows: int) -> bool:
    return best.count < expected_rows and label_count == expected_rows and value_count == expected_rows


def pair_with_tiers(
    labels: Sequence[LabelToken],
    values: Sequence[ValueToken],
    tiers: Sequence[float],
    *,
    expected_rows: int,
) -> PairingOutcome:
    if not tiers:
        raise ValueError("At least one tolerance tier is required")

    attempts: list[PairingAttempt] = []
    best: PairingAttempt | None = None
    for tolerance in tiers:
        if best is not None and not _should_retry(best, len(labels), len(values), expected_rows):
            break
        attempt = PairingAttempt(tolerance=tolerance, entries=match_greedy(labels, values, tolerance))
        attempts.append(attempt)
        if best is None or attempt.count > best.count:
            if best is not None:
                logger.debug(
                    "Relaxed pairing adopted: tolerance=%s pairs=%d (was %d)",
                    tolerance,
                    attempt.count,
                    best.count,
                )
            best = attempt

    assert best is not None
    return PairingOutcome(
        entries=best.entries,
        label_count=len(labels),
        value_count=len(values),
        attempts=attempts,
        tolerance=best.tolerance,
    )


def pair(
    labels: Sequence[LabelToken],
    values: Sequence[ValueToken],
    tolerance_primary: float,
    tolerance_relaxed: float,
    *,
    expected_rows: int,
) -> PairingOutcome:
    return pair_with_tiers(
        labels,
        values,
        (tolerance_primary, tolerance_relaxed),
        expected_rows=expected_rows,
    )
