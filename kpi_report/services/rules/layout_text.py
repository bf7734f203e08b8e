"""Usage: shared token filtering, ordering and line clustering helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from kpi_report.schemas.layout import Rect, Token


@dataclass
class Line:
    tokens: list[Token]
    y_center: float

    def sorted_tokens(self) -> list[Token]:
        return sorted(self.tokens, key=lambda token: token.x)


def sort_top_to_bottom(tokens: Iterable[Token]) -> list[Token]:
    return sorted(tokens, key=lambda token: (token.y, token.x))


def tokens_in_rect(tokens: Iterable[Token], rect: Rect) -> list[Token]:
    return [token for token in tokens if rect.contains(token)]


def cluster_lines(tokens: Iterable[Token], *, y_tol: float) -> list[Line]:
    lines: list[Line] = []
    for token in sorted(tokens, key=lambda t: t.y):
        target_line: Line | None = None
        for line in reversed(lines):
            if abs(line.y_center - token.y) <= y_tol:
                target_line = line
                break
        if target_line is None:
            lines.append(Line(tokens=[token], y_center=token.y))
        else:
            target_line.tokens.append(token)
            target_line.y_center = (target_line.y_center + token.y) / 2
    return lines


def reading_order(tokens: Sequence[Token], *, y_tol: float = 3.0) -> list[Token]:
    """Tokens line by line, left to right within a line."""

    ordered: list[Token] = []
    for line in sorted(cluster_lines(tokens, y_tol=y_tol), key=lambda entry: entry.y_center):
        ordered.extend(line.sorted_tokens())
    return ordered


def join_text(tokens: Sequence[Token], *, separator: str = " ") -> str:
    return separator.join(token.text for token in tokens)
