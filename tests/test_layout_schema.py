from __future__ import annotations

import pytest
from pydantic import ValidationError

from kpi_report.schemas.layout import DocumentLayout, PageLayout, Rect, Token, clip_rect, inset_rect


def test_token_text_is_trimmed_and_required() -> None:
    assert Token(text="  SEN ", x=1, y=2).text == "SEN"
    with pytest.raises(ValidationError):
        Token(text="   ", x=1, y=2)


def test_tokens_are_immutable() -> None:
    item = Token(text="SEN", x=1, y=2)

    with pytest.raises(ValidationError):
        item.x = 5


def test_rect_requires_positive_extent() -> None:
    with pytest.raises(ValidationError):
        Rect(x1=10, y1=0, x2=10, y2=5)


def test_rect_contains_edges() -> None:
    rect = Rect(x1=0, y1=0, x2=10, y2=10)

    assert rect.contains(Token(text="a", x=10, y=0))
    assert not rect.contains(Token(text="a", x=10.5, y=0))


def test_clip_and_inset() -> None:
    rect = Rect(x1=-5, y1=20, x2=900, y2=1200)

    clipped = clip_rect(rect, 800, 1000)

    assert clipped is not None
    assert clipped.as_xyxy() == [0, 20, 800, 1000]
    assert inset_rect(clipped, top=10, bottom=2).as_xyxy() == [0, 30, 800, 998]
    assert inset_rect(Rect(x1=0, y1=0, x2=5, y2=5), top=4, bottom=4) is None
    assert clip_rect(Rect(x1=900, y1=0, x2=950, y2=5), 800, 1000) is None


def test_document_page_lookup() -> None:
    layout = DocumentLayout(pages=[PageLayout(page_number=2, width=10, height=10)])

    assert layout.page(2) is not None
    assert layout.page(1) is None
