from __future__ import annotations

import asyncio
import io
import logging
from typing import Any, Callable

import pdfplumber

from kpi_report.schemas.layout import DocumentLayout, PageLayout, Token
from kpi_report.services.layout.base import BaseLayoutClient

logger = logging.getLogger(__name__)


class PdfPlumberLayoutClient(BaseLayoutClient):
    """Reads positioned text runs from a PDF's text layer with pdfplumber.

    Blank characters are kept inside a run so multi-word chart titles stay a
    single token. A token's y is the bottom of its glyph box, which tracks the
    text baseline the region geometry is tuned on.
    """

    def __init__(
        self,
        *,
        opener: Callable[[Any], Any] | None = None,
        x_tolerance: float = 3.0,
        y_tolerance: float = 3.0,
    ) -> None:
        self._open = opener or pdfplumber.open
        self.x_tolerance = x_tolerance
        self.y_tolerance = y_tolerance

    async def extract(
        self,
        source: str | bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> DocumentLayout:
        loop = asyncio.get_running_loop()
        layout = await loop.run_in_executor(None, lambda: self._read(source))
        logger.info(
            "Layout extracted: %s pages=%d tokens=%d",
            filename or "bytes",
            len(layout.pages),
            sum(len(page.tokens) for page in layout.pages),
        )
        return layout

    def _read(self, source: str | bytes) -> DocumentLayout:
        handle = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
        pages: list[PageLayout] = []
        with self._open(handle) as pdf:
            for page in pdf.pages:
                pages.append(self._page_layout(page))
        return DocumentLayout(pages=pages)

    def _page_layout(self, page: Any) -> PageLayout:
        words = page.extract_words(
            keep_blank_chars=True,
            use_text_flow=True,
            x_tolerance=self.x_tolerance,
            y_tolerance=self.y_tolerance,
        )
        tokens: list[Token] = []
        for word in words:
            text = (word.get("text") or "").strip()
            if not text:
                continue
            x0, x1 = float(word["x0"]), float(word["x1"])
            top, bottom = float(word["top"]), float(word["bottom"])
            tokens.append(Token(text=text, x=x0, y=bottom, w=max(0.0, x1 - x0), h=max(0.0, bottom - top)))
        return PageLayout(
            page_number=int(page.page_number),
            width=float(page.width),
            height=float(page.height),
            tokens=tokens,
        )
