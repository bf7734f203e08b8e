from typing import Protocol, runtime_checkable

from kpi_report.schemas.layout import DocumentLayout


@runtime_checkable
class BaseLayoutClient(Protocol):
    async def extract(
        self,
        source: str | bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> DocumentLayout:
        """Read the positioned text tokens of every page of the document."""
        ...
