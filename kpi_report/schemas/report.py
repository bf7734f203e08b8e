from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from kpi_report.schemas.layout import Rect


class Unit(str, Enum):
    PERCENT = "percent"
    MASS = "mass"


class RankingEntry(BaseModel):
    code: str = Field(..., description="Base code, e.g. SEN")
    value: int = Field(..., description="Unit-normalized metric value")


class MaskedEntry(RankingEntry):
    alias: str = Field(..., description="Identity shown to the reader")


class ChartResult(BaseModel):
    """Ranked dataset extracted for one chart."""

    key: str
    target: int | None = Field(default=None, description="FY target annotated on the chart")
    network_avg: int | None = Field(default=None, description="Network average from the summary tile")
    ranking: list[RankingEntry] = Field(default_factory=list)


class DebugRegion(BaseModel):
    page: int
    key: str
    rect: Rect
    label_count: int
    value_count: int


class StructuralWarning(BaseModel):
    key: str
    kind: Literal["tokens_missing", "pairs_missing"]
    expected: int
    actual: int
    label_count: int
    value_count: int
    message: str


class ReportExtractionResult(BaseModel):
    charts: dict[str, ChartResult] = Field(default_factory=dict)
    codes: list[str] = Field(default_factory=list)
    debug_regions: list[DebugRegion] = Field(default_factory=list)
    warnings: list[StructuralWarning] = Field(default_factory=list)


class ReportExtractionResponse(ReportExtractionResult):
    success: bool = True
    template_name: str
    message: str = "ok"


class MaskRequest(BaseModel):
    ranking: list[RankingEntry]
    subject: str = Field(..., min_length=1, description="Base code kept visible")
    hide_others: bool = True


class MaskResponse(BaseModel):
    subject: str
    ranking: list[MaskedEntry]


class CodesResponse(BaseModel):
    codes: list[str]
