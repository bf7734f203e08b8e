from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Token(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    x: float = Field(..., description="Left x coordinate (top-left origin)")
    y: float = Field(..., description="Baseline y coordinate, grows downward")
    w: float = Field(default=0.0, ge=0)
    h: float = Field(default=0.0, ge=0)

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        """Tokens are stored trimmed; blank runs are never a token."""

        value = value.strip()
        if not value:
            raise ValueError("Token text cannot be empty")
        return value


class PageLayout(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_number: int = Field(..., ge=1)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    tokens: list[Token] = Field(default_factory=list)


class DocumentLayout(BaseModel):
    pages: list[PageLayout] = Field(default_factory=list)

    def page(self, number: int) -> PageLayout | None:
        for page in self.pages:
            if page.page_number == number:
                return page
        return None


class Rect(BaseModel):
    model_config = ConfigDict(frozen=True)

    x1: float
    y1: float
    x2: float
    y2: float

    @model_validator(mode="after")
    def _check_order(self) -> "Rect":
        if self.x1 >= self.x2 or self.y1 >= self.y2:
            raise ValueError(
                f"Rect must satisfy x1<x2 and y1<y2, got ({self.x1}, {self.y1}, {self.x2}, {self.y2})"
            )
        return self

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    def contains(self, token: Token) -> bool:
        return self.x1 <= token.x <= self.x2 and self.y1 <= token.y <= self.y2

    def as_xyxy(self) -> list[float]:
        """Return the rectangle as a simple [x1, y1, x2, y2] list."""

        return [self.x1, self.y1, self.x2, self.y2]


def make_rect(x1: float, y1: float, x2: float, y2: float) -> Rect | None:
    """Build a rect, or None when the corners do not span a positive area."""

    if x1 >= x2 or y1 >= y2:
        return None
    return Rect(x1=x1, y1=y1, x2=x2, y2=y2)


def clip_rect(rect: Rect, width: float, height: float) -> Rect | None:
    return make_rect(
        max(0.0, rect.x1),
        max(0.0, rect.y1),
        min(width, rect.x2),
        min(height, rect.y2),
    )


def inset_rect(rect: Rect, *, top: float = 0.0, bottom: float = 0.0) -> Rect | None:
    return make_rect(rect.x1, rect.y1 + top, rect.x2, rect.y2 - bottom)
