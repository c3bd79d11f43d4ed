"""Source-document models: page ranges, rendered pages and OCR output."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PageRange(BaseModel):
    """An inclusive range of 1-based page numbers.

    ``end`` may equal ``start`` for a single page; ``end < start`` fails
    validation.
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=1, description="First page, 1-based.")
    end: int = Field(ge=1, description="Last page, inclusive.")
    description: str | None = Field(default=None, description="Operator-facing label.")

    @model_validator(mode="after")
    def _check_order(self) -> PageRange:
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must not be before start ({self.start})")
        return self

    def pages(self) -> Iterator[int]:
        """Yield every page number in the range."""
        return iter(range(self.start, self.end + 1))


def pages_in_ranges(ranges: Iterable[PageRange]) -> list[int]:
    """Union of all pages covered by *ranges*, sorted ascending."""
    pages: set[int] = set()
    for page_range in ranges:
        pages.update(page_range.pages())
    return sorted(pages)


class PageImage(BaseModel):
    """A rendered page image in the converter's temp directory."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    image_path: str


class PageText(BaseModel):
    """Normalized text recognized on one page."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    text: str


class ExtractedText(BaseModel):
    """Combined OCR output for a document.

    ``text`` is every kept page's text followed by a blank line, in page
    order.  ``page_info`` keeps the per-page texts for page attribution.
    """

    model_config = ConfigDict(frozen=True)

    text: str = ""
    page_info: list[PageText] = Field(default_factory=list)


class ProcessingStats(BaseModel):
    """Aggregate numbers over a list of chunks."""

    model_config = ConfigDict(frozen=True)

    total_chunks: int = Field(default=0, ge=0)
    total_characters: int = Field(default=0, ge=0)
    average_chunk_size: int = Field(default=0, ge=0)
    pages_processed: int = Field(default=0, ge=0, description="Distinct attributed pages.")
