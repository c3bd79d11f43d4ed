"""Unit tests for PDF page rendering and text-layer extraction (PyMuPDF)."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.models.document import PageRange
from src.services.ingestion.page_converter import PageImageConverter
from src.services.ingestion.text_layer_extractor import TextLayerExtractor
from src.utils.errors import DocumentConversionError


@pytest.fixture
def converter(tmp_path: Path) -> PageImageConverter:
    return PageImageConverter(temp_dir=str(tmp_path / "pages"), dpi=40)


class TestPageImageConverter:
    @pytest.mark.asyncio
    async def test_converts_every_page_by_default(
        self, converter: PageImageConverter, sample_pdf: Path
    ) -> None:
        images = await converter.convert(str(sample_pdf))

        assert [i.page for i in images] == [1, 2, 3]
        for image in images:
            assert Path(image.image_path).is_file()
            assert Path(image.image_path).parent == converter.temp_dir

    @pytest.mark.asyncio
    async def test_overlapping_ranges_rendered_once(
        self, converter: PageImageConverter, sample_pdf: Path
    ) -> None:
        ranges = [PageRange(start=2, end=3), PageRange(start=3, end=3)]
        images = await converter.convert(str(sample_pdf), ranges)
        assert [i.page for i in images] == [2, 3]

    @pytest.mark.asyncio
    async def test_pages_past_end_are_skipped(
        self, converter: PageImageConverter, sample_pdf: Path
    ) -> None:
        images = await converter.convert(str(sample_pdf), [PageRange(start=3, end=9)])
        assert [i.page for i in images] == [3]

    @pytest.mark.asyncio
    async def test_temp_dir_reset_between_runs(
        self, converter: PageImageConverter, sample_pdf: Path
    ) -> None:
        await converter.convert(str(sample_pdf))
        await converter.convert(str(sample_pdf), [PageRange(start=1, end=1)])
        assert sorted(p.name for p in converter.temp_dir.iterdir()) == ["page-1.png"]

    @pytest.mark.asyncio
    async def test_missing_file(self, converter: PageImageConverter, tmp_path: Path) -> None:
        with pytest.raises(DocumentConversionError, match="PDF file not found"):
            await converter.convert(str(tmp_path / "missing.pdf"))

    @pytest.mark.asyncio
    async def test_not_a_pdf(self, converter: PageImageConverter, tmp_path: Path) -> None:
        bogus = tmp_path / "bogus.pdf"
        bogus.write_bytes(b"this is not a pdf")
        with pytest.raises(DocumentConversionError):
            await converter.convert(str(bogus))

    @pytest.mark.asyncio
    async def test_cleanup_removes_directory(
        self, converter: PageImageConverter, sample_pdf: Path
    ) -> None:
        await converter.convert(str(sample_pdf))
        converter.cleanup()
        assert not converter.temp_dir.exists()
        # A second cleanup is a no-op.
        converter.cleanup()


class TestTextLayerExtractor:
    @pytest.mark.asyncio
    async def test_extracts_pages_in_order(self, sample_pdf: Path) -> None:
        extracted = await TextLayerExtractor().extract(str(sample_pdf))

        assert [p.page for p in extracted.page_info] == [1, 2, 3]
        assert "Page 2" in extracted.page_info[1].text
        assert extracted.text.endswith("\n\n")

    @pytest.mark.asyncio
    async def test_respects_page_ranges(self, sample_pdf: Path) -> None:
        extracted = await TextLayerExtractor().extract(
            str(sample_pdf), [PageRange(start=2, end=2)]
        )
        assert [p.page for p in extracted.page_info] == [2]

    @pytest.mark.asyncio
    async def test_short_pages_dropped(self, sample_pdf: Path) -> None:
        extracted = await TextLayerExtractor(min_page_chars=10_000).extract(str(sample_pdf))
        assert extracted.page_info == []
        assert extracted.text == ""

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentConversionError):
            await TextLayerExtractor().extract(str(tmp_path / "missing.pdf"))
