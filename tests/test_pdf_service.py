"""Tests for PDF service."""

import io

import pytest

from pdf_rule_checker.backend.exceptions import UnsupportedFileTypeError
from pdf_rule_checker.backend.services.pdf_service import (
    PDFExtractionError,
    PDFService,
)


class TestPDFService:
    """Tests for PDFService class."""

    def test_init_default_values(self):
        """Test PDFService joins pages with a newline by default."""
        service = PDFService()
        assert service.page_separator == "\n"

    def test_extract_text(self, sample_pdf_bytes: bytes):
        """Test that text is read from the PDF text layer."""
        text = PDFService().extract_text(sample_pdf_bytes)
        assert "March 3rd, 2024" in text
        assert "Project Proposal" in text

    def test_extract_text_from_file_like(self, sample_pdf_bytes: bytes):
        text = PDFService().extract_text(io.BytesIO(sample_pdf_bytes))
        assert "March 3rd, 2024" in text

    def test_extract_text_joins_pages(self):
        import fitz

        doc = fitz.open()
        for label in ("First page body", "Second page body"):
            page = doc.new_page()
            page.insert_text((72, 72), label)
        pdf_bytes = doc.tobytes()
        doc.close()

        text = PDFService(page_separator="\f").extract_text(pdf_bytes)
        first, second = text.split("\f")
        assert "First page body" in first
        assert "Second page body" in second

    def test_wrong_content_type_raises_error(self, sample_pdf_bytes: bytes):
        """Test that only application/pdf uploads are accepted."""
        with pytest.raises(UnsupportedFileTypeError):
            PDFService().extract_text(sample_pdf_bytes, content_type="text/plain")

    def test_missing_content_type_raises_error(self, sample_pdf_bytes: bytes):
        with pytest.raises(UnsupportedFileTypeError):
            PDFService().extract_text(sample_pdf_bytes, content_type=None)

    def test_extract_empty_file_raises_error(self):
        """Test that empty file raises PDFExtractionError."""
        with pytest.raises(PDFExtractionError) as exc_info:
            PDFService().extract_text(b"")
        assert "Empty" in str(exc_info.value)

    def test_extract_invalid_pdf_raises_error(self, invalid_file_bytes: bytes):
        """Test that non-PDF content raises PDFExtractionError."""
        with pytest.raises(PDFExtractionError) as exc_info:
            PDFService().extract_text(invalid_file_bytes)
        assert "does not start with PDF header" in str(exc_info.value)

    def test_extract_corrupted_pdf_raises_error(self):
        """Test that a PDF header followed by garbage is reported, not crashed on."""
        with pytest.raises(PDFExtractionError):
            PDFService().extract_text(b"%PDF-1.4\n" + b"\x00\x01garbage" * 20)

    def test_short_pdf_still_extracts(self, short_pdf_bytes: bytes):
        """The minimum-length check belongs to the caller, not the extractor."""
        text = PDFService().extract_text(short_pdf_bytes)
        assert "Hello" in text

