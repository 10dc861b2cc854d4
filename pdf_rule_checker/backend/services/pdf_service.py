"""
PDF processing service using PyMuPDF.

Handles extraction of plain text from PDF documents for rule checking.
"""

import logging
from typing import BinaryIO

import fitz  # PyMuPDF

from ..exceptions import UnsupportedFileTypeError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class PDFExtractionError(Exception):
    """Raised when text extraction from a PDF fails."""

    pass


def _read_bytes(file_bytes: bytes | BinaryIO) -> bytes:
    if hasattr(file_bytes, "read"):
        return file_bytes.read()
    return file_bytes


class PDFService:
    """
    Service for PDF processing operations.

    Uses PyMuPDF (fitz) to read the text layer of every page.
    """

    def __init__(self, page_separator: str = "\n"):
        """
        Initialize the PDF service.

        Args:
            page_separator: String inserted between the text of consecutive pages.
        """
        self.page_separator = page_separator

    def _open(self, pdf_bytes: bytes) -> fitz.Document:
        if not pdf_bytes:
            raise PDFExtractionError("Empty PDF file provided")

        # Validate PDF magic bytes
        if not pdf_bytes[:4] == b"%PDF":
            raise PDFExtractionError(
                "Invalid PDF file: does not start with PDF header"
            )

        try:
            return fitz.open(stream=pdf_bytes, filetype="pdf")
        except Exception as e:
            logger.error("Could not open PDF: %s", e)
            raise PDFExtractionError(f"Invalid or corrupted PDF file: {e}") from e

    def extract_text(
        self,
        file_bytes: bytes | BinaryIO,
        content_type: str | None = PDF_CONTENT_TYPE,
    ) -> str:
        """
        Extract the plain text of every page.

        Args:
            file_bytes: PDF file as bytes or file-like object.
            content_type: Declared media type of the upload.

        Returns:
            The document text, pages joined by ``page_separator``.

        Raises:
            UnsupportedFileTypeError: If the content type is not application/pdf.
            PDFExtractionError: If the document cannot be parsed.
        """
        if content_type != PDF_CONTENT_TYPE:
            raise UnsupportedFileTypeError()

        pdf_bytes = _read_bytes(file_bytes)
        doc = self._open(pdf_bytes)

        try:
            if doc.page_count == 0:
                raise PDFExtractionError("No pages found in PDF")

            pages = [page.get_text("text") or "" for page in doc]
            text = self.page_separator.join(pages)

            logger.info(
                "Extracted %d characters from %d page(s)", len(text), doc.page_count
            )
            return text

        except PDFExtractionError:
            raise
        except Exception as e:
            logger.exception("Unexpected error during PDF text extraction")
            raise PDFExtractionError(f"PDF text extraction failed: {e}") from e
        finally:
            doc.close()
