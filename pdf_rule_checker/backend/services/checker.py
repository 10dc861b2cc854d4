"""
Request orchestration for rule checking.

Validates the upload and the rules, extracts the document text once, then
checks every rule concurrently against that text.
"""

import asyncio
import json
import logging
from typing import Any, Protocol

from ..config import Settings, get_settings
from ..exceptions import (
    ExtractionFailedError,
    FileTooLargeError,
    InsufficientContentError,
    MalformedRulesError,
    MissingFileError,
    NoRulesError,
    UnsupportedFileTypeError,
)
from ..models import CheckResponse, RuleVerdict
from .ai import RuleEvaluator
from .pdf_service import PDF_CONTENT_TYPE, PDFExtractionError, PDFService

logger = logging.getLogger(__name__)


class TextExtractor(Protocol):
    """Turns PDF bytes into plain text, raising PDFExtractionError on failure."""

    def extract_text(self, file_bytes: bytes, content_type: str | None = ...) -> str: ...


class Evaluator(Protocol):
    """Judges one rule against the document text. Must return a verdict, never raise."""

    async def evaluate(self, rule: str, document_text: str) -> RuleVerdict: ...


def format_size(num_bytes: int) -> str:
    """Render a byte limit as whole megabytes when it is one, else as bytes."""
    mb = 1024 * 1024
    if num_bytes >= mb and num_bytes % mb == 0:
        return f"{num_bytes // mb} MB"
    return f"{num_bytes} bytes"


def parse_rules(rules_raw: str | None) -> list[Any]:
    """
    Decode the rules form field.

    A missing or empty field is an empty list.

    Raises:
        MalformedRulesError: If the field is not a JSON array of strings.
    """
    try:
        rules = json.loads(rules_raw or "[]")
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Rejecting malformed rules payload: %s", e)
        raise MalformedRulesError() from e

    if not isinstance(rules, list):
        logger.warning("Rejecting rules payload of type %s", type(rules).__name__)
        raise MalformedRulesError()

    if not all(rule is None or isinstance(rule, str) for rule in rules):
        logger.warning("Rejecting rules payload with non-string entries")
        raise MalformedRulesError()

    return rules


def clean_rules(rules: list[str | None]) -> list[str]:
    """Trim every rule and drop the blank ones, keeping submission order."""
    return [rule.strip() for rule in rules if rule and rule.strip()]


class RuleCheckService:
    """
    Checks one PDF against a list of rules.

    The text extractor and the evaluator are passed in so tests can
    substitute stubs for the PDF parser and the model.
    """

    def __init__(
        self,
        pdf_service: TextExtractor,
        evaluator: Evaluator,
        min_document_chars: int = 50,
        max_concurrent_evaluations: int = 5,
        max_upload_bytes: int | None = None,
    ):
        """
        Initialize the service.

        Args:
            pdf_service: Extracts plain text from PDF bytes.
            evaluator: Produces one verdict per rule.
            min_document_chars: Minimum extracted text length (stripped).
            max_concurrent_evaluations: Per-request cap on in-flight model calls.
            max_upload_bytes: Upload size limit. None disables the check.
        """
        if max_concurrent_evaluations < 1:
            raise ValueError("max_concurrent_evaluations must be at least 1")

        self.pdf_service = pdf_service
        self.evaluator = evaluator
        self.min_document_chars = min_document_chars
        self.max_concurrent_evaluations = max_concurrent_evaluations
        self.max_upload_bytes = max_upload_bytes

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        pdf_service: TextExtractor | None = None,
        evaluator: Evaluator | None = None,
    ) -> "RuleCheckService":
        settings = settings or get_settings()
        return cls(
            pdf_service=pdf_service or PDFService(),
            evaluator=evaluator or RuleEvaluator.from_settings(settings),
            min_document_chars=settings.min_document_chars,
            max_concurrent_evaluations=settings.max_concurrent_evaluations,
            max_upload_bytes=settings.max_upload_bytes,
        )

    async def extract_document_text(self, pdf_bytes: bytes, content_type: str) -> str:
        """
        Extract the document text off the event loop and enforce the minimum length.

        Raises:
            ExtractionFailedError: If the PDF cannot be parsed.
            InsufficientContentError: If the text is shorter than the minimum.
        """
        try:
            text = await asyncio.to_thread(
                self.pdf_service.extract_text, pdf_bytes, content_type
            )
        except PDFExtractionError as e:
            logger.error("PDF parsing failed: %s", e)
            raise ExtractionFailedError() from e

        text = text or ""
        logger.info("PDF text extracted. Length: %d", len(text))

        if len(text.strip()) < self.min_document_chars:
            logger.warning(
                "Extracted text is too short (%d < %d characters)",
                len(text.strip()),
                self.min_document_chars,
            )
            raise InsufficientContentError()

        return text

    async def evaluate_rules(
        self, rules: list[str], document_text: str
    ) -> list[RuleVerdict]:
        """Evaluate every rule concurrently. Results follow the order of ``rules``."""
        semaphore = asyncio.Semaphore(self.max_concurrent_evaluations)

        async def evaluate_one(rule: str) -> RuleVerdict:
            async with semaphore:
                return await self.evaluator.evaluate(rule, document_text)

        logger.info(
            "Checking %d rule(s), max %d concurrent",
            len(rules),
            self.max_concurrent_evaluations,
        )
        return list(await asyncio.gather(*(evaluate_one(rule) for rule in rules)))

    def check_upload_size(self, size: int | None) -> None:
        """
        Reject uploads above ``max_upload_bytes``. An unknown size passes.

        Raises:
            FileTooLargeError: If the upload is larger than the limit.
        """
        if self.max_upload_bytes is None or size is None:
            return
        if size > self.max_upload_bytes:
            logger.warning("Rejecting upload of %d bytes", size)
            raise FileTooLargeError(
                "PDF file exceeds the maximum upload size of "
                f"{format_size(self.max_upload_bytes)}."
            )

    def validate_request(
        self,
        has_file: bool,
        content_type: str | None,
        size: int | None,
        rules_raw: str | None,
    ) -> list[str]:
        """
        Validate everything that does not need the file content.

        Validation stops at the first violation, in this order: rules
        payload, file presence, file type, upload size, non-blank rules.

        Args:
            has_file: Whether a file part was uploaded.
            content_type: Declared media type of the upload.
            size: Upload size in bytes, if known before reading.
            rules_raw: The rules form field (a JSON array of strings).

        Returns:
            The trimmed, non-blank rules in submission order.
        """
        raw_rules = parse_rules(rules_raw)

        if not has_file:
            logger.warning("Rejecting request without a PDF file")
            raise MissingFileError()

        if content_type != PDF_CONTENT_TYPE:
            logger.warning("Rejecting upload with content type %r", content_type)
            raise UnsupportedFileTypeError()

        self.check_upload_size(size)

        rules = clean_rules(raw_rules)
        if not rules:
            logger.warning("Rejecting request without usable rules")
            raise NoRulesError()

        return rules

    async def process(
        self, pdf_bytes: bytes, content_type: str, rules: list[str]
    ) -> CheckResponse:
        """Extract the text once and check every validated rule against it."""
        document_text = await self.extract_document_text(pdf_bytes, content_type)
        results = await self.evaluate_rules(rules, document_text)

        return CheckResponse(results=results)

    async def check(
        self,
        pdf_bytes: bytes | None,
        content_type: str | None,
        rules_raw: str | None,
    ) -> CheckResponse:
        """
        Validate the request, extract the text and check every rule.

        Args:
            pdf_bytes: Uploaded file content, or None if no file was sent.
            content_type: Declared media type of the upload.
            rules_raw: The rules form field (a JSON array of strings).

        Returns:
            One verdict per non-blank rule, in submission order.
        """
        rules = self.validate_request(
            has_file=pdf_bytes is not None,
            content_type=content_type,
            size=len(pdf_bytes) if pdf_bytes is not None else None,
            rules_raw=rules_raw,
        )
        return await self.process(pdf_bytes, content_type, rules)
