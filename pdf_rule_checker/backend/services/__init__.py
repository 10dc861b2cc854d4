"""
Services package for the rule checker.

Contains:
- pdf_service: PDF text extraction
- ai: OpenAI integration for checking one rule against document text
- checker: request validation and concurrent rule evaluation
"""

from .ai import RuleEvaluator
from .checker import RuleCheckService
from .pdf_service import PDFService

__all__ = ["PDFService", "RuleCheckService", "RuleEvaluator"]
