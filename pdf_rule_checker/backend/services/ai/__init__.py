"""
AI service package for checking documents against natural-language rules.

This package provides:
- evaluation: prompt construction, the model call and verdict normalization
- exceptions: the LLM failure classes folded into degraded verdicts

The RuleEvaluator class binds the evaluation functions to one chat client
and one set of model settings.
"""

import logging
from typing import Any

from ...config import Settings, get_settings
from ...models import RuleVerdict
from .evaluation import (
    API_FAILURE_EVIDENCE,
    API_FAILURE_REASONING,
    MALFORMED_OUTPUT_EVIDENCE,
    MALFORMED_OUTPUT_REASONING,
    NO_EVIDENCE,
    NO_REASONING,
    RULE_CHECK_SYSTEM_PROMPT,
    api_failure_verdict,
    build_verdict,
    evaluate_rule,
    normalize_confidence,
    parse_verdict_payload,
    truncate_document_text,
)
from .exceptions import AIServiceError, LLMCommunicationError, LLMMalformedOutputError

logger = logging.getLogger(__name__)

__all__ = [
    "AIServiceError",
    "LLMCommunicationError",
    "LLMMalformedOutputError",
    "RuleEvaluator",
    "RULE_CHECK_SYSTEM_PROMPT",
    "API_FAILURE_EVIDENCE",
    "API_FAILURE_REASONING",
    "MALFORMED_OUTPUT_EVIDENCE",
    "MALFORMED_OUTPUT_REASONING",
    "NO_EVIDENCE",
    "NO_REASONING",
    "build_verdict",
    "evaluate_rule",
    "normalize_confidence",
    "parse_verdict_payload",
    "truncate_document_text",
]


# =============================================================================
# RuleEvaluator Class
# =============================================================================


class RuleEvaluator:
    """
    Checks one rule at a time against extracted document text.

    Uses OpenAI's chat completions in JSON mode. A chat client can be
    injected (any object whose ``chat.completions.create`` is a coroutine);
    otherwise an AsyncOpenAI client is built lazily from the API key.
    """

    def __init__(
        self,
        client: Any = None,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        max_document_chars: int = 50_000,
        timeout: float | None = 60.0,
    ):
        """
        Initialize the evaluator.

        Args:
            client: Pre-built async chat client. Takes precedence over api_key.
            api_key: OpenAI API key used when no client is given.
            model: OpenAI model to use.
            temperature: Sampling temperature.
            max_document_chars: Character budget for the document text.
            timeout: Per-call timeout in seconds.
        """
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_document_chars = max_document_chars
        self.timeout = timeout
        self._client = client

        if client is None and not api_key:
            logger.warning(
                "OPENAI_API_KEY is not set. Every rule will fail with an API error."
            )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RuleEvaluator":
        settings = settings or get_settings()
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_document_chars=settings.max_document_chars,
            timeout=settings.openai_timeout_seconds,
        )

    @property
    def client(self):
        """Lazy-load the AsyncOpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI, OpenAIError

            try:
                # No retries: a failed call degrades to a failing verdict
                self._client = AsyncOpenAI(
                    api_key=self.api_key, timeout=self.timeout, max_retries=0
                )
            except OpenAIError as e:
                raise LLMCommunicationError(
                    f"Could not create OpenAI client: {e}"
                ) from e
        return self._client

    async def evaluate(self, rule: str, document_text: str) -> RuleVerdict:
        """
        Check one rule. Never raises.

        Args:
            rule: The trimmed rule text.
            document_text: Full extracted document text.

        Returns:
            A fully populated RuleVerdict.
        """
        try:
            client = self.client
        except LLMCommunicationError as e:
            logger.error("LLM client unavailable for rule %r: %s", rule, e)
            return api_failure_verdict(rule)

        return await evaluate_rule(
            rule,
            document_text,
            client=client,
            model=self.model,
            temperature=self.temperature,
            max_document_chars=self.max_document_chars,
            timeout=self.timeout,
        )
