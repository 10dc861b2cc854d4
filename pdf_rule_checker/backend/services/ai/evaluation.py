"""
Rule evaluation: ask the model whether a document satisfies one rule.

Every failure is folded into a failing verdict, so a single bad rule never
aborts its siblings.
"""

import json
import logging
import math
from typing import Any

from openai import OpenAIError

from ...models import RuleStatus, RuleVerdict
from .exceptions import LLMCommunicationError, LLMMalformedOutputError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_DOCUMENT_CHARS = 50_000


# =============================================================================
# Rule Check System Prompt
# =============================================================================

RULE_CHECK_SYSTEM_PROMPT = """You are an AI that checks whether a PDF document satisfies simple natural-language rules.

You will receive:
- "rule": a requirement written by the user
- "documentText": the plain text extracted from the PDF

Your job:
1. Decide if the document satisfies the rule: "pass" or "fail".
2. Provide ONE short evidence sentence from the document (or a very close paraphrase).
3. Provide 1-2 sentences of reasoning.
4. Give an integer confidence score from 0 to 100.

Return STRICT JSON with this shape:

{
    "rule": string,
    "status": "pass" | "fail",
    "evidence": string,
    "reasoning": string,
    "confidence": number
}

Do NOT include any extra keys or text outside of JSON.
If the rule doesn't make sense for the document at all, return "fail" with low confidence."""


# Placeholders substituted into degraded verdicts
NO_EVIDENCE = "No evidence found."
NO_REASONING = "Failed to process LLM response."

MALFORMED_OUTPUT_EVIDENCE = "LLM Error"
MALFORMED_OUTPUT_REASONING = "LLM output was not valid JSON."

API_FAILURE_EVIDENCE = "API Error"
API_FAILURE_REASONING = (
    "Failed to communicate with the LLM API. "
    "Check OPENAI_API_KEY and billing status."
)


# =============================================================================
# Helper Functions
# =============================================================================


def truncate_document_text(
    document_text: str, max_chars: int = DEFAULT_MAX_DOCUMENT_CHARS
) -> str:
    """Cut the text to its first ``max_chars`` characters."""
    if len(document_text) > max_chars:
        return document_text[:max_chars]
    return document_text


def build_user_content(rule: str, document_text: str) -> str:
    """Serialize the rule and document text as the user message."""
    return json.dumps({"rule": rule, "documentText": document_text})


def _normalize_status(value: Any) -> RuleStatus:
    if isinstance(value, str):
        try:
            return RuleStatus(value.strip().lower())
        except ValueError:
            pass
    return RuleStatus.FAIL


def _normalize_text(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        value = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
    return value.strip() or default


def normalize_confidence(value: Any) -> int:
    """
    Coerce a model-reported confidence to an integer in 0..100.

    Missing, non-numeric, boolean and NaN values become 0.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return 0
    return max(0, min(100, int(round(value))))


def parse_verdict_payload(content: str | None) -> dict[str, Any]:
    """
    Parse the raw message content into a JSON object.

    Empty content is treated as an empty object.

    Raises:
        LLMMalformedOutputError: If the content is not a JSON object.
    """
    try:
        payload = json.loads(content or "{}")
    except json.JSONDecodeError as e:
        raise LLMMalformedOutputError(f"Invalid JSON in rule check response: {e}") from e

    if not isinstance(payload, dict):
        raise LLMMalformedOutputError(
            f"Expected a JSON object, got {type(payload).__name__}"
        )
    return payload


def build_verdict(rule: str, payload: dict[str, Any]) -> RuleVerdict:
    """Normalize a parsed model reply. The rule always comes from the caller."""
    return RuleVerdict(
        rule=rule,
        status=_normalize_status(payload.get("status")),
        evidence=_normalize_text(payload.get("evidence"), NO_EVIDENCE),
        reasoning=_normalize_text(payload.get("reasoning"), NO_REASONING),
        confidence=normalize_confidence(payload.get("confidence")),
    )


def malformed_output_verdict(rule: str) -> RuleVerdict:
    return RuleVerdict(
        rule=rule,
        status=RuleStatus.FAIL,
        evidence=MALFORMED_OUTPUT_EVIDENCE,
        reasoning=MALFORMED_OUTPUT_REASONING,
        confidence=0,
    )


def api_failure_verdict(rule: str) -> RuleVerdict:
    return RuleVerdict(
        rule=rule,
        status=RuleStatus.FAIL,
        evidence=API_FAILURE_EVIDENCE,
        reasoning=API_FAILURE_REASONING,
        confidence=0,
    )


# =============================================================================
# Main Evaluation Functions
# =============================================================================


async def _request_rule_check(
    rule: str,
    document_text: str,
    client: Any,
    model: str,
    temperature: float,
    timeout: float | None,
) -> str | None:
    """Send one rule check to the model and return the raw message content."""
    request_kwargs: dict[str, Any] = {}
    if timeout is not None:
        request_kwargs["timeout"] = timeout

    try:
        response = await client.chat.completions.create(
            model=model,
            response_format={"type": "json_object"},
            temperature=temperature,
            messages=[
                {"role": "system", "content": RULE_CHECK_SYSTEM_PROMPT},
                {"role": "user", "content": build_user_content(rule, document_text)},
            ],
            **request_kwargs,
        )
    except OpenAIError as e:
        raise LLMCommunicationError(f"OpenAI API call failed: {e}") from e

    if not response.choices:
        return None
    return response.choices[0].message.content


async def evaluate_rule(
    rule: str,
    document_text: str,
    client: Any,  # AsyncOpenAI client
    model: str = DEFAULT_MODEL,
    temperature: float = DEFAULT_TEMPERATURE,
    max_document_chars: int = DEFAULT_MAX_DOCUMENT_CHARS,
    timeout: float | None = None,
) -> RuleVerdict:
    """
    Check whether the document satisfies a single rule.

    Never raises: malformed model output and failed API calls each map to
    their own failing verdict with confidence 0.

    Args:
        rule: The trimmed rule text.
        document_text: Full extracted document text.
        client: Async chat client exposing ``chat.completions.create``.
        model: Model name to use.
        temperature: Sampling temperature, kept low for repeatable verdicts.
        max_document_chars: Character budget for the document text.
        timeout: Per-call timeout in seconds.

    Returns:
        A fully populated RuleVerdict.
    """
    truncated_text = truncate_document_text(document_text, max_document_chars)
    if len(truncated_text) < len(document_text):
        logger.info(
            "Document text truncated from %d to %d characters",
            len(document_text),
            len(truncated_text),
        )

    try:
        content = await _request_rule_check(
            rule, truncated_text, client, model, temperature, timeout
        )
        payload = parse_verdict_payload(content)
    except LLMMalformedOutputError as e:
        logger.error("Failed to parse LLM JSON for rule %r: %s", rule, e)
        return malformed_output_verdict(rule)
    except LLMCommunicationError as e:
        logger.error("LLM call failed for rule %r: %s", rule, e)
        return api_failure_verdict(rule)
    except Exception:
        logger.exception("Unexpected error while checking rule %r", rule)
        return api_failure_verdict(rule)

    verdict = build_verdict(rule, payload)
    logger.info(
        "Rule %r -> %s (confidence=%d)", rule, verdict.status.value, verdict.confidence
    )
    return verdict
