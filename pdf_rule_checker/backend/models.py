"""
Pydantic models for the rule checking pipeline.

Defines the verdict returned for every rule and the request/response
envelopes of the HTTP API.
"""

from enum import Enum

from pydantic import BaseModel, Field


class RuleStatus(str, Enum):
    """Outcome of checking one rule against a document."""

    PASS = "pass"
    FAIL = "fail"


class RuleVerdict(BaseModel):
    """
    Structured judgment for one rule against one document.

    Attributes:
        rule: The rule exactly as submitted (after trimming).
        status: Whether the document satisfies the rule.
        evidence: Short excerpt or close paraphrase supporting the verdict.
        reasoning: One or two sentences explaining the verdict.
        confidence: Self-reported certainty, 0 to 100.
    """

    rule: str = Field(
        ...,
        min_length=1,
        description="The rule that was checked",
        examples=["Document must mention a date."],
    )
    status: RuleStatus = Field(
        ...,
        description="pass or fail",
    )
    evidence: str = Field(
        ...,
        description="Excerpt from the document supporting the verdict",
        examples=["Submitted on March 3rd, 2024"],
    )
    reasoning: str = Field(
        ...,
        description="Short explanation of the verdict",
    )
    confidence: int = Field(
        ...,
        ge=0,
        le=100,
        description="Confidence score from 0 to 100",
    )


class CheckResponse(BaseModel):
    """Response model for the check-pdf endpoint, one verdict per rule."""

    results: list[RuleVerdict] = Field(
        default_factory=list,
        description="Verdicts in the order the rules were submitted",
    )


class ErrorResponse(BaseModel):
    """Body of every rejected check-pdf request."""

    error: str


class HealthResponse(BaseModel):
    """Response model for health check endpoints."""

    status: str = Field(default="healthy")
    message: str = Field(default="Service is running")
    version: str = Field(default="1.0.0")
