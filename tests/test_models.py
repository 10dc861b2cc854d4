"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from pdf_rule_checker.backend.models import (
    CheckResponse,
    ErrorResponse,
    HealthResponse,
    RuleStatus,
    RuleVerdict,
)


class TestRuleVerdict:
    """Tests for RuleVerdict model."""

    def test_valid_verdict(self):
        verdict = RuleVerdict(
            rule="Document must mention a date.",
            status="pass",
            evidence="March 3rd, 2024",
            reasoning="Date present.",
            confidence=95,
        )
        assert verdict.status == RuleStatus.PASS
        assert verdict.model_dump(mode="json") == {
            "rule": "Document must mention a date.",
            "status": "pass",
            "evidence": "March 3rd, 2024",
            "reasoning": "Date present.",
            "confidence": 95,
        }

    def test_status_must_be_pass_or_fail(self):
        with pytest.raises(ValidationError):
            RuleVerdict(
                rule="r", status="maybe", evidence="e", reasoning="r", confidence=1
            )

    @pytest.mark.parametrize("confidence", [-1, 101])
    def test_confidence_bounds(self, confidence: int):
        with pytest.raises(ValidationError):
            RuleVerdict(
                rule="r",
                status="fail",
                evidence="e",
                reasoning="r",
                confidence=confidence,
            )

    def test_empty_rule_rejected(self):
        with pytest.raises(ValidationError):
            RuleVerdict(rule="", status="fail", evidence="e", reasoning="r", confidence=0)

    def test_all_fields_required(self):
        with pytest.raises(ValidationError):
            RuleVerdict(rule="r", status="fail")


class TestEnvelopes:
    """Tests for response envelopes."""

    def test_check_response_defaults_to_empty(self):
        assert CheckResponse().results == []

    def test_error_response(self):
        assert ErrorResponse(error="PDF file is required").model_dump() == {
            "error": "PDF file is required"
        }

    def test_health_response_defaults(self):
        health = HealthResponse()
        assert health.status == "healthy"
        assert health.version
