"""Pytest configuration and fixtures."""

import json
from types import SimpleNamespace
from typing import Any, Callable, Generator

import fitz
import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from pdf_rule_checker.backend.config import Settings
from pdf_rule_checker.backend.main import create_app
from pdf_rule_checker.backend.services.ai import RuleEvaluator
from pdf_rule_checker.backend.services.checker import RuleCheckService

DOCUMENT_LINES = [
    "Project Proposal: Document Intake Portal",
    "Submitted on March 3rd, 2024",
    "The team will deliver a requirements document",
    "and a working prototype by the end of the quarter.",
]

DEFAULT_REPLY = {
    "status": "pass",
    "evidence": "Submitted on March 3rd, 2024",
    "reasoning": "The document states its submission date.",
    "confidence": 90,
}


class StubChatClient:
    """
    Deterministic stand-in for AsyncOpenAI.

    Replies are looked up by the rule found in the user message. A reply can
    be a dict (sent as JSON), a raw string, or an exception to raise.
    """

    def __init__(self, default: Any = None):
        self.default = DEFAULT_REPLY if default is None else default
        self.replies: dict[str, Any] = {}
        self.calls: list[dict[str, Any]] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **kwargs):
        self.calls.append(kwargs)
        user_message = json.loads(kwargs["messages"][1]["content"])
        reply = self.replies.get(user_message["rule"], self.default)

        if isinstance(reply, BaseException):
            raise reply
        content = json.dumps(reply) if isinstance(reply, dict) else reply

        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
        )


def _build_pdf(lines: list[str]) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    y = 72
    for line in lines:
        page.insert_text((72, y), line, fontsize=11)
        y += 16
    pdf_bytes = doc.tobytes()
    doc.close()
    return pdf_bytes


@pytest.fixture
def make_pdf() -> Callable[[list[str]], bytes]:
    """Factory building a one-page PDF with one text line per entry."""
    return _build_pdf


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """A PDF whose text comfortably exceeds the minimum length."""
    return _build_pdf(DOCUMENT_LINES)


@pytest.fixture
def short_pdf_bytes() -> bytes:
    """A valid PDF with a single short line of text."""
    return _build_pdf(["Hello"])


@pytest.fixture
def invalid_file_bytes() -> bytes:
    """Create invalid (non-PDF) file bytes for testing."""
    return b"This is not a PDF file"


@pytest.fixture
def api_connection_error() -> openai.APIConnectionError:
    """The error AsyncOpenAI raises when the API cannot be reached."""
    return openai.APIConnectionError(
        request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the developer's .env file."""
    return Settings(_env_file=None, openai_api_key="test-key")


@pytest.fixture
def stub_llm() -> StubChatClient:
    return StubChatClient()


@pytest.fixture
def evaluator(stub_llm: StubChatClient, test_settings: Settings) -> RuleEvaluator:
    return RuleEvaluator(
        client=stub_llm,
        model=test_settings.openai_model,
        temperature=test_settings.openai_temperature,
        max_document_chars=test_settings.max_document_chars,
        timeout=test_settings.openai_timeout_seconds,
    )


@pytest.fixture
def rule_check_service(
    evaluator: RuleEvaluator, test_settings: Settings
) -> RuleCheckService:
    return RuleCheckService.from_settings(test_settings, evaluator=evaluator)


@pytest.fixture
def client(
    test_settings: Settings, rule_check_service: RuleCheckService
) -> Generator[TestClient, None, None]:
    """Create a test client for an application wired to the stub model."""
    app = create_app(settings=test_settings, rule_check_service=rule_check_service)
    with TestClient(app) as test_client:
        yield test_client
