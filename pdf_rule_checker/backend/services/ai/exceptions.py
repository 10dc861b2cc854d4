"""
Shared exceptions for AI service modules.
"""


class AIServiceError(Exception):
    """Raised when AI service operations fail."""

    pass


class LLMCommunicationError(AIServiceError):
    """The model could not be reached (network, auth, quota, timeout)."""

    pass


class LLMMalformedOutputError(AIServiceError):
    """The model replied, but not with a JSON object."""

    pass
