"""
PDF Rule Checker Backend Application.

A FastAPI service that checks PDF documents against natural-language
rules using an LLM (OpenAI gpt-4o-mini).
"""

__version__ = "1.0.0"
