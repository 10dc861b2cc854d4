"""
API client for communicating with the PDF Rule Checker backend.
"""

import json
import os
from typing import Any, Dict, List, Optional

import requests

DEFAULT_API_URL = "http://localhost:5004"
PDF_CONTENT_TYPE = "application/pdf"
MAX_RULES = 3

RESULT_COLUMNS = ["Rule", "Status", "Evidence", "Reasoning", "Confidence"]


def get_api_base_url() -> str:
    """API base URL from the environment, falling back to the local backend."""
    return os.getenv("API_BASE_URL", DEFAULT_API_URL).rstrip("/")


def validate_pdf_upload(content_type: Optional[str]) -> Optional[str]:
    """Return an error message unless the picked file declares application/pdf."""
    if content_type != PDF_CONTENT_TYPE:
        return "Please upload a PDF file."
    return None


def collect_rules(rules: List[str]) -> List[str]:
    """Keep the non-blank rule inputs, in order."""
    return [rule for rule in rules if rule and rule.strip()]


def check_pdf(
    file_content: bytes,
    filename: str,
    rules: List[str],
    content_type: str = PDF_CONTENT_TYPE,
    base_url: Optional[str] = None,
    timeout: int = 300,
) -> Dict[str, Any]:
    """
    Submit a PDF and its rules to the check-pdf endpoint.

    Args:
        file_content: Raw PDF bytes.
        filename: Name sent with the upload.
        rules: Rule strings, serialized as a JSON array.
        content_type: Media type declared for the upload.
        base_url: API base URL. Defaults to API_BASE_URL from the environment.
        timeout: Request timeout in seconds.

    Returns:
        ``{"success": True, "results": [...]}`` or ``{"success": False, "error": "..."}``.
    """
    api_url = f"{base_url or get_api_base_url()}/check-pdf"

    try:
        response = requests.post(
            api_url,
            files={"pdf": (filename, file_content, content_type)},
            data={"rules": json.dumps(rules)},
            timeout=timeout,
        )
    except requests.exceptions.ConnectionError:
        return {
            "success": False,
            "error": f"Cannot connect to API server at {api_url}. Make sure the API service is running.",
        }
    except requests.exceptions.Timeout:
        return {
            "success": False,
            "error": "Request timed out. The document might be too large or complex.",
        }
    except requests.exceptions.RequestException as e:
        return {"success": False, "error": f"An unexpected error occurred: {e}"}

    try:
        data = response.json()
    except ValueError:
        data = {}

    if not response.ok:
        return {
            "success": False,
            "error": data.get("error")
            or f"Server error: {response.status_code} {response.reason}",
        }

    return {"success": True, "results": data.get("results", [])}


def results_to_rows(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Shape verdicts into table rows keyed by the display column names."""
    return [
        {
            "Rule": result.get("rule", ""),
            "Status": (result.get("status") or "unknown").upper(),
            "Evidence": result.get("evidence", ""),
            "Reasoning": result.get("reasoning", ""),
            "Confidence": result.get("confidence", 0),
        }
        for result in results
    ]
