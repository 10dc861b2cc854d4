"""
Routers package for FastAPI endpoints.

Organized by domain:
- check: PDF rule checking
"""

from . import check

__all__ = ["check"]
