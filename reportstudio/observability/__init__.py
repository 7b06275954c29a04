"""
Observability package - tracing and structured logging setup.
"""

from .config import setup_observability, setup_structured_logging, StructuredFormatter

__all__ = [
    "setup_observability",
    "setup_structured_logging",
    "StructuredFormatter"
]
