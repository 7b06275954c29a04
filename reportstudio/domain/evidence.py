# SPDX-License-Identifier: Apache-2.0

"""
Evidence domain logic: field validation for new evidence items.
"""

from typing import Optional
from urllib.parse import urlparse


MAX_SOURCE_URL_LENGTH = 2048


def validate_source_url(source_url: str) -> Optional[str]:
    """Return an error message for a bad source URL, None otherwise."""
    if len(source_url) > MAX_SOURCE_URL_LENGTH:
        return f"Source URL must not exceed {MAX_SOURCE_URL_LENGTH} characters."
    parsed = urlparse(source_url.strip())
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        return "Source URL must be a valid HTTP or HTTPS URL."
    return None


def validate_evidence_fields(request) -> Optional[str]:
    """
    Validate a create-evidence request apart from section existence.

    Args:
        request: CreateEvidenceRequest

    Returns:
        Error message, or None when valid
    """
    if not request.title or not request.title.strip():
        return "Title is required."

    if not request.uploaded_by or not request.uploaded_by.strip():
        return "UploadedBy is required."

    has_file = bool(request.file_url and request.file_url.strip()) or bool(
        request.file_name and request.file_name.strip()
    )
    has_url = bool(request.source_url and request.source_url.strip())
    if not has_file and not has_url:
        return "Either a file or a source URL must be provided."

    if has_url:
        return validate_source_url(request.source_url)

    return None
