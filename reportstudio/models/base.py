# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity models with common fields and validation.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, Field, ConfigDict
from bson import ObjectId


def generate_object_id() -> str:
    """Generate a new opaque identifier as string."""
    return str(ObjectId())


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class BaseEntity(BaseModel):
    """Base entity with an identifier and a UTC creation time."""

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")


class BaseRequest(BaseModel):
    """Base model for store operation requests."""
    
    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True
    )
