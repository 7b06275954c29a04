# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Store configuration loaded from environment variables.
"""

import os
from pydantic import BaseModel, Field


def _env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, 'true' if default else 'false').strip().lower() in ('1', 'true', 'yes', 'on')


class StoreSettings(BaseModel):
    """Behaviour switches for a report store instance."""

    require_data_point_owner: bool = Field(
        default=False,
        description="Reject data points created without an owner"
    )
    seed_sample_users: bool = Field(
        default=True,
        description="Seed the reference user directory with sample users"
    )
    seed_default_catalog: bool = Field(
        default=True,
        description="Seed the default section catalog"
    )

    @classmethod
    def from_env(cls) -> "StoreSettings":
        """Read settings from REPORTSTUDIO_* environment variables."""
        return cls(
            require_data_point_owner=_env_flag('REPORTSTUDIO_REQUIRE_DATA_POINT_OWNER', False),
            seed_sample_users=_env_flag('REPORTSTUDIO_SEED_SAMPLE_USERS', True),
            seed_default_catalog=_env_flag('REPORTSTUDIO_SEED_DEFAULT_CATALOG', True)
        )
