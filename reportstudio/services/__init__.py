# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - Stateful store and audit trail.
"""

from .audit import AuditFilters, AuditTrail, calculate_changes, creation_changes, render_value
from .store import ReportStore, SAMPLE_USERS

__all__ = [
    "AuditFilters",
    "AuditTrail",
    "calculate_changes",
    "creation_changes",
    "render_value",
    "ReportStore",
    "SAMPLE_USERS"
]
