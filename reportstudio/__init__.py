# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Report studio domain core - in-memory store for ESG disclosure reporting.
"""

from .config import StoreSettings
from .exceptions import HierarchyError, ReportStoreError
from .services.store import ReportStore

__version__ = "1.0.0"

__all__ = [
    "ReportStore",
    "StoreSettings",
    "HierarchyError",
    "ReportStoreError"
]
