# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Exceptions raised by the report store for caller misuse.

Ordinary bad input is reported through OperationResult; these exceptions
signal structural violations the caller should never attempt.
"""


class ReportStoreError(Exception):
    """Base class for report store exceptions."""

    def __init__(self, message: str, error_type: str = "store-error"):
        super().__init__(message)
        self.message = message
        self.error_type = error_type


class HierarchyError(ReportStoreError):
    """Exception for organizational hierarchy violations."""

    def __init__(self, message: str, unit_id: str = None, parent_id: str = None):
        super().__init__(message, "hierarchy-violation")
        self.unit_id = unit_id
        self.parent_id = parent_id
