"""
Handover Integration — Adapter Errors
=======================================
Error hierarchy shared by outbound adapters (notification sinks and
anything else that pushes to an external system).

Adapters raise TransientError for failures worth retrying; any other
exception is treated as permanent.
"""

from __future__ import annotations


class IntegrationError(Exception):
    """Base error for all integration failures."""

    def __init__(self, message: str, system_id: str = "", retryable: bool = False):
        super().__init__(message)
        self.system_id = system_id
        self.retryable = retryable


class TransientError(IntegrationError):
    """Temporary failure, retryable with backoff."""

    def __init__(self, message: str, system_id: str = ""):
        super().__init__(message, system_id=system_id, retryable=True)


class PermanentError(IntegrationError):
    """The target rejected the delivery; retrying will not help."""

    def __init__(self, message: str, system_id: str = ""):
        super().__init__(message, system_id=system_id, retryable=False)
