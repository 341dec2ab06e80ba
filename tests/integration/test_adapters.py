"""
Tests — Integration Adapter Errors
=====================================
Retryability is carried by the error type.
"""

from __future__ import annotations

from integration.adapters import IntegrationError, PermanentError, TransientError


class TestErrorHierarchy:
    def test_transient_is_retryable(self):
        err = TransientError("timeout", system_id="push")
        assert isinstance(err, IntegrationError)
        assert err.retryable
        assert err.system_id == "push"
        assert str(err) == "timeout"

    def test_permanent_is_not_retryable(self):
        err = PermanentError("unknown device")
        assert isinstance(err, IntegrationError)
        assert not err.retryable
        assert err.system_id == ""
