"""
Handover Operation Layer — Outcomes and Rejections
=====================================================
Every engine operation produces exactly one Outcome.
REJECTED outcomes are first-class values, never raised.
"""

from core.commands.outcomes import (
    OperationOutcome,
    OperationStatus,
)
from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
    USER_MESSAGES,
    VALID_REASON_CODES,
    user_message_for,
)

__all__ = [
    # ── Outcomes ──────────────────────────────────────────────
    "OperationOutcome",
    "OperationStatus",
    # ── Rejection ─────────────────────────────────────────────
    "RejectionReason",
    "ReasonCode",
    "USER_MESSAGES",
    "VALID_REASON_CODES",
    "user_message_for",
]
