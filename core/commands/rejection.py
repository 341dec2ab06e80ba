"""
Handover Operation Layer — Rejection Model
=============================================
Structured rejection reasons for denied operations.

A rejection is a value, not a fault. Every engine operation that
cannot proceed returns one of these inside an OperationOutcome and
callers branch on the code.

Every rejection must be:
- Deterministic (same input → same rejection)
- Auditable (code + message + policy)
- Machine-readable (code)
- Human-readable (message, plus a stable user-facing message per code)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for operation rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'STALE_STATE').
        message:     Detailed explanation for logs and audit.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    @property
    def user_message(self) -> str:
        return user_message_for(self.code)

    def to_dict(self) -> dict:
        """Serialize for event payloads and API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
            "user_message": self.user_message,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Closed rejection taxonomy shared by every engine.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Lifecycle ─────────────────────────────────────────────
    INVALID_TRANSITION = "INVALID_TRANSITION"
    STALE_STATE = "STALE_STATE"
    MISSING_ARTIFACT = "MISSING_ARTIFACT"

    # ── Uniqueness ────────────────────────────────────────────
    DUPLICATE_DISPUTE = "DUPLICATE_DISPUTE"
    DUPLICATE_REVIEW = "DUPLICATE_REVIEW"

    # ── Access ────────────────────────────────────────────────
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"


VALID_REASON_CODES = frozenset({
    ReasonCode.INVALID_TRANSITION,
    ReasonCode.STALE_STATE,
    ReasonCode.MISSING_ARTIFACT,
    ReasonCode.DUPLICATE_DISPUTE,
    ReasonCode.DUPLICATE_REVIEW,
    ReasonCode.UNAUTHORIZED,
    ReasonCode.NOT_FOUND,
})


# ══════════════════════════════════════════════════════════════
# USER-FACING MESSAGES (stable per code)
# ══════════════════════════════════════════════════════════════

USER_MESSAGES = {
    ReasonCode.INVALID_TRANSITION: (
        "This action is not available for the order in its current state."
    ),
    ReasonCode.STALE_STATE: (
        "This record was changed by someone else. "
        "Refresh to see the latest version, then try again."
    ),
    ReasonCode.MISSING_ARTIFACT: (
        "Delivery can only be completed with both a photo and a signature "
        "while the order is out for delivery."
    ),
    ReasonCode.DUPLICATE_DISPUTE: (
        "A dispute is already open for this order."
    ),
    ReasonCode.DUPLICATE_REVIEW: (
        "This order has already been reviewed."
    ),
    ReasonCode.UNAUTHORIZED: (
        "You are not allowed to perform this action."
    ),
    ReasonCode.NOT_FOUND: (
        "The requested record could not be found."
    ),
}


def user_message_for(code: str) -> str:
    """Stable, distinguishable message for a rejection code."""
    return USER_MESSAGES.get(code, "The request could not be completed.")
