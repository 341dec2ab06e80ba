"""
Handover Operation Layer — Operation Outcome Contract
========================================================
Every engine operation produces exactly one Outcome. No exceptions.

ACCEPTED → the write (or read) went through; `value` carries the entity.
REJECTED → nothing was written; `reason` is mandatory and auditable.

Rules:
- Exactly one outcome per operation call
- Outcome is immutable (frozen dataclass)
- REJECTED must contain reason (RejectionReason)
- ACCEPTED must NOT contain reason
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from core.commands.rejection import RejectionReason


# ══════════════════════════════════════════════════════════════
# OPERATION STATUS
# ══════════════════════════════════════════════════════════════

class OperationStatus(Enum):
    """Binary decision. No middle ground."""
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


# ══════════════════════════════════════════════════════════════
# OPERATION OUTCOME
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OperationOutcome:
    """
    Deterministic result of an engine operation.

    Fields:
        operation: Operation name (e.g. 'orders.order.advance').
        status:    ACCEPTED or REJECTED.
        value:     Resulting entity for ACCEPTED outcomes.
        reason:    RejectionReason (mandatory if REJECTED, None if ACCEPTED).

    Invariants:
        - REJECTED + reason is None → ValueError
        - ACCEPTED + reason is not None → ValueError
    """

    operation: str
    status: OperationStatus
    value: Any = None
    reason: Optional[RejectionReason] = None

    def __post_init__(self):
        if not self.operation or not isinstance(self.operation, str):
            raise ValueError("operation must be a non-empty string.")

        if not isinstance(self.status, OperationStatus):
            raise ValueError(
                f"status must be OperationStatus, got {type(self.status).__name__}."
            )

        if self.status == OperationStatus.REJECTED and self.reason is None:
            raise ValueError(
                "REJECTED outcome must include a RejectionReason. "
                "No silent rejections allowed."
            )

        if self.status == OperationStatus.ACCEPTED and self.reason is not None:
            raise ValueError(
                "ACCEPTED outcome must NOT include a RejectionReason."
            )

    @classmethod
    def accepted(cls, operation: str, value: Any = None) -> "OperationOutcome":
        return cls(operation=operation, status=OperationStatus.ACCEPTED, value=value)

    @classmethod
    def rejected(
        cls, operation: str, reason: RejectionReason,
    ) -> "OperationOutcome":
        return cls(operation=operation, status=OperationStatus.REJECTED, reason=reason)

    @property
    def is_accepted(self) -> bool:
        return self.status == OperationStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status == OperationStatus.REJECTED

    @property
    def code(self) -> Optional[str]:
        """Rejection code, or None when accepted."""
        return self.reason.code if self.reason is not None else None
