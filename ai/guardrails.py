"""
Handover AI Guardrails — Advisory Execution Boundaries
========================================================
Generated text is advice. The advisory layer may read state and
propose text; it may never perform a write on its own.

Every advisory call is checked here before the external service is
contacted. Writing an accepted suggestion into a dispute is a separate
operation performed by a human participant.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason


# ══════════════════════════════════════════════════════════════
# AI ACTION CLASSIFICATION
# ══════════════════════════════════════════════════════════════

class AIActionType(Enum):
    """What the advisory layer is attempting to do."""
    ANALYZE = "ANALYZE"                  # Read a context and answer a question
    RECOMMEND = "RECOMMEND"              # Draft a suggestion for a human to accept
    EXECUTE_COMMAND = "EXECUTE_COMMAND"  # Attempt a write


ALWAYS_ALLOWED = frozenset({
    AIActionType.ANALYZE,
    AIActionType.RECOMMEND,
})


# ══════════════════════════════════════════════════════════════
# FORBIDDEN AI OPERATIONS
# ══════════════════════════════════════════════════════════════

FORBIDDEN_OPERATIONS = frozenset({
    "orders.order.advance",
    "orders.order.cancel",
    "orders.delivery.complete",
    "orders.dispute.settle",
    "disputes.message.add",
    "disputes.suggestion.accept",
    "disputes.dispute.escalate",
    "disputes.dispute.resolve",
    "reviews.review.submit",
})


# ══════════════════════════════════════════════════════════════
# GUARDRAIL CHECK
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GuardrailResult:
    allowed: bool
    reason: str
    action_type: AIActionType


def check_ai_guardrail(
    action_type: AIActionType,
    operation_name: str,
) -> GuardrailResult:
    """Decide whether an advisory action may run at all."""
    if operation_name in FORBIDDEN_OPERATIONS:
        return GuardrailResult(
            allowed=False,
            reason=(
                f"AI forbidden operation: '{operation_name}' is never "
                f"allowed for the advisory layer."
            ),
            action_type=action_type,
        )

    if action_type in ALWAYS_ALLOWED:
        return GuardrailResult(
            allowed=True,
            reason="Advisory action: read-only, no guardrail restriction.",
            action_type=action_type,
        )

    return GuardrailResult(
        allowed=False,
        reason=f"AI action '{action_type.value}' is not permitted.",
        action_type=action_type,
    )


def ai_rejection_reason(result: GuardrailResult) -> Optional[RejectionReason]:
    """Convert a denied guardrail result into a RejectionReason."""
    if result.allowed:
        return None
    return RejectionReason(
        code=ReasonCode.UNAUTHORIZED,
        message=result.reason,
        policy_name="check_ai_guardrail",
    )
