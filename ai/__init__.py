"""
Handover AI Module — Advisory Only
====================================
The advisory layer drafts text. It never changes an order or a
dispute; people do, through the engines.
"""

from ai.guardrails import (
    AIActionType,
    GuardrailResult,
    ai_rejection_reason,
    check_ai_guardrail,
)

__all__ = [
    "AIActionType",
    "GuardrailResult",
    "ai_rejection_reason",
    "check_ai_guardrail",
]
