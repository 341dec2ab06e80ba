"""
Handover Permissions — Deterministic Authorization Evaluator
============================================================
Evaluated centrally inside the engines, never at call sites.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import ActorContext
from core.permissions.registry import (
    SCOPE_ANY,
    SCOPE_CONTRACTOR,
    SCOPE_DRIVER,
    SCOPE_PARTICIPANT,
    SCOPE_RECIPIENT,
    SCOPE_SUPPLIER,
    resolve_required_scope,
)


@dataclass(frozen=True)
class PartyScope:
    """Who is related to the record being acted on."""

    contractor_id: Optional[str] = None
    supplier_id: Optional[str] = None
    driver_id: Optional[str] = None
    participant_ids: frozenset[str] = field(default_factory=frozenset)
    recipient_id: Optional[str] = None

    @classmethod
    def for_order(cls, order) -> "PartyScope":
        driver_id = order.delivery.driver_id if order.delivery else None
        return cls(
            contractor_id=order.contractor_id,
            supplier_id=order.supplier_id,
            driver_id=driver_id,
        )

    @classmethod
    def for_dispute(cls, dispute) -> "PartyScope":
        return cls(
            contractor_id=dispute.contractor_id,
            supplier_id=dispute.supplier_id,
            participant_ids=frozenset(dispute.participant_ids),
        )


def _matches_scope(scope: str, actor_id: str, parties: PartyScope) -> bool:
    if scope == SCOPE_ANY:
        return True
    if scope == SCOPE_CONTRACTOR:
        return actor_id == parties.contractor_id
    if scope == SCOPE_SUPPLIER:
        return actor_id == parties.supplier_id
    if scope == SCOPE_DRIVER:
        return parties.driver_id is not None and actor_id == parties.driver_id
    if scope == SCOPE_PARTICIPANT:
        return actor_id in parties.participant_ids
    if scope == SCOPE_RECIPIENT:
        return actor_id == parties.recipient_id
    return False


def evaluate_authorization(
    operation: str,
    actor: Optional[ActorContext],
    parties: PartyScope,
) -> Optional[RejectionReason]:
    """
    Return a RejectionReason if the actor may not perform the operation
    on a record with the given parties, else None.
    """
    if not isinstance(actor, ActorContext):
        return RejectionReason(
            code=ReasonCode.UNAUTHORIZED,
            message=f"Operation '{operation}' requires an ActorContext.",
            policy_name="evaluate_authorization",
        )

    scope = resolve_required_scope(operation, actor.role)
    if scope is None:
        return RejectionReason(
            code=ReasonCode.UNAUTHORIZED,
            message=(
                f"Role '{actor.role}' may not perform '{operation}'."
            ),
            policy_name="evaluate_authorization",
        )

    if not _matches_scope(scope, actor.actor_id, parties):
        return RejectionReason(
            code=ReasonCode.UNAUTHORIZED,
            message=(
                f"Actor '{actor.actor_id}' does not satisfy scope "
                f"'{scope}' for '{operation}'."
            ),
            policy_name="evaluate_authorization",
        )

    return None
