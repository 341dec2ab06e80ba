"""
Handover Disputes Engine — Dispute Resolution Service
=======================================================
Opens disputes, runs the message thread and records the
administrator's resolution.

Opening a dispute is one store transaction: the order is flipped to
DISPUTED and the dispute row is inserted together, or neither happens.
Resolving records an outcome only; applying it to the order is the
separate OrderLifecycleService.settle_dispute step.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import Callable, Optional

from core.commands.outcomes import OperationOutcome
from core.commands.rejection import ReasonCode, RejectionReason
from core.config.settings import EngineSettings
from core.context.actor_context import ActorContext
from core.events.publisher import EventPublisher
from core.permissions.evaluator import PartyScope, evaluate_authorization
from core.primitives.dispute import (
    Dispute,
    DisputeMessage,
    DisputeReason,
    DisputeResolution,
    DisputeStatus,
    ResolutionOutcome,
)
from core.primitives.order import OrderStatus
from core.repository.errors import StaleWriteError
from core.repository.protocol import StoreProtocol
from core.time.clock import Clock, SystemClock
from engines.disputes.commands import (
    DISPUTES_DISPUTE_ESCALATE,
    DISPUTES_DISPUTE_GET,
    DISPUTES_DISPUTE_OPEN,
    DISPUTES_DISPUTE_RESOLVE,
    DISPUTES_MESSAGE_ADD,
    DISPUTES_SUGGESTION_ACCEPT,
)
from engines.disputes.events import (
    DISPUTES_DISPUTE_ESCALATED_V1,
    DISPUTES_DISPUTE_OPENED_V1,
    DISPUTES_DISPUTE_RESOLVED_V1,
    DISPUTES_MESSAGE_ADDED_V1,
    DISPUTES_SUGGESTION_ACCEPTED_V1,
    build_dispute_escalated_payload,
    build_dispute_opened_payload,
    build_dispute_resolved_payload,
    build_message_added_payload,
)
from engines.disputes.policies import (
    dispute_expected_status_policy,
    dispute_must_be_open_policy,
    dispute_must_exist_policy,
    dispute_transition_policy,
    is_mediation_eligible,
    mediation_must_be_eligible_policy,
    no_open_dispute_policy,
    status_after_message,
)
from engines.orders.policies import order_must_exist_policy
from engines.orders.services import OrderLifecycleService

logger = logging.getLogger("handover.disputes")


class DisputeResolutionService:

    def __init__(
        self,
        *,
        store: StoreProtocol,
        lifecycle: OrderLifecycleService,
        publisher: EventPublisher,
        clock: Optional[Clock] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self._store = store
        self._lifecycle = lifecycle
        self._publisher = publisher
        self._clock = clock or SystemClock()
        self._settings = settings or EngineSettings()

    # ── helpers ───────────────────────────────────────────────

    def _rejected(
        self, operation: str, reason: RejectionReason,
    ) -> OperationOutcome:
        if reason.code == ReasonCode.STALE_STATE:
            logger.warning(f"{operation} lost a race: {reason.message}")
        else:
            logger.info(f"{operation} rejected [{reason.code}]: {reason.message}")
        return OperationOutcome.rejected(operation, reason)

    def _load_authorized(
        self,
        operation: str,
        dispute_id: str,
        actor: Optional[ActorContext],
    ) -> tuple[Optional[Dispute], Optional[RejectionReason]]:
        dispute = self._store.get_dispute(dispute_id)
        rejection = dispute_must_exist_policy(dispute, dispute_id)
        if rejection is None:
            rejection = evaluate_authorization(
                operation, actor, PartyScope.for_dispute(dispute),
            )
        return dispute, rejection

    def _guarded_write(
        self,
        dispute: Dispute,
        mutation: Callable[[Dispute], Dispute],
    ) -> tuple[Optional[Dispute], Optional[RejectionReason]]:
        try:
            return self._store.update_dispute(
                dispute.dispute_id, dispute.version, mutation,
            ), None
        except StaleWriteError as exc:
            return None, RejectionReason(
                code=ReasonCode.STALE_STATE,
                message=str(exc),
                policy_name="dispute_version_guard",
            )

    def _new_message(self, author_id: str, author_name: str, text: str) -> DisputeMessage:
        return DisputeMessage(
            message_id=str(uuid.uuid4()),
            author_id=author_id,
            author_name=author_name,
            text=text,
            sent_at=self._clock.now_utc(),
        )

    # ══════════════════════════════════════════════════════════
    # OPEN
    # ══════════════════════════════════════════════════════════

    def create_dispute(
        self,
        order_id: str,
        *,
        actor: ActorContext,
        reason: DisputeReason,
        initial_message: str,
        expected_status: Optional[OrderStatus] = None,
    ) -> OperationOutcome:
        """
        Open a dispute and flip the order to DISPUTED atomically.

        Rejections:
            NOT_FOUND          order does not exist
            UNAUTHORIZED       actor is not the order's contractor/supplier
            DUPLICATE_DISPUTE  order already disputed or has an open dispute
            INVALID_TRANSITION order is COMPLETED or CANCELLED
            STALE_STATE        order moved since the caller last read it
        """
        operation = DISPUTES_DISPUTE_OPEN
        if not isinstance(reason, DisputeReason):
            raise ValueError("reason must be DisputeReason enum.")

        order = self._store.get_order(order_id)
        rejection = order_must_exist_policy(order, order_id)
        if rejection is None:
            rejection = evaluate_authorization(
                operation, actor, PartyScope.for_order(order),
            )
        if rejection is None:
            rejection = no_open_dispute_policy(
                self._store.get_dispute_for_order(order_id), order_id,
            )
        if rejection is not None:
            return self._rejected(operation, rejection)

        status_at_opening = expected_status or order.status
        opening = self._new_message(actor.actor_id, actor.name, initial_message)

        with self._store.atomic():
            marked = self._lifecycle.mark_disputed(
                order_id, status_at_opening, actor=actor,
            )
            if marked.is_rejected:
                return self._rejected(operation, marked.reason)

            flipped = marked.value
            dispute = self._store.create_dispute(Dispute(
                dispute_id=str(uuid.uuid4()),
                order_id=flipped.order_id,
                order_number=flipped.order_number,
                contractor_id=flipped.contractor_id,
                supplier_id=flipped.supplier_id,
                raised_by=actor.actor_id,
                reason=reason,
                status=DisputeStatus.NEW,
                created_at=opening.sent_at,
                order_status_at_opening=status_at_opening,
                messages=(opening,),
                participant_ids=frozenset({
                    flipped.contractor_id, flipped.supplier_id,
                }),
            ))

        logger.info(
            f"Dispute {dispute.dispute_id} opened on order "
            f"{dispute.order_number} by {actor.actor_id} ({reason.value})"
        )
        self._publisher.publish(
            DISPUTES_DISPUTE_OPENED_V1,
            build_dispute_opened_payload(dispute),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, dispute)

    # ══════════════════════════════════════════════════════════
    # THREAD
    # ══════════════════════════════════════════════════════════

    def add_message(
        self, dispute_id: str, *, actor: ActorContext, text: str,
    ) -> OperationOutcome:
        operation = DISPUTES_MESSAGE_ADD
        dispute, rejection = self._load_authorized(operation, dispute_id, actor)
        if rejection is None:
            rejection = dispute_must_be_open_policy(dispute)
        if rejection is not None:
            return self._rejected(operation, rejection)

        message = self._new_message(actor.actor_id, actor.name, text)
        next_status = status_after_message(dispute, actor.actor_id)
        updated, rejection = self._guarded_write(
            dispute,
            lambda current: dataclasses.replace(
                current,
                messages=current.messages + (message,),
                status=next_status,
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)

        logger.info(
            f"Dispute {dispute_id}: message from {actor.actor_id}, "
            f"status {updated.status.value}"
        )
        self._publisher.publish(
            DISPUTES_MESSAGE_ADDED_V1,
            build_message_added_payload(updated, message),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, updated)

    def is_mediation_eligible(self, dispute_id: str) -> bool:
        dispute = self._store.get_dispute(dispute_id)
        return dispute is not None and is_mediation_eligible(dispute)

    def accept_suggestion(
        self, dispute_id: str, *, actor: ActorContext, text: str,
    ) -> OperationOutcome:
        """Record an accepted mediation draft under the mediator's name."""
        operation = DISPUTES_SUGGESTION_ACCEPT
        dispute, rejection = self._load_authorized(operation, dispute_id, actor)
        if rejection is None:
            rejection = (
                dispute_must_be_open_policy(dispute)
                or mediation_must_be_eligible_policy(dispute)
            )
        if rejection is not None:
            return self._rejected(operation, rejection)

        message = self._new_message(
            self._settings.mediator_actor_id,
            self._settings.mediator_display_name,
            text,
        )
        updated, rejection = self._guarded_write(
            dispute,
            lambda current: dataclasses.replace(
                current, messages=current.messages + (message,),
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)

        logger.info(
            f"Dispute {dispute_id}: mediation suggestion accepted by "
            f"{actor.actor_id}"
        )
        self._publisher.publish(
            DISPUTES_SUGGESTION_ACCEPTED_V1,
            build_message_added_payload(updated, message),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, updated)

    # ══════════════════════════════════════════════════════════
    # ADMINISTRATION
    # ══════════════════════════════════════════════════════════

    def escalate(
        self,
        dispute_id: str,
        *,
        actor: ActorContext,
        expected_status: Optional[DisputeStatus] = None,
    ) -> OperationOutcome:
        operation = DISPUTES_DISPUTE_ESCALATE
        dispute, rejection = self._load_authorized(operation, dispute_id, actor)
        if rejection is None:
            rejection = (
                dispute_expected_status_policy(dispute, expected_status)
                or dispute_transition_policy(
                    dispute, DisputeStatus.UNDER_ADMIN_REVIEW,
                )
            )
        if rejection is not None:
            return self._rejected(operation, rejection)

        updated, rejection = self._guarded_write(
            dispute,
            lambda current: dataclasses.replace(
                current, status=DisputeStatus.UNDER_ADMIN_REVIEW,
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)

        logger.info(f"Dispute {dispute_id} escalated by {actor.actor_id}")
        self._publisher.publish(
            DISPUTES_DISPUTE_ESCALATED_V1,
            build_dispute_escalated_payload(updated, dispute.status.value),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, updated)

    def resolve(
        self,
        dispute_id: str,
        *,
        actor: ActorContext,
        outcome: ResolutionOutcome,
        note: str = "",
    ) -> OperationOutcome:
        operation = DISPUTES_DISPUTE_RESOLVE
        if not isinstance(outcome, ResolutionOutcome):
            raise ValueError("outcome must be ResolutionOutcome enum.")

        dispute, rejection = self._load_authorized(operation, dispute_id, actor)
        if rejection is None:
            rejection = dispute_transition_policy(dispute, DisputeStatus.RESOLVED)
        if rejection is not None:
            return self._rejected(operation, rejection)

        resolution = DisputeResolution(
            outcome=outcome,
            resolved_by=actor.actor_id,
            resolved_at=self._clock.now_utc(),
            note=note,
        )
        updated, rejection = self._guarded_write(
            dispute,
            lambda current: dataclasses.replace(
                current, status=DisputeStatus.RESOLVED, resolution=resolution,
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)

        logger.info(
            f"Dispute {dispute_id} resolved by {actor.actor_id}: "
            f"{outcome.value}"
        )
        self._publisher.publish(
            DISPUTES_DISPUTE_RESOLVED_V1,
            build_dispute_resolved_payload(updated),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, updated)

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def get_dispute(self, dispute_id: str) -> OperationOutcome:
        dispute = self._store.get_dispute(dispute_id)
        rejection = dispute_must_exist_policy(dispute, dispute_id)
        if rejection is not None:
            return OperationOutcome.rejected(DISPUTES_DISPUTE_GET, rejection)
        return OperationOutcome.accepted(DISPUTES_DISPUTE_GET, dispute)

    def get_dispute_for_order(self, order_id: str) -> OperationOutcome:
        dispute = self._store.get_dispute_for_order(order_id)
        if dispute is None:
            return OperationOutcome.rejected(
                DISPUTES_DISPUTE_GET,
                RejectionReason(
                    code=ReasonCode.NOT_FOUND,
                    message=f"Order '{order_id}' has no dispute.",
                    policy_name="dispute_must_exist_policy",
                ),
            )
        return OperationOutcome.accepted(DISPUTES_DISPUTE_GET, dispute)

    def list_disputes_for_party(self, party_id: str) -> list[Dispute]:
        return self._store.list_disputes_for_party(party_id)
