"""
Handover AI Advisory — Delivery Assistant
===========================================
Answers a party's question about an order in transit, grounded in the
projected delivery context (driver, ETA, progress, position).
"""

from __future__ import annotations

from ai.advisory.gateway import AdvisoryGateway
from core.commands.outcomes import OperationOutcome
from core.context.actor_context import ActorContext
from core.permissions.evaluator import PartyScope, evaluate_authorization
from core.repository.protocol import StoreProtocol
from engines.delivery.commands import DELIVERY_ASSISTANT_ASK
from engines.delivery.services import DeliveryCoordinator
from engines.orders.policies import order_must_exist_policy


class DeliveryAssistant:

    def __init__(
        self,
        *,
        store: StoreProtocol,
        coordinator: DeliveryCoordinator,
        gateway: AdvisoryGateway,
    ):
        self._store = store
        self._coordinator = coordinator
        self._gateway = gateway

    def ask(
        self, order_id: str, question: str, *, actor: ActorContext,
    ) -> OperationOutcome:
        if not question or not question.strip():
            raise ValueError("question must be non-empty.")

        operation = DELIVERY_ASSISTANT_ASK
        order = self._store.get_order(order_id)
        rejection = order_must_exist_policy(order, order_id)
        if rejection is None:
            rejection = evaluate_authorization(
                operation, actor, PartyScope.for_order(order),
            )
        if rejection is not None:
            return OperationOutcome.rejected(operation, rejection)

        described = self._coordinator.describe_delivery_context(order_id)
        if described.is_rejected:
            return OperationOutcome.rejected(operation, described.reason)

        result = self._gateway.answer_delivery_question(
            described.value.to_dict(), question.strip(),
        )
        return OperationOutcome.accepted(operation, result)
