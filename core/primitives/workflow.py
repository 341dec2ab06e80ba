"""
Handover Workflow Primitive — State Machine Definitions
=========================================================
Deterministic state machines for the records whose lifecycle the
engines guard.

Used by:
    Orders Engine   — New → Processing → ReadyForPickup → OutForDelivery → Completed
    Disputes Engine — New → *Responded → UnderAdminReview → Resolved

RULES:
- Same (from, to) pair → same answer, always
- Terminal states allow no transition out
- Definitions are immutable and shared by all records of a type

Each engine operation may further narrow which edges it is allowed to
take; the definition is the outer bound every write is checked against.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet


# ══════════════════════════════════════════════════════════════
# WORKFLOW DEFINITION (state machine schema)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class WorkflowDefinition:
    """
    Valid states and transitions for a workflow type.

    Fields:
        name:            Identifier (e.g. "Order")
        initial_state:   Starting state for every new record
        terminal_states: States from which no transition is allowed
        transitions:     {from_state → frozenset(allowed to_states)}
    """
    name: str
    initial_state: str
    terminal_states: FrozenSet[str]
    transitions: Dict[str, FrozenSet[str]]

    def __post_init__(self):
        if not self.name:
            raise ValueError("Workflow name must be non-empty.")
        if not self.initial_state:
            raise ValueError("initial_state must be non-empty.")
        if self.initial_state not in self.transitions:
            raise ValueError(
                f"initial_state '{self.initial_state}' not in transitions."
            )
        for state in self.terminal_states:
            if self.transitions.get(state):
                raise ValueError(
                    f"Terminal state '{state}' must not have outgoing "
                    f"transitions."
                )
        known = set(self.transitions)
        for from_state, targets in self.transitions.items():
            unknown = set(targets) - known
            if unknown:
                raise ValueError(
                    f"Transitions from '{from_state}' reference undeclared "
                    f"states: {sorted(unknown)}."
                )

    @property
    def states(self) -> FrozenSet[str]:
        return frozenset(self.transitions)

    def is_valid_transition(self, from_state: str, to_state: str) -> bool:
        """Check if a transition is allowed by this definition."""
        if self.is_terminal(from_state):
            return False
        return to_state in self.transitions.get(from_state, frozenset())

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def allowed_next_states(self, from_state: str) -> FrozenSet[str]:
        return self.transitions.get(from_state, frozenset())


# ══════════════════════════════════════════════════════════════
# HANDOVER STATE MACHINES
# ══════════════════════════════════════════════════════════════

ORDER_WORKFLOW = WorkflowDefinition(
    name="Order",
    initial_state="NEW",
    terminal_states=frozenset({"COMPLETED", "CANCELLED"}),
    transitions={
        "NEW": frozenset({"PROCESSING", "CANCELLED", "DISPUTED"}),
        "PROCESSING": frozenset({
            "READY_FOR_PICKUP", "OUT_FOR_DELIVERY", "CANCELLED", "DISPUTED",
        }),
        "READY_FOR_PICKUP": frozenset({
            "OUT_FOR_DELIVERY", "CANCELLED", "DISPUTED",
        }),
        "OUT_FOR_DELIVERY": frozenset({"COMPLETED", "CANCELLED", "DISPUTED"}),
        # Leaving DISPUTED happens only through dispute settlement.
        "DISPUTED": frozenset({
            "NEW", "PROCESSING", "READY_FOR_PICKUP", "OUT_FOR_DELIVERY",
            "COMPLETED", "CANCELLED",
        }),
        "COMPLETED": frozenset(),
        "CANCELLED": frozenset(),
    },
)

DISPUTE_WORKFLOW = WorkflowDefinition(
    name="Dispute",
    initial_state="NEW",
    terminal_states=frozenset({"RESOLVED"}),
    transitions={
        "NEW": frozenset({
            "CONTRACTOR_RESPONDED", "SUPPLIER_RESPONDED",
            "UNDER_ADMIN_REVIEW", "RESOLVED",
        }),
        "CONTRACTOR_RESPONDED": frozenset({
            "SUPPLIER_RESPONDED", "UNDER_ADMIN_REVIEW", "RESOLVED",
        }),
        "SUPPLIER_RESPONDED": frozenset({
            "CONTRACTOR_RESPONDED", "UNDER_ADMIN_REVIEW", "RESOLVED",
        }),
        "UNDER_ADMIN_REVIEW": frozenset({"RESOLVED"}),
        "RESOLVED": frozenset(),
    },
)
