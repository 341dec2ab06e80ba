"""
Handover Context — ActorContext
===============================
Immutable identity of whoever triggers an operation.

Authorization is policy-table driven (core.permissions), not
context-cached: the context only says who the actor is and which
role they act in.
"""

from __future__ import annotations

from dataclasses import dataclass


ROLE_CONTRACTOR = "CONTRACTOR"
ROLE_SUPPLIER = "SUPPLIER"
ROLE_DRIVER = "DRIVER"
ROLE_ADMIN = "ADMIN"
ROLE_SYSTEM = "SYSTEM"

VALID_ROLES = frozenset({
    ROLE_CONTRACTOR,
    ROLE_SUPPLIER,
    ROLE_DRIVER,
    ROLE_ADMIN,
    ROLE_SYSTEM,
})


@dataclass(frozen=True)
class ActorContext:
    """
    Canonical actor identity context.

    display_name is what dispute threads show as the author name;
    it falls back to actor_id.
    """

    actor_id: str
    role: str
    display_name: str = ""

    def __post_init__(self):
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")

        if self.role not in VALID_ROLES:
            raise ValueError(
                f"role '{self.role}' not valid. "
                f"Must be one of: {sorted(VALID_ROLES)}"
            )

        if not isinstance(self.display_name, str):
            raise ValueError("display_name must be a string.")

    @property
    def name(self) -> str:
        return self.display_name or self.actor_id

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def to_dict(self) -> dict:
        return {
            "actor_id": self.actor_id,
            "role": self.role,
            "display_name": self.name,
        }
