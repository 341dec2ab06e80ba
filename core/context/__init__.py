"""
Handover Context — Public API
================================
Actor identity and role constants.
"""

from core.context.actor_context import (
    ActorContext,
    ROLE_ADMIN,
    ROLE_CONTRACTOR,
    ROLE_DRIVER,
    ROLE_SUPPLIER,
    ROLE_SYSTEM,
    VALID_ROLES,
)

__all__ = [
    "ActorContext",
    "ROLE_ADMIN",
    "ROLE_CONTRACTOR",
    "ROLE_DRIVER",
    "ROLE_SUPPLIER",
    "ROLE_SYSTEM",
    "VALID_ROLES",
]
