"""
Handover Permissions — Public API
=================================
"""

from core.permissions.evaluator import PartyScope, evaluate_authorization
from core.permissions.registry import (
    OPERATION_ROLE_POLICY,
    SCOPE_ANY,
    SCOPE_CONTRACTOR,
    SCOPE_DRIVER,
    SCOPE_PARTICIPANT,
    SCOPE_RECIPIENT,
    SCOPE_SUPPLIER,
    VALID_SCOPES,
    resolve_required_scope,
    roles_allowed_for,
)

__all__ = [
    "OPERATION_ROLE_POLICY",
    "PartyScope",
    "SCOPE_ANY",
    "SCOPE_CONTRACTOR",
    "SCOPE_DRIVER",
    "SCOPE_PARTICIPANT",
    "SCOPE_RECIPIENT",
    "SCOPE_SUPPLIER",
    "VALID_SCOPES",
    "evaluate_authorization",
    "resolve_required_scope",
    "roles_allowed_for",
]
