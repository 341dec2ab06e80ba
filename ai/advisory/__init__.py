"""
Handover AI Advisory — Public API
===================================
"""

from ai.advisory.delivery import DeliveryAssistant
from ai.advisory.gateway import AdvisoryErrorCode, AdvisoryGateway, AdvisoryResult
from ai.advisory.mediation import MediationAdvisor, build_dispute_context
from ai.advisory.port import AdvisoryPort

__all__ = [
    "AdvisoryErrorCode",
    "AdvisoryGateway",
    "AdvisoryPort",
    "AdvisoryResult",
    "DeliveryAssistant",
    "MediationAdvisor",
    "build_dispute_context",
]
