"""
Handover AI Advisory — External Service Port
==============================================
The narrow interface the engines call through for generated text.
Implementations wrap whatever model or service is in use; tests use
stubs.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol


class AdvisoryPort(Protocol):

    def suggest_resolution(self, dispute_context: Dict[str, Any]) -> str:
        """Draft a neutral resolution proposal for a dispute."""
        ...

    def answer_delivery_question(
        self, delivery_context: Dict[str, Any], question: str,
    ) -> str:
        """Answer a party's question about a delivery in flight."""
        ...
