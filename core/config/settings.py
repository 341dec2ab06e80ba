"""
Handover Core Config — Engine Settings
========================================
Tunables the engines read at construction time.

Values come from django.conf.settings.HANDOVER when Django is
configured, and fall back to the defaults below otherwise, so the
engines can also be embedded without a Django project.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class EngineSettings:
    notification_max_retries: int = 3
    notification_backoff_base_seconds: float = 0.5
    notification_backoff_max_seconds: float = 8.0
    advisory_timeout_seconds: float = 10.0
    advisory_max_workers: int = 4
    mediator_actor_id: str = "mediator"
    mediator_display_name: str = "AI Mediator"

    def __post_init__(self) -> None:
        if self.notification_max_retries < 0:
            raise ValueError("notification_max_retries must be >= 0.")
        if self.notification_backoff_base_seconds < 0:
            raise ValueError("notification_backoff_base_seconds must be >= 0.")
        if self.notification_backoff_max_seconds < self.notification_backoff_base_seconds:
            raise ValueError(
                "notification_backoff_max_seconds must be >= the base delay."
            )
        if self.advisory_timeout_seconds <= 0:
            raise ValueError("advisory_timeout_seconds must be positive.")
        if self.advisory_max_workers < 1:
            raise ValueError("advisory_max_workers must be >= 1.")
        if not self.mediator_actor_id:
            raise ValueError("mediator_actor_id must be non-empty.")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "EngineSettings":
        """Build from an upper-case keyed mapping; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs = {
            key.lower(): value
            for key, value in values.items()
            if key.lower() in known
        }
        return cls(**kwargs)


def load_engine_settings(overrides: Optional[Mapping[str, Any]] = None) -> EngineSettings:
    values: dict[str, Any] = {}

    from django.conf import settings as django_settings
    from django.core.exceptions import ImproperlyConfigured

    try:
        values.update(getattr(django_settings, "HANDOVER", {}) or {})
    except ImproperlyConfigured:
        # No Django project configured: defaults apply.
        pass

    if overrides:
        values.update(overrides)
    return EngineSettings.from_mapping(values)
