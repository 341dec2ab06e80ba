"""
Handover Repository — Public API
==================================
"""

from core.repository.errors import (
    DuplicateRecordError,
    RecordNotFound,
    RepositoryError,
    StaleWriteError,
)
from core.repository.memory import InMemoryStore
from core.repository.protocol import StoreProtocol

__all__ = [
    "DuplicateRecordError",
    "InMemoryStore",
    "RecordNotFound",
    "RepositoryError",
    "StaleWriteError",
    "StoreProtocol",
]
