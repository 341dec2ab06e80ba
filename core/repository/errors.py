"""
Handover Repository — Errors
==============================
Typed store failures. Engines translate these into rejections; they
never reach engine callers as exceptions.
"""


class RepositoryError(Exception):
    """Base error for store operations."""
    pass


class RecordNotFound(RepositoryError):
    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found.")


class StaleWriteError(RepositoryError):
    """Guarded update lost a compare-and-set race."""

    def __init__(self, kind: str, record_id: str, expected: int, actual: int):
        self.kind = kind
        self.record_id = record_id
        self.expected_version = expected
        self.actual_version = actual
        super().__init__(
            f"{kind} '{record_id}' is at version {actual}, "
            f"expected {expected}."
        )


class DuplicateRecordError(RepositoryError):
    """A uniqueness constraint rejected the insert."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} already exists for '{key}'.")
