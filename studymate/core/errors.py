from __future__ import annotations


class StoreError(Exception):
    """Any record store failure. `message` is safe to show to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RecordNotFound(StoreError):
    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class CodecError(ValueError):
    """A persisted value has a representation we do not recognize."""


class GenerationError(Exception):
    """
    Generation proxy failure.

    status_code follows the proxy's HTTP contract:
      400 bad input, 422 nothing usable generated, 500 misconfiguration, 502 upstream failure.
    """

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
