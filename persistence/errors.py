from __future__ import annotations


class StoreError(Exception):
    """Base class for errors raised by the stores in this package."""


class DocumentNotFoundError(StoreError, LookupError):
    def __init__(self, path: str):
        super().__init__(f"No document to update: {path}")
        self.path = path


class InvalidPathError(StoreError, ValueError):
    pass


class TransactionError(StoreError):
    """Misuse of a transaction or batch (read after write, commit twice, too many writes)."""


class TransactionAbortedError(TransactionError):
    def __init__(self, attempts: int):
        super().__init__(f"Transaction aborted after {attempts} conflicting attempt(s)")
        self.attempts = attempts
