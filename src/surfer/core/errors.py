# src/surfer/core/errors.py
from __future__ import annotations

from typing import Any


class SurferError(Exception):
    """
    Base error of the trading core.

    operation: name of the step that failed (e.g. "Get Last Price")
    payload:   upstream error data (exchange response, raw record, ...)
    """

    kind: str = "SurferError"

    def __init__(self, message: str, *, operation: str = "", payload: Any = None):
        super().__init__(message)
        self.operation = operation
        self.payload = payload

    def __str__(self) -> str:
        base = super().__str__()
        if self.operation:
            return f"{self.operation}: {base}"
        return base


class ConfigError(SurferError):
    kind = "ConfigError"


class DataError(SurferError):
    """Malformed or missing market data."""

    kind = "DataError"


class ConstraintError(SurferError):
    """No valid trade quantity under exchange rules."""

    kind = "ConstraintError"


class ExecutionError(SurferError):
    """Order rejected or not fully filled."""

    kind = "ExecutionError"


class CollaboratorError(SurferError):
    """Exchange / network failure surfaced by a collaborator."""

    kind = "CollaboratorError"
