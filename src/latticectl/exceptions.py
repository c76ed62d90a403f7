"""latticectl exception hierarchy."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ConfigError",
    "CtlError",
    "IdentifierError",
    "NoSuitableHost",
    "OperationRejected",
    "PlacementError",
    "TransportError",
    "ValidationError",
]


class CtlError(Exception):
    """Base class for latticectl exceptions."""


class ConfigError(CtlError):
    """Raised when connection configuration cannot be resolved."""


class ValidationError(CtlError):
    """Raised when user input fails validation before any request is sent."""


class IdentifierError(ValidationError):
    """Raised when an identifier is not a well-formed public key."""

    def __init__(self, field: str, value: str, reason: str) -> None:
        super().__init__(f"invalid {field} '{value}': {reason}")
        self.field = field
        self.value = value
        self.reason = reason


class PlacementError(CtlError):
    """Raised when a workload cannot be placed on a host."""


class NoSuitableHost(PlacementError):
    """Raised when an auction window elapses with no respondents."""

    def __init__(self, workload_ref: str, kind: str = "actor") -> None:
        super().__init__(f"No suitable hosts found for {kind} {workload_ref}")
        self.workload_ref = workload_ref
        self.kind = kind


class TransportError(CtlError):
    """Raised when a control-plane request fails or times out."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        detail = str(cause) if cause is not None else ""
        if not detail and cause is not None:
            detail = type(cause).__name__
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class OperationRejected(CtlError):
    """Raised when a host acknowledges a request but declines it."""

    def __init__(self, description: str, reason: str = "") -> None:
        message = f"{description} was not accepted"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.description = description
        self.reason = reason
