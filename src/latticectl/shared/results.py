"""Result data structures shared across layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

__all__ = ["Acknowledgement", "AuctionResponse", "OperationOutcome"]


@dataclass(frozen=True)
class Acknowledgement:
    """Uniform reply to every mutating control operation."""

    accepted: bool
    error: str = ""

    @classmethod
    def from_obj(cls, obj: Any) -> "Acknowledgement":
        """Normalize a client reply (ack, mapping or attribute object)."""
        if isinstance(obj, Acknowledgement):
            return obj
        if isinstance(obj, Mapping):
            accepted = obj.get("accepted", False)
            error = obj.get("error")
        else:
            accepted = getattr(obj, "accepted", False)
            error = getattr(obj, "error", None)
        return cls(accepted=bool(accepted), error=str(error or ""))

    def to_dict(self) -> Dict[str, Any]:
        return {"accepted": self.accepted, "error": self.error}


@dataclass(frozen=True)
class AuctionResponse:
    """A host that volunteered to run a workload."""

    host_id: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_obj(cls, obj: Any) -> "AuctionResponse":
        if isinstance(obj, AuctionResponse):
            return obj
        if isinstance(obj, Mapping):
            meta = {k: v for k, v in obj.items() if k != "host_id"}
            return cls(host_id=str(obj.get("host_id", "")), metadata=meta)
        return cls(host_id=str(getattr(obj, "host_id", "")))


_SUBJECTS = {
    "actor": "Instruction to start actor",
    "provider": "Instruction to start provider",
    "link": "Link definition",
}


@dataclass(frozen=True)
class OperationOutcome:
    """Outcome of one manifest item."""

    kind: str
    description: str
    accepted: bool
    error: Optional[str] = None
    # False when the request never reached a host (transport failure).
    sent: bool = True

    @property
    def message(self) -> str:
        subject = f"{_SUBJECTS.get(self.kind, self.kind)} {self.description}"
        if self.accepted:
            return f"{subject} acknowledged."
        if not self.sent:
            return f"Failed to send {self.kind} {self.description}: {self.error}"
        return f"{subject} not acked: {self.error}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "description": self.description,
            "accepted": self.accepted,
            "error": self.error,
        }
