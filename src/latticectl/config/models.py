"""Connection configuration models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

__all__ = ["ConnectionConfig", "ContextRecord", "Credentials", "PartialConfig"]


@dataclass(frozen=True)
class Credentials:
    """Bus credentials: a jwt/seed pair, a credentials file, or nothing."""

    jwt: Optional[str] = None
    seed: Optional[str] = None
    creds_file: Optional[str] = None

    @property
    def kind(self) -> str:
        if self.jwt and self.seed:
            return "jwt"
        if self.creds_file:
            return "creds_file"
        return "none"

    def redacted(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "jwt": "[REDACTED]" if self.jwt else None,
            "seed": "[REDACTED]" if self.seed else None,
            "creds_file": self.creds_file,
        }


@dataclass(frozen=True)
class ConnectionConfig:
    """Fully resolved connection parameters for one invocation."""

    host: str
    port: str
    lattice_prefix: str
    timeout_ms: int
    credentials: Credentials = Credentials()

    @property
    def timeout(self) -> float:
        """Request timeout in seconds."""
        return self.timeout_ms / 1000.0

    @property
    def url(self) -> str:
        return f"nats://{self.host}:{self.port}"

    def with_timeout(self, timeout_ms: int) -> "ConnectionConfig":
        return replace(self, timeout_ms=int(timeout_ms))

    def redacted(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "lattice_prefix": self.lattice_prefix,
            "timeout_ms": self.timeout_ms,
            "credentials": self.credentials.redacted(),
        }


@dataclass(frozen=True)
class PartialConfig:
    """Explicitly supplied values (flags or environment); ``None`` means unset."""

    host: Optional[str] = None
    port: Optional[str] = None
    jwt: Optional[str] = None
    seed: Optional[str] = None
    creds_file: Optional[str] = None
    lattice_prefix: Optional[str] = None
    timeout_ms: Optional[int] = None


@dataclass(frozen=True)
class ContextRecord:
    """A saved connection environment loaded from the context directory."""

    name: str = "default"
    ctl_host: Optional[str] = None
    ctl_port: Optional[str] = None
    ctl_jwt: Optional[str] = None
    ctl_seed: Optional[str] = None
    ctl_credsfile: Optional[str] = None
    ctl_lattice_prefix: Optional[str] = None
    ctl_timeout: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: str = "default") -> "ContextRecord":
        def _opt(key: str) -> Optional[str]:
            value = data.get(key)
            if value is None:
                return None
            text = str(value).strip()
            return text or None

        timeout = data.get("ctl_timeout")
        return cls(
            name=str(data.get("name") or name),
            ctl_host=_opt("ctl_host"),
            ctl_port=_opt("ctl_port"),
            ctl_jwt=_opt("ctl_jwt"),
            ctl_seed=_opt("ctl_seed"),
            ctl_credsfile=_opt("ctl_credsfile"),
            ctl_lattice_prefix=_opt("ctl_lattice_prefix"),
            ctl_timeout=int(timeout) if timeout not in (None, "") else None,
        )
