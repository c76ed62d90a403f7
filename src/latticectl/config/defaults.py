"""Built-in defaults and environment variable names."""

from __future__ import annotations

from pathlib import Path

from .models import ConnectionConfig, Credentials

__all__ = [
    "CONTEXT_DIR_ENV",
    "DEFAULT_CTL_HOST",
    "DEFAULT_CTL_PORT",
    "DEFAULT_LATTICE_PREFIX",
    "DEFAULT_LINK_NAME",
    "DEFAULT_TIMEOUT_MS",
    "ENV_TO_FIELD",
    "default_context_dir",
    "get_default_config",
]

DEFAULT_CTL_HOST = "127.0.0.1"
DEFAULT_CTL_PORT = "4222"
DEFAULT_LATTICE_PREFIX = "default"
DEFAULT_TIMEOUT_MS = 2000
DEFAULT_LINK_NAME = "default"

CONTEXT_DIR_ENV = "LATTICECTL_CONTEXT_DIR"

# Environment variables that stand in for an absent CLI flag.
ENV_TO_FIELD = {
    "LATTICECTL_CTL_HOST": "host",
    "LATTICECTL_CTL_PORT": "port",
    "LATTICECTL_CTL_JWT": "jwt",
    "LATTICECTL_CTL_SEED": "seed",
    "LATTICECTL_CTL_CREDS": "creds_file",
    "LATTICECTL_LATTICE_PREFIX": "lattice_prefix",
    "LATTICECTL_CTL_TIMEOUT_MS": "timeout_ms",
}


def get_default_config() -> ConnectionConfig:
    """Return the built-in connection defaults (local bus, no auth)."""
    return ConnectionConfig(
        host=DEFAULT_CTL_HOST,
        port=DEFAULT_CTL_PORT,
        lattice_prefix=DEFAULT_LATTICE_PREFIX,
        timeout_ms=DEFAULT_TIMEOUT_MS,
        credentials=Credentials(),
    )


def default_context_dir() -> Path:
    return Path.home() / ".latticectl" / "contexts"
