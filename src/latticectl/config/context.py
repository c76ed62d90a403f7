"""Saved connection contexts.

Behavior: an explicitly requested context file that is missing or unreadable
raises `ConfigError` so the CLI can fail fast. The default context lookup is
best effort; callers treat its failure as "no context".
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from ..exceptions import ConfigError
from .defaults import CONTEXT_DIR_ENV, default_context_dir
from .models import ContextRecord

__all__ = ["context_dir", "get_default_context", "load_context"]

logger = logging.getLogger(__name__)

_DEFAULT_POINTER = ".default"
_SUFFIXES = (".json", ".yaml", ".yml")


def context_dir(override: Optional[Path] = None) -> Path:
    """Return the directory holding saved contexts."""
    if override is not None:
        return Path(override)
    env = os.environ.get(CONTEXT_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return default_context_dir()


def load_context(path: Path) -> ContextRecord:
    """Load one context file (JSON or YAML mapping)."""
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigError(f"context file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to read context {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"invalid context format (expected mapping): {path}")
    try:
        return ContextRecord.from_dict(data, name=path.stem)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid context {path}: {e}") from e


def get_default_context(ctx_dir: Path) -> ContextRecord:
    """Load the context named by ``.default``, else ``default.json``/``.yaml``."""
    ctx_dir = Path(ctx_dir)
    name = "default"
    pointer = ctx_dir / _DEFAULT_POINTER
    if pointer.is_file():
        try:
            name = pointer.read_text(encoding="utf-8").strip() or name
        except OSError as e:
            raise ConfigError(f"failed to read {pointer}: {e}") from e
    for suffix in _SUFFIXES:
        candidate = ctx_dir / f"{name}{suffix}"
        if candidate.is_file():
            return load_context(candidate)
    raise ConfigError(f"no default context '{name}' in {ctx_dir}")
