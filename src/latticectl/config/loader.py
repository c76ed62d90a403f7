"""Assembly of the explicit configuration layer from CLI args and environment."""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

from ..exceptions import ConfigError
from .defaults import ENV_TO_FIELD
from .models import PartialConfig

__all__ = ["build_partial_config", "load_env_config"]

_ARG_TO_FIELD = {
    "ctl_host": "host",
    "ctl_port": "port",
    "ctl_jwt": "jwt",
    "ctl_seed": "seed",
    "ctl_credsfile": "creds_file",
    "lattice_prefix": "lattice_prefix",
    "timeout_ms": "timeout_ms",
}


def load_env_config(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Return explicit-layer fields found in the environment."""
    env = os.environ if environ is None else environ
    cfg: Dict[str, Any] = {}
    for env_key, field in ENV_TO_FIELD.items():
        value = env.get(env_key)
        if value is not None and value.strip():
            cfg[field] = value.strip()
    return cfg


def build_partial_config(
    args: Any, environ: Optional[Mapping[str, str]] = None
) -> PartialConfig:
    """Translate argparse args into a `PartialConfig`; flags beat environment."""
    cfg = load_env_config(environ)
    for attr, field in _ARG_TO_FIELD.items():
        value = getattr(args, attr, None)
        if value is not None and str(value).strip() != "":
            cfg[field] = value
    if "timeout_ms" in cfg:
        try:
            cfg["timeout_ms"] = int(cfg["timeout_ms"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid timeout '{cfg['timeout_ms']}': {e}") from e
    if "port" in cfg:
        cfg["port"] = str(cfg["port"])
    if "creds_file" in cfg:
        cfg["creds_file"] = str(cfg["creds_file"])
    return PartialConfig(**cfg)
