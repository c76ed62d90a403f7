"""Layered connection configuration.

Each field is resolved independently: explicit value (flag or environment),
then the saved context, then the built-in default. A user may override only
the timeout while inheriting host and port from a context.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..exceptions import ConfigError
from .context import context_dir, get_default_context, load_context
from .defaults import get_default_config
from .models import ConnectionConfig, ContextRecord, Credentials, PartialConfig

__all__ = ["discover_context", "resolve", "resolve_connection", "resolve_credentials"]

logger = logging.getLogger(__name__)


def _first(*values):
    """Return the first value that is neither ``None`` nor an empty string."""
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _pair(jwt: Optional[str], seed: Optional[str], source: str) -> Credentials:
    if not jwt or not seed:
        missing = "seed" if jwt else "jwt"
        raise ConfigError(
            f"jwt and seed must be supplied together ({source} is missing the {missing})"
        )
    return Credentials(jwt=jwt, seed=seed)


def resolve_credentials(
    explicit: PartialConfig,
    context: Optional[ContextRecord],
    default: Credentials,
) -> Credentials:
    """Pick one credential mechanism.

    Precedence: explicit jwt/seed, explicit credentials file, context jwt/seed,
    context credentials file, default. Within one layer jwt/seed beats a
    credentials file.
    """
    ctx_jwt = _first(context.ctl_jwt) if context else None
    ctx_seed = _first(context.ctl_seed) if context else None
    ctx_creds = _first(context.ctl_credsfile) if context else None

    jwt = _first(explicit.jwt)
    seed = _first(explicit.seed)
    if jwt or seed:
        return _pair(_first(jwt, ctx_jwt), _first(seed, ctx_seed), "explicit configuration")

    creds_file = _first(explicit.creds_file)
    if creds_file:
        return Credentials(creds_file=str(creds_file))

    if ctx_jwt or ctx_seed:
        return _pair(ctx_jwt, ctx_seed, f"context '{context.name}'")
    if ctx_creds:
        return Credentials(creds_file=ctx_creds)

    if default.jwt or default.seed:
        return _pair(default.jwt, default.seed, "defaults")
    return default


def resolve(
    explicit: PartialConfig,
    context: Optional[ContextRecord],
    defaults: ConnectionConfig,
) -> ConnectionConfig:
    """Merge explicit values, an optional context and defaults field by field."""
    ctx = context or ContextRecord()
    timeout = _first(explicit.timeout_ms, ctx.ctl_timeout, defaults.timeout_ms)
    try:
        timeout_ms = int(timeout)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid timeout '{timeout}': {e}") from e
    if timeout_ms <= 0:
        raise ConfigError(f"timeout must be positive, got {timeout_ms} ms")

    return ConnectionConfig(
        host=str(_first(explicit.host, ctx.ctl_host, defaults.host)),
        port=str(_first(explicit.port, ctx.ctl_port, defaults.port)),
        lattice_prefix=str(
            _first(explicit.lattice_prefix, ctx.ctl_lattice_prefix, defaults.lattice_prefix)
        ),
        timeout_ms=timeout_ms,
        credentials=resolve_credentials(explicit, context, defaults.credentials),
    )


def discover_context(
    path: Optional[Path] = None, ctx_dir: Optional[Path] = None
) -> Optional[ContextRecord]:
    """Load the requested context, or the default one if present.

    An explicit ``path`` that fails to load raises `ConfigError`. Without a
    path, a missing or broken default context yields ``None``.
    """
    if path is not None:
        return load_context(path)
    directory = context_dir(ctx_dir)
    try:
        ctx = get_default_context(directory)
    except ConfigError as e:
        logger.debug("No default context used: %s", e)
        return None
    logger.debug("Using default context '%s' from %s", ctx.name, directory)
    return ctx


def resolve_connection(
    explicit: PartialConfig,
    context_path: Optional[Path] = None,
    defaults: Optional[ConnectionConfig] = None,
) -> ConnectionConfig:
    """Discover the context and resolve the final configuration."""
    context = discover_context(context_path)
    config = resolve(explicit, context, defaults or get_default_config())
    logger.debug(
        "Resolved connection: %s:%s prefix=%s timeout_ms=%s auth=%s",
        config.host,
        config.port,
        config.lattice_prefix,
        config.timeout_ms,
        config.credentials.kind,
    )
    return config
