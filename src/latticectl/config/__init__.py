"""Configuration models, defaults, context loading and resolution."""

from latticectl.config.models import (
    ConnectionConfig,
    ContextRecord,
    Credentials,
    PartialConfig,
)
from latticectl.config.defaults import (
    DEFAULT_CTL_HOST,
    DEFAULT_CTL_PORT,
    DEFAULT_LATTICE_PREFIX,
    DEFAULT_LINK_NAME,
    DEFAULT_TIMEOUT_MS,
    get_default_config,
)
from latticectl.config.context import context_dir, get_default_context, load_context
from latticectl.config.loader import build_partial_config, load_env_config
from latticectl.config.resolver import (
    discover_context,
    resolve,
    resolve_connection,
    resolve_credentials,
)

__all__ = [
    "ConnectionConfig",
    "ContextRecord",
    "Credentials",
    "PartialConfig",
    "DEFAULT_CTL_HOST",
    "DEFAULT_CTL_PORT",
    "DEFAULT_LATTICE_PREFIX",
    "DEFAULT_LINK_NAME",
    "DEFAULT_TIMEOUT_MS",
    "get_default_config",
    "context_dir",
    "get_default_context",
    "load_context",
    "build_partial_config",
    "load_env_config",
    "discover_context",
    "resolve",
    "resolve_connection",
    "resolve_credentials",
]
