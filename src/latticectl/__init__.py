"""latticectl public API surface.

Stable entry points for embedding the control client; the CLI lives in
`latticectl.cli` and everything else should be considered internal.
"""

from .version import __version__
from .config import ConnectionConfig, PartialConfig, resolve, resolve_connection
from .exceptions import (
    ConfigError,
    CtlError,
    NoSuitableHost,
    OperationRejected,
    TransportError,
)
from .operations import CtlSession
from .orchestration import apply_manifest
from .placement import resolve_host
from .shared import Acknowledgement, ManifestSpec, OperationOutcome

__all__ = [
    "Acknowledgement",
    "ConfigError",
    "ConnectionConfig",
    "CtlError",
    "CtlSession",
    "ManifestSpec",
    "NoSuitableHost",
    "OperationOutcome",
    "OperationRejected",
    "PartialConfig",
    "TransportError",
    "__version__",
    "apply_manifest",
    "resolve",
    "resolve_connection",
    "resolve_host",
]
