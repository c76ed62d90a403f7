"""Control client interface and loader.

The wire protocol lives in an external client implementation. latticectl
only depends on the `ControlClient` protocol below and obtains an instance
from a factory reference of the form ``package.module:callable``, e.g.
``--client mylattice.ctl:connect`` or ``LATTICECTL_CLIENT``. The factory is
called with the resolved `ConnectionConfig` and may be a coroutine function.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import os
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Union,
    runtime_checkable,
)

from .config.models import ConnectionConfig
from .exceptions import ConfigError, CtlError, TransportError
from .shared.results import AuctionResponse

__all__ = [
    "CLIENT_FACTORY_ENV",
    "ClientFactory",
    "ControlClient",
    "close_client",
    "connect_client",
    "load_client_factory",
]

logger = logging.getLogger(__name__)

CLIENT_FACTORY_ENV = "LATTICECTL_CLIENT"

# Auctions return either a collected list or a live stream of replies.
AuctionResult = Union[Sequence[AuctionResponse], AsyncIterator[AuctionResponse]]


@runtime_checkable
class ControlClient(Protocol):
    """Operations offered by the lattice control interface."""

    async def get_hosts(self, timeout: float) -> List[Dict[str, Any]]: ...

    async def get_host_inventory(self, host_id: str) -> Dict[str, Any]: ...

    async def get_claims(self) -> Dict[str, Any]: ...

    async def query_links(self) -> List[Dict[str, Any]]: ...

    async def advertise_link(
        self,
        actor_id: str,
        provider_id: str,
        contract_id: str,
        link_name: str,
        values: Mapping[str, str],
    ) -> Any: ...

    async def remove_link(self, actor_id: str, contract_id: str, link_name: str) -> Any: ...

    async def start_actor(
        self, host_id: str, actor_ref: str, annotations: Optional[Mapping[str, str]] = None
    ) -> Any: ...

    async def start_provider(
        self,
        host_id: str,
        provider_ref: str,
        link_name: Optional[str] = None,
        annotations: Optional[Mapping[str, str]] = None,
    ) -> Any: ...

    async def stop_actor(self, host_id: str, actor_id: str, count: int) -> Any: ...

    async def stop_provider(
        self, host_id: str, provider_id: str, link_name: str, contract_id: str
    ) -> Any: ...

    async def stop_host(self, host_id: str, timeout_ms: Optional[int]) -> Any: ...

    async def update_actor(self, host_id: str, actor_id: str, new_actor_ref: str) -> Any: ...

    async def perform_actor_auction(
        self, actor_ref: str, constraints: Mapping[str, str], timeout: float
    ) -> AuctionResult: ...

    async def perform_provider_auction(
        self,
        provider_ref: str,
        link_name: str,
        constraints: Mapping[str, str],
        timeout: float,
    ) -> AuctionResult: ...


ClientFactory = Callable[[ConnectionConfig], Union[ControlClient, Awaitable[ControlClient]]]


def load_client_factory(reference: Optional[str] = None) -> ClientFactory:
    """Import the factory named by ``reference`` or ``$LATTICECTL_CLIENT``."""
    ref = (reference or os.environ.get(CLIENT_FACTORY_ENV) or "").strip()
    if not ref:
        raise ConfigError(
            "no control client configured; pass --client package.module:callable "
            f"or set {CLIENT_FACTORY_ENV}"
        )
    module_path, sep, attr = ref.partition(":")
    if not sep or not module_path or not attr:
        raise ConfigError(f"invalid client reference '{ref}' (expected module:callable)")
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigError(f"cannot import client module '{module_path}': {e}") from e
    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise ConfigError(f"'{attr}' is not a callable in module {module_path}")
    return factory


async def connect_client(
    config: ConnectionConfig, factory: Optional[ClientFactory] = None
) -> ControlClient:
    """Create a control client for ``config``."""
    factory = factory or load_client_factory()
    logger.debug("Connecting to %s (prefix=%s)", config.url, config.lattice_prefix)
    try:
        client = factory(config)
        if inspect.isawaitable(client):
            client = await client
    except CtlError:
        raise
    except Exception as e:
        raise TransportError(f"connect to {config.url}", e) from e
    return client


async def close_client(client: Any) -> None:
    """Close ``client`` if it exposes a ``close`` method."""
    close = getattr(client, "close", None)
    if close is None:
        return
    try:
        result = close()
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.debug("Ignoring error while closing client: %s", e)
