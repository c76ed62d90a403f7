"""User-facing control operations.

One coroutine per command. Each validates identifiers before touching the
network, bounds every request with the session timeout, and turns any
client failure into a `TransportError`, so callers only ever see
`CtlError` subclasses. A host declining a mutating request is not an
error here: the returned `Acknowledgement` carries ``accepted=False``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, Union

from .client import ControlClient
from .config.defaults import DEFAULT_LINK_NAME
from .config.models import ConnectionConfig
from .exceptions import CtlError, TransportError, ValidationError
from .orchestration.manifest import apply_manifest as _apply_manifest
from .placement import auction_window_ms, resolve_host
from .shared.ids import parse_module_id, parse_server_id, parse_service_id
from .shared.labels import labels_to_dict
from .shared.manifest import ManifestSpec
from .shared.results import Acknowledgement, OperationOutcome

__all__ = [
    "CtlSession",
    "apply_manifest",
    "get_claims",
    "get_host_inventory",
    "get_hosts",
    "link_del",
    "link_put",
    "link_query",
    "start_actor",
    "start_provider",
    "stop_actor",
    "stop_host",
    "stop_provider",
    "update_actor",
]

logger = logging.getLogger(__name__)

Pairs = Union[Mapping[str, str], Iterable[str], None]


@dataclass(frozen=True)
class CtlSession:
    """A connected client plus the configuration it was built from."""

    client: ControlClient
    config: ConnectionConfig

    @property
    def timeout(self) -> float:
        return self.config.timeout


async def _call(operation: str, request: Awaitable[Any], timeout: float) -> Any:
    try:
        return await asyncio.wait_for(request, timeout=timeout)
    except CtlError:
        raise
    except asyncio.TimeoutError as e:
        raise TransportError(operation, TimeoutError(f"no response within {timeout:g}s")) from e
    except Exception as e:
        raise TransportError(operation, e) from e


async def _ack(operation: str, request: Awaitable[Any], timeout: float) -> Acknowledgement:
    ack = Acknowledgement.from_obj(await _call(operation, request, timeout))
    if not ack.accepted:
        logger.info("%s not accepted: %s", operation, ack.error)
    return ack


def _pairs(values: Pairs, field: str) -> Dict[str, str]:
    if values is None:
        return {}
    if isinstance(values, Mapping):
        return {str(k): str(v) for k, v in values.items()}
    if isinstance(values, str):
        raise ValidationError(f"{field} must be a list of KEY=VALUE strings")
    return labels_to_dict(values, field=field)


# --------------------------------------------------------------------------- #
# Queries
# --------------------------------------------------------------------------- #
async def get_hosts(session: CtlSession) -> List[Dict[str, Any]]:
    # The client spends the whole timeout gathering host replies; allow it to
    # finish that window before our own deadline fires.
    hosts = await _call(
        "get hosts", session.client.get_hosts(session.timeout), 2 * session.timeout
    )
    return list(hosts or [])


async def get_host_inventory(session: CtlSession, host_id: str) -> Dict[str, Any]:
    host = parse_server_id(host_id)
    return await _call(
        f"get inventory for host {host}",
        session.client.get_host_inventory(host),
        session.timeout,
    )


async def get_claims(session: CtlSession) -> Dict[str, Any]:
    return await _call("get claims", session.client.get_claims(), session.timeout)


async def link_query(session: CtlSession) -> List[Dict[str, Any]]:
    links = await _call("query links", session.client.query_links(), session.timeout)
    return list(links or [])


# --------------------------------------------------------------------------- #
# Links
# --------------------------------------------------------------------------- #
async def link_put(
    session: CtlSession,
    actor_id: str,
    provider_id: str,
    contract_id: str,
    link_name: Optional[str] = None,
    values: Pairs = None,
) -> Acknowledgement:
    actor = parse_module_id(actor_id)
    provider = parse_service_id(provider_id)
    link_values = _pairs(values, "link value")
    return await _ack(
        f"link put {actor} -> {provider}",
        session.client.advertise_link(
            actor, provider, contract_id, link_name or DEFAULT_LINK_NAME, link_values
        ),
        session.timeout,
    )


async def link_del(
    session: CtlSession,
    actor_id: str,
    contract_id: str,
    link_name: Optional[str] = None,
) -> Acknowledgement:
    actor = parse_module_id(actor_id)
    return await _ack(
        f"link del {actor} ({contract_id})",
        session.client.remove_link(actor, contract_id, link_name or DEFAULT_LINK_NAME),
        session.timeout,
    )


# --------------------------------------------------------------------------- #
# Workload lifecycle
# --------------------------------------------------------------------------- #
async def _place(
    session: CtlSession,
    kind: str,
    workload_ref: str,
    host_id: Optional[str],
    constraints: Pairs,
    auction_timeout_ms: Optional[int],
    link_name: Optional[str] = None,
) -> str:
    window = auction_window_ms(kind, auction_timeout_ms) / 1000.0
    # Constraints are ignored, and so not validated, under explicit placement.
    labels = {} if host_id else _pairs(constraints, "constraint")

    def auction(ref: str, labels: Mapping[str, str], window: float) -> Any:
        if kind == "provider":
            request = session.client.perform_provider_auction(
                ref, link_name or DEFAULT_LINK_NAME, labels, window
            )
        else:
            request = session.client.perform_actor_auction(ref, labels, window)
        if not inspect.isawaitable(request):
            # Async generator: the collector bounds it by the window.
            return request
        return _call(f"{kind} auction for {ref}", request, window + session.timeout)

    try:
        return await resolve_host(host_id, workload_ref, labels, window, auction, kind=kind)
    except CtlError:
        raise
    except Exception as e:
        raise TransportError(f"{kind} auction for {workload_ref}", e) from e


async def start_actor(
    session: CtlSession,
    actor_ref: str,
    host_id: Optional[str] = None,
    constraints: Pairs = None,
    auction_timeout_ms: Optional[int] = None,
) -> Acknowledgement:
    host = await _place(session, "actor", actor_ref, host_id, constraints, auction_timeout_ms)
    logger.info("Starting actor %s on %s", actor_ref, host)
    return await _ack(
        f"start actor {actor_ref}",
        session.client.start_actor(host, actor_ref, None),
        session.timeout,
    )


async def start_provider(
    session: CtlSession,
    provider_ref: str,
    host_id: Optional[str] = None,
    link_name: str = DEFAULT_LINK_NAME,
    constraints: Pairs = None,
    auction_timeout_ms: Optional[int] = None,
) -> Acknowledgement:
    host = await _place(
        session, "provider", provider_ref, host_id, constraints, auction_timeout_ms, link_name
    )
    logger.info("Starting provider %s (%s) on %s", provider_ref, link_name, host)
    return await _ack(
        f"start provider {provider_ref}",
        session.client.start_provider(host, provider_ref, link_name, None),
        session.timeout,
    )


async def stop_actor(
    session: CtlSession, host_id: str, actor_id: str, count: int = 1
) -> Acknowledgement:
    host = parse_server_id(host_id)
    actor = parse_module_id(actor_id)
    if count < 1:
        raise ValidationError(f"count must be at least 1, got {count}")
    return await _ack(
        f"stop actor {actor}",
        session.client.stop_actor(host, actor, count),
        session.timeout,
    )


async def stop_provider(
    session: CtlSession,
    host_id: str,
    provider_id: str,
    link_name: str,
    contract_id: str,
) -> Acknowledgement:
    host = parse_server_id(host_id)
    provider = parse_service_id(provider_id)
    return await _ack(
        f"stop provider {provider}",
        session.client.stop_provider(host, provider, link_name, contract_id),
        session.timeout,
    )


async def stop_host(
    session: CtlSession, host_id: str, shutdown_timeout_ms: Optional[int] = None
) -> Acknowledgement:
    host = parse_server_id(host_id)
    return await _ack(
        f"stop host {host}",
        session.client.stop_host(host, shutdown_timeout_ms),
        session.timeout,
    )


async def update_actor(
    session: CtlSession, host_id: str, actor_id: str, new_actor_ref: str
) -> Acknowledgement:
    host = parse_server_id(host_id)
    actor = parse_module_id(actor_id)
    return await _ack(
        f"update actor {actor}",
        session.client.update_actor(host, actor, new_actor_ref),
        session.timeout,
    )


async def apply_manifest(
    session: CtlSession, host_id: str, manifest: ManifestSpec
) -> List[OperationOutcome]:
    return await _apply_manifest(host_id, manifest, session.client, timeout=session.timeout)
