"""Map parsed commands to operations and render the result."""

from __future__ import annotations

import argparse
import contextlib
import dataclasses
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

import yaml
from rich.console import Console

from .. import operations as ops
from ..client import ClientFactory, close_client, connect_client, load_client_factory
from ..config.loader import build_partial_config
from ..config.models import PartialConfig
from ..config.resolver import resolve_connection
from ..exceptions import CtlError, ValidationError
from ..placement import start_timeout_ms
from ..shared.manifest import ManifestSpec
from . import output

__all__ = ["dispatch", "load_manifest"]

logger = logging.getLogger(__name__)

Handler = Callable[[Console, ops.CtlSession, argparse.Namespace, str], Awaitable[int]]

_START_KINDS = {"start_actor": "actor", "start_provider": "provider"}


def load_manifest(path: Path) -> ManifestSpec:
    """Read a YAML/JSON manifest file into a `ManifestSpec`."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(f"Failed to load manifest {path}: {e}") from e
    return ManifestSpec.from_dict(data)


async def _spin(console: Console, kind: str, message: str, request: Awaitable[Any]) -> Any:
    # A spinner would corrupt JSON output.
    status = console.status(message) if kind == "text" else contextlib.nullcontext()
    with status:
        return await request


async def _get_hosts(console, session, args, kind) -> int:
    hosts = await _spin(console, kind, "Retrieving hosts ...", ops.get_hosts(session))
    output.render_hosts(console, hosts, kind)
    return 0


async def _get_inventory(console, session, args, kind) -> int:
    inv = await _spin(
        console,
        kind,
        f"Retrieving inventory for host {args.host_id} ...",
        ops.get_host_inventory(session, args.host_id),
    )
    output.render_inventory(console, inv, kind)
    return 0


async def _get_claims(console, session, args, kind) -> int:
    claims = await _spin(console, kind, "Retrieving claims ...", ops.get_claims(session))
    output.render_claims(console, claims, kind)
    return 0


async def _link_query(console, session, args, kind) -> int:
    links = await _spin(console, kind, "Querying links ...", ops.link_query(session))
    output.render_links(console, links, kind)
    return 0


async def _link_put(console, session, args, kind) -> int:
    ack = await _spin(
        console,
        kind,
        f"Defining link between {args.actor_id} and {args.provider_id} ...",
        ops.link_put(
            session,
            args.actor_id,
            args.provider_id,
            args.contract_id,
            link_name=args.link_name,
            values=args.values,
        ),
    )
    return output.render_ack(
        console,
        ack,
        f"Link between {args.actor_id} and {args.provider_id}",
        f"Published link ({args.actor_id}) <-> ({args.provider_id}) successfully",
        kind,
    )


async def _link_del(console, session, args, kind) -> int:
    link_name = args.link_name or "default"
    ack = await _spin(
        console,
        kind,
        f"Deleting link for {args.actor_id} on {args.contract_id} ({link_name}) ...",
        ops.link_del(session, args.actor_id, args.contract_id, link_name=link_name),
    )
    return output.render_ack(
        console,
        ack,
        f"Link deletion for {args.actor_id} on {args.contract_id} ({link_name})",
        f"Deleted link for {args.actor_id} on {args.contract_id} ({link_name}) successfully",
        kind,
    )


async def _start_actor(console, session, args, kind) -> int:
    ack = await _spin(
        console,
        kind,
        f"Starting actor {args.actor_ref} ...",
        ops.start_actor(
            session,
            args.actor_ref,
            host_id=args.host_id,
            constraints=args.constraints,
            auction_timeout_ms=args.auction_timeout_ms,
        ),
    )
    return output.render_ack(
        console,
        ack,
        f"Start actor {args.actor_ref}",
        f"Actor {args.actor_ref} started successfully",
        kind,
    )


async def _start_provider(console, session, args, kind) -> int:
    ack = await _spin(
        console,
        kind,
        f"Starting provider {args.provider_ref} ...",
        ops.start_provider(
            session,
            args.provider_ref,
            host_id=args.host_id,
            link_name=args.link_name,
            constraints=args.constraints,
            auction_timeout_ms=args.auction_timeout_ms,
        ),
    )
    return output.render_ack(
        console,
        ack,
        f"Start provider {args.provider_ref}",
        f"Provider {args.provider_ref} started successfully",
        kind,
    )


async def _stop_actor(console, session, args, kind) -> int:
    ack = await _spin(
        console,
        kind,
        f"Stopping actor {args.actor_id} ...",
        ops.stop_actor(session, args.host_id, args.actor_id, count=args.count),
    )
    return output.render_ack(
        console,
        ack,
        f"Stop actor {args.actor_id}",
        f"Actor {args.actor_id} stopped successfully",
        kind,
    )


async def _stop_provider(console, session, args, kind) -> int:
    ack = await _spin(
        console,
        kind,
        f"Stopping provider {args.provider_id} ...",
        ops.stop_provider(
            session, args.host_id, args.provider_id, args.link_name, args.contract_id
        ),
    )
    return output.render_ack(
        console,
        ack,
        f"Stop provider {args.provider_id}",
        f"Provider {args.provider_id} stopped successfully",
        kind,
    )


async def _stop_host(console, session, args, kind) -> int:
    ack = await _spin(
        console,
        kind,
        f"Stopping host {args.host_id} ...",
        ops.stop_host(session, args.host_id, args.host_shutdown_timeout),
    )
    return output.render_ack(
        console,
        ack,
        f"Stop host {args.host_id}",
        f"Host {args.host_id} acknowledged stop request",
        kind,
    )


async def _update_actor(console, session, args, kind) -> int:
    ack = await _spin(
        console,
        kind,
        f"Updating actor {args.actor_id} to {args.new_actor_ref} ...",
        ops.update_actor(session, args.host_id, args.actor_id, args.new_actor_ref),
    )
    return output.render_ack(
        console,
        ack,
        f"Update actor {args.actor_id}",
        f"Actor {args.actor_id} updated to {args.new_actor_ref}",
        kind,
    )


async def _apply(console, session, args, kind) -> int:
    outcomes = await _spin(
        console,
        kind,
        "Applying manifest ...",
        ops.apply_manifest(session, args.host_key, args.manifest),
    )
    return output.render_outcomes(console, outcomes, kind)


HANDLERS: Dict[str, Handler] = {
    "get_hosts": _get_hosts,
    "get_inventory": _get_inventory,
    "get_claims": _get_claims,
    "link_query": _link_query,
    "link_put": _link_put,
    "link_del": _link_del,
    "start_actor": _start_actor,
    "start_provider": _start_provider,
    "stop_actor": _stop_actor,
    "stop_provider": _stop_provider,
    "stop_host": _stop_host,
    "update_actor": _update_actor,
    "apply": _apply,
}


def _explicit_config(args: argparse.Namespace) -> PartialConfig:
    explicit = build_partial_config(args)
    kind = _START_KINDS.get(args.handler)
    if kind and explicit.timeout_ms is None:
        # Starting a workload waits for the host to fetch the artifact.
        explicit = dataclasses.replace(explicit, timeout_ms=start_timeout_ms(kind))
    return explicit


async def dispatch(
    console: Console,
    args: argparse.Namespace,
    client_factory: Optional[ClientFactory] = None,
) -> int:
    """Run the command described by ``args``; return the process exit code."""
    kind = getattr(args, "output", "text")
    handler = HANDLERS[args.handler]
    try:
        config = resolve_connection(_explicit_config(args), getattr(args, "context", None))
        if args.handler == "apply":
            args.manifest = load_manifest(args.path)
        factory = client_factory or load_client_factory(getattr(args, "client_factory", None))
        client = await connect_client(config, factory)
        try:
            return await handler(console, ops.CtlSession(client, config), args, kind)
        finally:
            await close_client(client)
    except CtlError as e:
        logger.debug("Command %s failed: %s", args.handler, e)
        output.render_error(console, e, kind)
        return 1
