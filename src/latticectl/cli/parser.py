"""CLI parser builder for latticectl.

`create_parser()` assembles the command tree from small helpers. Every leaf
command shares the connection and output option groups and records the
operation it maps to in ``args.handler``.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Callable

from .. import __version__
from ..config.defaults import DEFAULT_LINK_NAME
from ..exceptions import IdentifierError
from ..shared.ids import parse_module_id, parse_server_id, parse_service_id
from .output import OUTPUT_KINDS

__all__ = ["create_parser"]


def _id_type(parse: Callable[[str, str], str], field: str) -> Callable[[str], str]:
    def _convert(value: str) -> str:
        try:
            return parse(value, field)
        except IdentifierError as e:
            raise argparse.ArgumentTypeError(str(e)) from e

    _convert.__name__ = field
    return _convert


host_id_type = _id_type(parse_server_id, "host-id")
actor_id_type = _id_type(parse_module_id, "actor-id")
provider_id_type = _id_type(parse_service_id, "provider-id")


def _epilog() -> str:
    return (
        "Quick examples:\n"
        "  latticectl get hosts\n"
        "  latticectl get inventory <host-id> -o json\n"
        "  latticectl start actor registry.example.com/echo:0.3.4 -c arch=x86_64\n"
        "  latticectl start provider registry.example.com/httpserver:0.14 --link-name web\n"
        "  latticectl link put <actor-id> <provider-id> wasmcloud:httpserver PORT=8080\n"
        "  latticectl apply <host-id> manifest.yaml\n\n"
        "Connection values come from flags, then LATTICECTL_* environment\n"
        "variables, then the saved context, then built-in defaults.\n"
    )


def _connection_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    g = parent.add_argument_group("Connection")
    g.add_argument("-r", "--ctl-host", help="Control bus host (default 127.0.0.1)")
    g.add_argument("-p", "--ctl-port", help="Control bus port (default 4222)")
    g.add_argument("--ctl-jwt", help="JWT for bus authentication; requires --ctl-seed")
    g.add_argument("--ctl-seed", help="Seed for bus authentication; requires --ctl-jwt")
    g.add_argument("--ctl-credsfile", type=Path, help="Credentials file (jwt and seed)")
    g.add_argument("-x", "--lattice-prefix", help="Lattice prefix (default 'default')")
    g.add_argument(
        "-t", "--timeout-ms", type=int, help="Request timeout in ms (default 2000)"
    )
    g.add_argument("--context", type=Path, help="Path to a saved context file")
    g.add_argument(
        "--client",
        dest="client_factory",
        metavar="MODULE:CALLABLE",
        help="Control client factory (default: $LATTICECTL_CLIENT)",
    )
    d = parent.add_argument_group("Display")
    d.add_argument(
        "-o", "--output", choices=OUTPUT_KINDS, default="text", help="Output format"
    )
    d.add_argument("--debug", action="store_true", help="Verbose logging on stderr")
    d.add_argument("--quiet", action="store_true", help="Only log errors")
    d.add_argument("--log-file", type=Path, help="Append JSONL logs to this file")
    return parent


def _leaf(subparsers, name: str, help_text: str, handler: str, parent) -> argparse.ArgumentParser:
    p = subparsers.add_parser(name, help=help_text, description=help_text, parents=[parent])
    p.set_defaults(handler=handler)
    return p


def _add_get(root, parent) -> None:
    get = root.add_parser("get", help="Retrieve information about the lattice")
    sub = get.add_subparsers(dest="get_command", required=True, metavar="{hosts,inventory,claims}")
    _leaf(sub, "hosts", "Query lattice for running hosts", "get_hosts", parent)
    inv = _leaf(
        sub,
        "inventory",
        "Query a host for its labels, actors and providers",
        "get_inventory",
        parent,
    )
    inv.add_argument("host_id", metavar="host-id", type=host_id_type, help="Id of host")
    _leaf(sub, "claims", "Query lattice for its claims cache", "get_claims", parent)


def _add_link(root, parent) -> None:
    link = root.add_parser("link", help="Link an actor and a provider")
    sub = link.add_subparsers(dest="link_command", required=True, metavar="{query,put,del}")
    _leaf(sub, "query", "Query established links", "link_query", parent)

    put = _leaf(sub, "put", "Establish a link definition", "link_put", parent)
    put.add_argument("actor_id", metavar="actor-id", type=actor_id_type)
    put.add_argument("provider_id", metavar="provider-id", type=provider_id_type)
    put.add_argument("contract_id", metavar="contract-id")
    put.add_argument("values", nargs="*", metavar="KEY=VALUE", help="Link values")
    put.add_argument("-l", "--link-name", help=f"Link name (default '{DEFAULT_LINK_NAME}')")

    rm = _leaf(sub, "del", "Delete a link definition", "link_del", parent)
    rm.add_argument("actor_id", metavar="actor-id", type=actor_id_type)
    rm.add_argument("contract_id", metavar="contract-id")
    rm.add_argument("-l", "--link-name", help=f"Link name (default '{DEFAULT_LINK_NAME}')")


def _add_placement_args(p: argparse.ArgumentParser, kind: str) -> None:
    p.add_argument(
        "--host-id",
        type=host_id_type,
        help=f"Target host; if omitted the {kind} is auctioned in the lattice",
    )
    p.add_argument(
        "-c",
        "--constraint",
        action="append",
        dest="constraints",
        metavar="LABEL=VALUE",
        help="Auction constraint (repeatable); ignored when --host-id is given",
    )
    p.add_argument(
        "--auction-timeout-ms", type=int, help="How long to wait for auction replies"
    )


def _add_start(root, parent) -> None:
    start = root.add_parser("start", help="Start an actor or a provider")
    sub = start.add_subparsers(dest="start_command", required=True, metavar="{actor,provider}")
    actor = _leaf(sub, "actor", "Launch an actor in a host", "start_actor", parent)
    actor.add_argument("actor_ref", metavar="actor-ref", help="Actor reference, e.g. an OCI URL")
    _add_placement_args(actor, "actor")

    prov = _leaf(sub, "provider", "Launch a provider in a host", "start_provider", parent)
    prov.add_argument(
        "provider_ref", metavar="provider-ref", help="Provider reference, e.g. an OCI URL"
    )
    prov.add_argument("-l", "--link-name", default=DEFAULT_LINK_NAME, help="Provider link name")
    _add_placement_args(prov, "provider")


def _add_stop(root, parent) -> None:
    stop = root.add_parser("stop", help="Stop an actor, provider, or host")
    sub = stop.add_subparsers(dest="stop_command", required=True, metavar="{actor,provider,host}")
    actor = _leaf(sub, "actor", "Stop an actor running in a host", "stop_actor", parent)
    actor.add_argument("host_id", metavar="host-id", type=host_id_type)
    actor.add_argument("actor_id", metavar="actor-id", type=actor_id_type)
    actor.add_argument("--count", type=int, default=1, help="Number of instances to stop")

    prov = _leaf(sub, "provider", "Stop a provider running in a host", "stop_provider", parent)
    prov.add_argument("host_id", metavar="host-id", type=host_id_type)
    prov.add_argument("provider_id", metavar="provider-id", type=provider_id_type)
    prov.add_argument("link_name", metavar="link-name")
    prov.add_argument("contract_id", metavar="contract-id")

    host = _leaf(sub, "host", "Purge and stop a running host", "stop_host", parent)
    host.add_argument("host_id", metavar="host-id", type=host_id_type)
    host.add_argument(
        "--host-timeout",
        dest="host_shutdown_timeout",
        type=int,
        help="Graceful shutdown time for the host in ms",
    )


def _add_update(root, parent) -> None:
    update = root.add_parser("update", help="Update an actor running in a host")
    sub = update.add_subparsers(dest="update_command", required=True, metavar="{actor}")
    actor = _leaf(sub, "actor", "Update an actor running in a host", "update_actor", parent)
    actor.add_argument("host_id", metavar="host-id", type=host_id_type)
    actor.add_argument("actor_id", metavar="actor-id", type=actor_id_type)
    actor.add_argument("new_actor_ref", metavar="new-actor-ref")


def _add_apply(root, parent) -> None:
    p = _leaf(root, "apply", "Apply a manifest file to a target host", "apply", parent)
    p.add_argument("host_key", metavar="host-key", type=host_id_type)
    p.add_argument("path", type=Path, help="Manifest file (YAML or JSON)")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="latticectl",
        description="Control hosts, actors, providers and links in a lattice.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_epilog(),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parent = _connection_parent()
    root = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")
    _add_get(root, parent)
    _add_link(root, parent)
    _add_start(root, parent)
    _add_stop(root, parent)
    _add_update(root, parent)
    _add_apply(root, parent)
    return parser
