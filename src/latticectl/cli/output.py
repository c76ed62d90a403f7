"""Rendering of command results as Rich text or JSON."""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..exceptions import OperationRejected
from ..shared.results import Acknowledgement, OperationOutcome

__all__ = [
    "OUTPUT_KINDS",
    "render_ack",
    "render_claims",
    "render_error",
    "render_hosts",
    "render_inventory",
    "render_links",
    "render_outcomes",
]

OUTPUT_KINDS = ("text", "json")


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _plain(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, Mapping):
        return {str(k): _plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_plain(v) for v in obj]
    if hasattr(obj, "__dict__") and not isinstance(obj, (str, bytes)):
        return {k: _plain(v) for k, v in vars(obj).items() if not k.startswith("_")}
    return obj


def _emit_json(console: Console, payload: Dict[str, Any]) -> None:
    console.out(json.dumps(_plain(payload), default=str), highlight=False)


def _fmt_uptime(seconds: Any) -> str:
    try:
        total = int(seconds)
    except (TypeError, ValueError):
        return "-"
    days, rem = divmod(total, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, sec = divmod(rem, 60)
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{sec}s")
    return " ".join(parts)


def render_error(console: Console, error: BaseException, kind: str = "text") -> None:
    if kind == "json":
        _emit_json(console, {"success": False, "error": str(error)})
    else:
        console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)


def render_hosts(console: Console, hosts: Sequence[Any], kind: str = "text") -> None:
    if kind == "json":
        _emit_json(console, {"success": True, "hosts": list(hosts)})
        return
    if not hosts:
        console.print("No hosts found")
        return
    table = Table(title="Hosts", show_lines=False)
    table.add_column("Host ID", no_wrap=True)
    table.add_column("Uptime", justify="right")
    for host in hosts:
        table.add_row(str(_get(host, "id", "-")), _fmt_uptime(_get(host, "uptime_seconds")))
    console.print(table)


def render_inventory(console: Console, inventory: Any, kind: str = "text") -> None:
    if kind == "json":
        _emit_json(console, {"success": True, "inventory": inventory})
        return
    host_id = _get(inventory, "host_id", "-")
    labels = _get(inventory, "labels", None) or {}
    actors = _get(inventory, "actors", None) or []
    providers = _get(inventory, "providers", None) or []

    console.print(f"[bold]Host Inventory[/bold] ({escape(str(host_id))})", highlight=False)
    if labels:
        table = Table(show_header=False, box=None)
        for key, value in sorted(dict(labels).items()):
            table.add_row(f"  {key}", str(value))
        console.print(table)
    else:
        console.print("  No labels present")

    if actors:
        table = Table(title="Actors")
        table.add_column("Actor ID", no_wrap=True)
        table.add_column("Image Reference")
        for actor in actors:
            table.add_row(str(_get(actor, "id", "-")), str(_get(actor, "image_ref") or "N/A"))
        console.print(table)
    else:
        console.print("  No actors found")

    if providers:
        table = Table(title="Providers")
        table.add_column("Provider ID", no_wrap=True)
        table.add_column("Link Name")
        table.add_column("Image Reference")
        for prov in providers:
            table.add_row(
                str(_get(prov, "id", "-")),
                str(_get(prov, "link_name", "-")),
                str(_get(prov, "image_ref") or "N/A"),
            )
        console.print(table)
    else:
        console.print("  No providers found")


def render_claims(console: Console, claims: Any, kind: str = "text") -> None:
    if kind == "json":
        _emit_json(console, {"success": True, "claims": claims})
        return
    entries: Iterable[Any] = _get(claims, "claims", None) or []
    table = Table(title="Claims")
    for col in ("Issuer", "Subject", "Capabilities", "Version", "Revision"):
        table.add_column(col)
    count = 0
    for claim in entries:
        count += 1
        caps = _get(claim, "caps") or ""
        if isinstance(caps, (list, tuple)):
            caps = ",".join(str(c) for c in caps)
        table.add_row(
            str(_get(claim, "iss", "")),
            str(_get(claim, "sub", "")),
            str(caps),
            str(_get(claim, "version", "")),
            str(_get(claim, "rev", "")),
        )
    if count == 0:
        console.print("No claims found")
        return
    console.print(table)


def render_links(console: Console, links: Sequence[Any], kind: str = "text") -> None:
    if kind == "json":
        _emit_json(console, {"success": True, "links": list(links)})
        return
    if not links:
        console.print("No links found")
        return
    table = Table(title="Links")
    for col in ("Actor ID", "Provider ID", "Contract ID", "Link Name"):
        table.add_column(col, no_wrap=True)
    for link in links:
        table.add_row(
            str(_get(link, "actor_id", "")),
            str(_get(link, "provider_id", "")),
            str(_get(link, "contract_id", "")),
            str(_get(link, "link_name", "")),
        )
    console.print(table)


def render_ack(
    console: Console,
    ack: Acknowledgement,
    description: str,
    success_message: str,
    kind: str = "text",
) -> int:
    """Render a mutating command's acknowledgement; return the exit code.

    A host declining the request is a completed command, not a failure: the
    reason is shown and the exit code stays 0. JSON output carries
    ``success: false``.
    """
    if ack.accepted:
        if kind == "json":
            _emit_json(console, {"success": True, "message": success_message})
        else:
            console.print(f"[green]✓[/green] {escape(success_message)}", highlight=False)
        return 0
    rejected = OperationRejected(description, ack.error)
    if kind == "json":
        _emit_json(console, {"success": False, "error": ack.error, "message": str(rejected)})
    else:
        console.print(f"[red]✗[/red] {escape(str(rejected))}", highlight=False)
    return 0


def render_outcomes(
    console: Console, outcomes: List[OperationOutcome], kind: str = "text"
) -> int:
    """Render manifest results; per-item failures are reported, the exit code is 0."""
    accepted = sum(1 for o in outcomes if o.accepted)
    failed = len(outcomes) - accepted
    if kind == "json":
        _emit_json(
            console,
            {
                "success": failed == 0,
                "results": [o.message for o in outcomes],
                "outcomes": [o.to_dict() for o in outcomes],
            },
        )
        return 0
    if not outcomes:
        console.print("Manifest contained no instructions")
        return 0
    for outcome in outcomes:
        mark = "[green]✓[/green]" if outcome.accepted else "[red]✗[/red]"
        console.print(f"  {mark} {escape(outcome.message)}", highlight=False)
    style = "green" if failed == 0 else "yellow"
    console.print(
        f"[{style}]{accepted}/{len(outcomes)} instruction(s) acknowledged[/{style}]"
    )
    return 0
