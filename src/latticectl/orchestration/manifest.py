"""Best-effort application of a host manifest.

Items are issued one at a time in a fixed order: every actor, then every
capability provider, then every link definition, each in document order.
A failed item is recorded and the batch moves on; partial application is a
normal, reported outcome. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from ..client import ControlClient
from ..config.defaults import DEFAULT_LINK_NAME
from ..shared.ids import parse_server_id
from ..shared.manifest import ManifestSpec
from ..shared.results import Acknowledgement, OperationOutcome

__all__ = ["apply_manifest"]

logger = logging.getLogger(__name__)


async def _issue(
    kind: str,
    description: str,
    send: Callable[[], Awaitable[Any]],
    timeout: Optional[float],
) -> OperationOutcome:
    try:
        reply = send()
        if timeout is not None:
            reply = asyncio.wait_for(reply, timeout=timeout)
        ack = Acknowledgement.from_obj(await reply)
    except asyncio.CancelledError:
        raise
    except asyncio.TimeoutError:
        # The request may have reached the host; only the reply is missing.
        logger.warning("%s %s timed out", kind, description)
        return OperationOutcome(kind, description, accepted=False, error="request timed out")
    except Exception as e:
        logger.warning("%s %s failed: %s", kind, description, e)
        return OperationOutcome(
            kind, description, accepted=False, error=str(e) or type(e).__name__, sent=False
        )
    if not ack.accepted:
        logger.info("%s %s rejected: %s", kind, description, ack.error)
    return OperationOutcome(kind, description, accepted=ack.accepted, error=ack.error or None)


async def apply_manifest(
    host_id: str,
    manifest: ManifestSpec,
    client: ControlClient,
    timeout: Optional[float] = None,
) -> List[OperationOutcome]:
    """Apply ``manifest`` to ``host_id`` and return one outcome per item."""
    host = parse_server_id(host_id, field="host-key")
    outcomes: List[OperationOutcome] = []
    logger.info(
        "Applying manifest to %s: %d actor(s), %d provider(s), %d link(s)",
        host,
        len(manifest.actors),
        len(manifest.capabilities),
        len(manifest.links),
    )

    for actor in manifest.actors:
        outcomes.append(
            await _issue(
                "actor",
                actor,
                lambda actor=actor: client.start_actor(host, actor, None),
                timeout,
            )
        )

    for cap in manifest.capabilities:
        outcomes.append(
            await _issue(
                "provider",
                cap.image_ref,
                lambda cap=cap: client.start_provider(host, cap.image_ref, cap.link_name, None),
                timeout,
            )
        )

    for ld in manifest.links:
        link_name = ld.link_name or DEFAULT_LINK_NAME
        values = dict(ld.values or {})
        outcomes.append(
            await _issue(
                "link",
                f"{ld.actor}->{ld.provider_id}",
                lambda ld=ld, link_name=link_name, values=values: client.advertise_link(
                    ld.actor, ld.provider_id, ld.contract_id, link_name, values
                ),
                timeout,
            )
        )

    accepted = sum(1 for o in outcomes if o.accepted)
    logger.info("Manifest applied: %d/%d item(s) accepted", accepted, len(outcomes))
    return outcomes
