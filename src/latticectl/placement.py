"""Workload placement: explicit host or auction.

When no host is given, an auction asks eligible hosts to volunteer within a
window and the first reply wins. There is no scoring; callers narrow the
field with constraints. Reply order is whatever the transport delivers, so
among equally eligible hosts the choice is effectively arbitrary.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    List,
    Mapping,
    Optional,
)

from .exceptions import NoSuitableHost
from .shared.ids import parse_server_id
from .shared.results import AuctionResponse

__all__ = [
    "AUCTION_WINDOW_MS",
    "START_TIMEOUT_MS",
    "AuctionFn",
    "auction_window_ms",
    "collect_responses",
    "resolve_host",
    "start_timeout_ms",
]

logger = logging.getLogger(__name__)

# Providers are heavier to start than actors, so hosts get longer to bid.
AUCTION_WINDOW_MS = {"actor": 2000, "provider": 5000}

# Start requests wait for the host to fetch the artifact before replying.
START_TIMEOUT_MS = {"actor": 15000, "provider": 60000}

AuctionFn = Callable[[str, Mapping[str, str], float], Awaitable[Any]]


def auction_window_ms(kind: str, explicit_ms: Optional[int] = None) -> int:
    if explicit_ms is not None:
        return int(explicit_ms)
    return AUCTION_WINDOW_MS[kind]


def start_timeout_ms(kind: str, explicit_ms: Optional[int] = None) -> int:
    if explicit_ms is not None:
        return int(explicit_ms)
    return START_TIMEOUT_MS[kind]


async def collect_responses(
    stream: AsyncIterator[Any],
    window: float,
) -> List[AuctionResponse]:
    """Receive auction replies, in arrival order, until ``window`` seconds elapse.

    Stops listening at the deadline even if the stream is still open.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + max(0.0, window)
    responses: List[AuctionResponse] = []
    iterator = stream.__aiter__()
    try:
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            try:
                item = await asyncio.wait_for(iterator.__anext__(), timeout=remaining)
            except StopAsyncIteration:
                break
            except asyncio.TimeoutError:
                break
            responses.append(AuctionResponse.from_obj(item))
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()
    logger.debug("Auction window closed with %d response(s)", len(responses))
    return responses


async def _gather_auction(result: Any, window: float) -> List[AuctionResponse]:
    if inspect.isawaitable(result):
        result = await result
    if hasattr(result, "__aiter__"):
        return await collect_responses(result, window)
    return [AuctionResponse.from_obj(r) for r in (result or [])]


async def resolve_host(
    explicit_host: Optional[str],
    workload_ref: str,
    constraints: Mapping[str, str],
    auction_window: float,
    auction_fn: AuctionFn,
    kind: str = "actor",
) -> str:
    """Return the host to start ``workload_ref`` on.

    An explicit host always wins and no auction is held, even when
    ``constraints`` are supplied. Otherwise ``auction_fn(workload_ref,
    constraints, auction_window)`` is awaited; it may return a collected list
    or an async stream of replies.

    Raises:
        NoSuitableHost: when no host replies within ``auction_window`` seconds.
    """
    if explicit_host:
        return parse_server_id(explicit_host)

    logger.info(
        "Auctioning %s %s (constraints=%s, window=%.3fs)",
        kind,
        workload_ref,
        dict(constraints),
        auction_window,
    )
    responses = await _gather_auction(
        auction_fn(workload_ref, dict(constraints), auction_window), auction_window
    )
    if not responses:
        raise NoSuitableHost(workload_ref, kind)
    winner = responses[0]
    logger.info("Auction for %s %s won by %s", kind, workload_ref, winner.host_id)
    return parse_server_id(winner.host_id, field="auction host id")
