from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from latticectl import operations as ops
from latticectl.exceptions import (
    IdentifierError,
    TransportError,
    ValidationError,
)
from latticectl.shared.results import Acknowledgement

HOST_ID = "NCE7YHGI42RWEKBRDJZWXBEJJCFNE5YIWYMSTLGHQBEGFY55BKJ3EG3G"
ACTOR_ID = "MDPDJEYIAK6MACO67PRFGOSSLODBISK4SCEYDY3HEOY4P5CVJN6UCWUK"
PROVIDER_ID = "VBKTSBG2WKP6RJWLQ5O7RDVIIB4LMW6U5R67A7QMIDBZDGZWYTUE3TSI"


@pytest.mark.asyncio
async def test_get_hosts_passes_session_timeout(session, fake_client) -> None:
    fake_client.behavior["get_hosts"] = [{"id": HOST_ID, "uptime_seconds": 12}]

    hosts = await ops.get_hosts(session)

    assert hosts == [{"id": HOST_ID, "uptime_seconds": 12}]
    assert fake_client.calls == [("get_hosts", (2.0,))]


@pytest.mark.asyncio
async def test_get_hosts_waits_for_full_collection_window(fake_client, config) -> None:
    async def gather(timeout):
        await asyncio.sleep(timeout)
        return [{"id": HOST_ID, "uptime_seconds": 1}]

    fake_client.behavior["get_hosts"] = gather
    session = ops.CtlSession(fake_client, config.with_timeout(50))

    hosts = await ops.get_hosts(session)

    assert [h["id"] for h in hosts] == [HOST_ID]
    assert fake_client.calls == [("get_hosts", (0.05,))]


@pytest.mark.asyncio
async def test_inventory_validates_host_first(session, fake_client) -> None:
    with pytest.raises(IdentifierError):
        await ops.get_host_inventory(session, ACTOR_ID)
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_link_put_defaults_name_and_parses_values(session, fake_client) -> None:
    ack = await ops.link_put(
        session, ACTOR_ID, PROVIDER_ID, "wasmcloud:httpserver", values=["PORT=8080", "URL=a=b"]
    )

    assert ack == Acknowledgement(True)
    assert fake_client.calls == [
        (
            "advertise_link",
            (
                ACTOR_ID,
                PROVIDER_ID,
                "wasmcloud:httpserver",
                "default",
                {"PORT": "8080", "URL": "a=b"},
            ),
        )
    ]


@pytest.mark.asyncio
async def test_link_put_rejects_bad_value_before_sending(session, fake_client) -> None:
    with pytest.raises(ValidationError, match="link value"):
        await ops.link_put(session, ACTOR_ID, PROVIDER_ID, "c", values=["PORT"])
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_link_put_rejects_swapped_ids(session, fake_client) -> None:
    with pytest.raises(IdentifierError, match="actor-id"):
        await ops.link_put(session, PROVIDER_ID, ACTOR_ID, "c")
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_link_del_uses_given_name(session, fake_client) -> None:
    await ops.link_del(session, ACTOR_ID, "wasmcloud:keyvalue", link_name="cache")
    assert fake_client.calls == [("remove_link", (ACTOR_ID, "wasmcloud:keyvalue", "cache"))]


@pytest.mark.asyncio
async def test_rejection_is_returned_not_raised(session, fake_client) -> None:
    fake_client.behavior["stop_actor"] = {"accepted": False, "error": "actor not running"}

    ack = await ops.stop_actor(session, HOST_ID, ACTOR_ID, count=2)

    assert ack == Acknowledgement(False, "actor not running")
    assert fake_client.calls == [("stop_actor", (HOST_ID, ACTOR_ID, 2))]


@pytest.mark.asyncio
async def test_attribute_style_reply_is_normalized(session, fake_client) -> None:
    fake_client.behavior["update_actor"] = SimpleNamespace(accepted=True, error=None)
    ack = await ops.update_actor(session, HOST_ID, ACTOR_ID, "ref-v2")
    assert ack == Acknowledgement(True, "")


@pytest.mark.asyncio
async def test_stop_actor_count_must_be_positive(session, fake_client) -> None:
    with pytest.raises(ValidationError):
        await ops.stop_actor(session, HOST_ID, ACTOR_ID, count=0)
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_stop_provider_and_host(session, fake_client) -> None:
    await ops.stop_provider(session, HOST_ID, PROVIDER_ID, "default", "wasmcloud:httpserver")
    await ops.stop_host(session, HOST_ID, 500)
    assert fake_client.calls == [
        ("stop_provider", (HOST_ID, PROVIDER_ID, "default", "wasmcloud:httpserver")),
        ("stop_host", (HOST_ID, 500)),
    ]


@pytest.mark.asyncio
async def test_client_error_is_wrapped(session, fake_client) -> None:
    fake_client.behavior["get_claims"] = RuntimeError("no responders")
    with pytest.raises(TransportError) as exc:
        await ops.get_claims(session)
    assert str(exc.value) == "get claims failed: no responders"
    assert isinstance(exc.value.cause, RuntimeError)


@pytest.mark.asyncio
async def test_slow_reply_times_out(fake_client, config) -> None:
    async def slow():
        await asyncio.sleep(1)
        return []

    fake_client.behavior["query_links"] = slow
    session = ops.CtlSession(fake_client, config.with_timeout(20))

    with pytest.raises(TransportError, match="no response within 0.02s"):
        await ops.link_query(session)
