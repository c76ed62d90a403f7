from __future__ import annotations

import asyncio

import pytest

from latticectl import operations as ops
from latticectl.exceptions import IdentifierError, ValidationError
from latticectl.orchestration import apply_manifest
from latticectl.shared.manifest import CapabilityEntry, LinkEntry, ManifestSpec
from latticectl.shared.results import Acknowledgement

HOST_ID = "NCE7YHGI42RWEKBRDJZWXBEJJCFNE5YIWYMSTLGHQBEGFY55BKJ3EG3G"
ACTOR_ID = "MDPDJEYIAK6MACO67PRFGOSSLODBISK4SCEYDY3HEOY4P5CVJN6UCWUK"
PROVIDER_ID = "VBKTSBG2WKP6RJWLQ5O7RDVIIB4LMW6U5R67A7QMIDBZDGZWYTUE3TSI"


def _manifest() -> ManifestSpec:
    return ManifestSpec.from_dict(
        {
            "links": [
                {
                    "actor": ACTOR_ID,
                    "provider_id": PROVIDER_ID,
                    "contract_id": "wasmcloud:httpserver",
                    "values": {"PORT": 8080},
                }
            ],
            "capabilities": [{"image_ref": "ref-P", "link_name": "web"}, "ref-Q"],
            "actors": ["ref-A", "ref-B"],
        }
    )


def test_manifest_from_dict_shapes_entries() -> None:
    manifest = _manifest()
    assert manifest.actors == ("ref-A", "ref-B")
    assert manifest.capabilities == (
        CapabilityEntry("ref-P", "web"),
        CapabilityEntry("ref-Q"),
    )
    assert manifest.links == (
        LinkEntry(ACTOR_ID, PROVIDER_ID, "wasmcloud:httpserver", None, {"PORT": "8080"}),
    )
    assert manifest.item_count == 5


def test_manifest_from_none_is_empty() -> None:
    assert ManifestSpec.from_dict(None).item_count == 0


@pytest.mark.parametrize(
    "data",
    [
        ["ref-A"],
        {"actors": "ref-A"},
        {"capabilities": [{"link_name": "x"}]},
        {"links": [{"actor": ACTOR_ID, "provider_id": PROVIDER_ID}]},
        {"links": [{"actor": ACTOR_ID, "provider_id": PROVIDER_ID, "contract_id": "c", "values": ["a"]}]},
    ],
)
def test_malformed_manifest_rejected(data) -> None:
    with pytest.raises(ValidationError):
        ManifestSpec.from_dict(data)


@pytest.mark.asyncio
async def test_items_issued_in_section_order(make_client) -> None:
    client = make_client()

    outcomes = await apply_manifest(HOST_ID, _manifest(), client)

    assert client.calls == [
        ("start_actor", (HOST_ID, "ref-A", None)),
        ("start_actor", (HOST_ID, "ref-B", None)),
        ("start_provider", (HOST_ID, "ref-P", "web", None)),
        ("start_provider", (HOST_ID, "ref-Q", None, None)),
        (
            "advertise_link",
            (ACTOR_ID, PROVIDER_ID, "wasmcloud:httpserver", "default", {"PORT": "8080"}),
        ),
    ]
    assert [o.kind for o in outcomes] == ["actor", "actor", "provider", "provider", "link"]
    assert all(o.accepted for o in outcomes)


@pytest.mark.asyncio
async def test_single_actor_and_provider_scenario(make_client) -> None:
    client = make_client()
    manifest = ManifestSpec(actors=("ref-A",), capabilities=(CapabilityEntry("ref-P"),))

    outcomes = await apply_manifest(HOST_ID, manifest, client)

    assert client.names() == ["start_actor", "start_provider"]
    assert [(o.description, o.accepted) for o in outcomes] == [("ref-A", True), ("ref-P", True)]
    assert outcomes[0].message == "Instruction to start actor ref-A acknowledged."
    assert outcomes[1].message == "Instruction to start provider ref-P acknowledged."


@pytest.mark.asyncio
async def test_rejected_item_does_not_stop_the_batch(make_client) -> None:
    client = make_client(
        {"start_actor": Acknowledgement(False, "image not found")}
    )
    manifest = ManifestSpec(
        actors=("ref-A",),
        links=(LinkEntry(ACTOR_ID, PROVIDER_ID, "wasmcloud:keyvalue"),),
    )

    outcomes = await apply_manifest(HOST_ID, manifest, client)

    assert client.names() == ["start_actor", "advertise_link"]
    assert outcomes[0].accepted is False
    assert outcomes[0].error == "image not found"
    assert outcomes[0].message == "Instruction to start actor ref-A not acked: image not found"
    assert outcomes[1].accepted is True
    assert outcomes[1].message == f"Link definition {ACTOR_ID}->{PROVIDER_ID} acknowledged."


@pytest.mark.asyncio
async def test_transport_failure_is_recorded_as_not_sent(make_client) -> None:
    client = make_client({"start_provider": ConnectionError("connection reset")})
    manifest = ManifestSpec(actors=("ref-A",), capabilities=(CapabilityEntry("ref-P"),))

    outcomes = await apply_manifest(HOST_ID, manifest, client)

    assert [o.accepted for o in outcomes] == [True, False]
    assert outcomes[1].sent is False
    assert outcomes[1].error == "connection reset"
    assert outcomes[1].message == "Failed to send provider ref-P: connection reset"


@pytest.mark.asyncio
async def test_slow_item_times_out_and_batch_continues(make_client) -> None:
    async def slow(*_args):
        await asyncio.sleep(1)
        return Acknowledgement(True)

    client = make_client({"start_actor": slow})
    manifest = ManifestSpec(actors=("ref-A",), capabilities=(CapabilityEntry("ref-P"),))

    outcomes = await apply_manifest(HOST_ID, manifest, client, timeout=0.01)

    assert outcomes[0].error == "request timed out"
    assert outcomes[0].sent is True
    assert outcomes[0].message == "Instruction to start actor ref-A not acked: request timed out"
    assert outcomes[1].accepted is True


@pytest.mark.asyncio
async def test_actor_then_link_outcomes_in_order(make_client) -> None:
    client = make_client()
    manifest = ManifestSpec.from_dict(
        {
            "actors": ["ref-A"],
            "capabilities": [],
            "links": [
                {
                    "actor": "ref-A",
                    "provider_id": "ref-P",
                    "contract_id": "wasmcloud:provider",
                    "link_name": None,
                }
            ],
        }
    )

    outcomes = await apply_manifest(HOST_ID, manifest, client)

    assert [(o.description, o.accepted) for o in outcomes] == [
        ("ref-A", True),
        ("ref-A->ref-P", True),
    ]
    assert client.calls[1] == (
        "advertise_link",
        ("ref-A", "ref-P", "wasmcloud:provider", "default", {}),
    )


@pytest.mark.asyncio
async def test_invalid_host_key_fails_before_any_request(make_client) -> None:
    client = make_client()
    with pytest.raises(IdentifierError, match="host-key"):
        await apply_manifest("MNOTAHOST", _manifest(), client)
    assert client.calls == []


@pytest.mark.asyncio
async def test_empty_manifest_sends_nothing(make_client) -> None:
    client = make_client()
    assert await apply_manifest(HOST_ID, ManifestSpec(), client) == []
    assert client.calls == []


@pytest.mark.asyncio
async def test_session_apply_uses_session_timeout(session, fake_client) -> None:
    outcomes = await ops.apply_manifest(session, HOST_ID, ManifestSpec(actors=("ref-A",)))
    assert [o.to_dict() for o in outcomes] == [
        {"kind": "actor", "description": "ref-A", "accepted": True, "error": None}
    ]
