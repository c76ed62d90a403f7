from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from latticectl.config.models import ConnectionConfig
from latticectl.operations import CtlSession
from latticectl.shared.results import Acknowledgement


class FakeControlClient:
    """Records every request in order and replies from canned behavior.

    ``behavior`` maps a method name to either a reply value, an exception
    instance to raise, or a callable taking the call args and returning one.
    """

    def __init__(self, behavior: Optional[Dict[str, Any]] = None) -> None:
        self.behavior: Dict[str, Any] = dict(behavior or {})
        self.calls: List[Tuple[str, tuple]] = []
        self.closed = False

    async def _reply(self, name: str, *args: Any, default: Any = None) -> Any:
        self.calls.append((name, args))
        value = self.behavior.get(name, default)
        if callable(value) and not isinstance(value, type):
            value = value(*args)
            if asyncio.iscoroutine(value):
                value = await value
        if isinstance(value, BaseException):
            raise value
        return value

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    async def get_hosts(self, timeout):
        return await self._reply("get_hosts", timeout, default=[])

    async def get_host_inventory(self, host_id):
        return await self._reply("get_host_inventory", host_id, default={})

    async def get_claims(self):
        return await self._reply("get_claims", default={"claims": []})

    async def query_links(self):
        return await self._reply("query_links", default=[])

    async def advertise_link(self, actor_id, provider_id, contract_id, link_name, values):
        return await self._reply(
            "advertise_link",
            actor_id,
            provider_id,
            contract_id,
            link_name,
            values,
            default=Acknowledgement(True),
        )

    async def remove_link(self, actor_id, contract_id, link_name):
        return await self._reply(
            "remove_link", actor_id, contract_id, link_name, default=Acknowledgement(True)
        )

    async def start_actor(self, host_id, actor_ref, annotations=None):
        return await self._reply(
            "start_actor", host_id, actor_ref, annotations, default=Acknowledgement(True)
        )

    async def start_provider(self, host_id, provider_ref, link_name=None, annotations=None):
        return await self._reply(
            "start_provider",
            host_id,
            provider_ref,
            link_name,
            annotations,
            default=Acknowledgement(True),
        )

    async def stop_actor(self, host_id, actor_id, count):
        return await self._reply(
            "stop_actor", host_id, actor_id, count, default=Acknowledgement(True)
        )

    async def stop_provider(self, host_id, provider_id, link_name, contract_id):
        return await self._reply(
            "stop_provider",
            host_id,
            provider_id,
            link_name,
            contract_id,
            default=Acknowledgement(True),
        )

    async def stop_host(self, host_id, timeout_ms):
        return await self._reply("stop_host", host_id, timeout_ms, default=Acknowledgement(True))

    async def update_actor(self, host_id, actor_id, new_actor_ref):
        return await self._reply(
            "update_actor", host_id, actor_id, new_actor_ref, default=Acknowledgement(True)
        )

    async def perform_actor_auction(self, actor_ref, constraints, timeout):
        return await self._reply(
            "perform_actor_auction", actor_ref, constraints, timeout, default=[]
        )

    async def perform_provider_auction(self, provider_ref, link_name, constraints, timeout):
        return await self._reply(
            "perform_provider_auction",
            provider_ref,
            link_name,
            constraints,
            timeout,
            default=[],
        )

    async def close(self):
        self.closed = True


@pytest.fixture
def config() -> ConnectionConfig:
    return ConnectionConfig(
        host="127.0.0.1", port="4222", lattice_prefix="default", timeout_ms=2000
    )


@pytest.fixture
def fake_client() -> FakeControlClient:
    return FakeControlClient()


@pytest.fixture
def session(fake_client: FakeControlClient, config: ConnectionConfig) -> CtlSession:
    return CtlSession(fake_client, config)


@pytest.fixture
def make_client() -> Callable[..., FakeControlClient]:
    return FakeControlClient


@pytest.fixture(autouse=True)
def _isolated_context_dir(tmp_path, monkeypatch):
    """Keep tests away from the user's saved contexts and env settings."""
    monkeypatch.setenv("LATTICECTL_CONTEXT_DIR", str(tmp_path / "contexts"))
    for key in (
        "LATTICECTL_CTL_HOST",
        "LATTICECTL_CTL_PORT",
        "LATTICECTL_CTL_JWT",
        "LATTICECTL_CTL_SEED",
        "LATTICECTL_CTL_CREDS",
        "LATTICECTL_LATTICE_PREFIX",
        "LATTICECTL_CTL_TIMEOUT_MS",
        "LATTICECTL_CLIENT",
    ):
        monkeypatch.delenv(key, raising=False)
