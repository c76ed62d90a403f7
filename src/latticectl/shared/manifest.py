"""Host manifest model.

A manifest is a declarative batch of actors, capability providers and link
definitions to apply against one host. Only the structural conversion from a
loaded mapping lives here; file reading is done by the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from ..exceptions import ValidationError

__all__ = ["CapabilityEntry", "LinkEntry", "ManifestSpec"]


@dataclass(frozen=True)
class CapabilityEntry:
    image_ref: str
    link_name: Optional[str] = None


@dataclass(frozen=True)
class LinkEntry:
    actor: str
    provider_id: str
    contract_id: str
    link_name: Optional[str] = None
    values: Optional[Dict[str, str]] = None


@dataclass(frozen=True)
class ManifestSpec:
    actors: Tuple[str, ...] = ()
    capabilities: Tuple[CapabilityEntry, ...] = ()
    links: Tuple[LinkEntry, ...] = field(default_factory=tuple)

    @property
    def item_count(self) -> int:
        return len(self.actors) + len(self.capabilities) + len(self.links)

    @classmethod
    def from_dict(cls, data: Any) -> "ManifestSpec":
        """Build a manifest from a parsed YAML/JSON document."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValidationError("manifest must be a mapping")
        actors = tuple(str(a) for a in _seq(data, "actors"))
        capabilities = tuple(_capability(c) for c in _seq(data, "capabilities"))
        links = tuple(_link(entry) for entry in _seq(data, "links"))
        return cls(actors=actors, capabilities=capabilities, links=links)


def _seq(data: Mapping[str, Any], key: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"manifest '{key}' must be a list")
    return value


def _require(entry: Mapping[str, Any], key: str, section: str) -> str:
    value = entry.get(key)
    if value is None or str(value).strip() == "":
        raise ValidationError(f"manifest {section} entry is missing '{key}'")
    return str(value)


def _capability(entry: Any) -> CapabilityEntry:
    if isinstance(entry, str):
        return CapabilityEntry(image_ref=entry)
    if not isinstance(entry, Mapping):
        raise ValidationError("manifest capabilities entries must be mappings")
    link_name = entry.get("link_name")
    return CapabilityEntry(
        image_ref=_require(entry, "image_ref", "capabilities"),
        link_name=str(link_name) if link_name is not None else None,
    )


def _link(entry: Any) -> LinkEntry:
    if not isinstance(entry, Mapping):
        raise ValidationError("manifest links entries must be mappings")
    values = entry.get("values")
    if values is not None and not isinstance(values, Mapping):
        raise ValidationError("manifest link 'values' must be a mapping")
    link_name = entry.get("link_name")
    return LinkEntry(
        actor=_require(entry, "actor", "links"),
        provider_id=_require(entry, "provider_id", "links"),
        contract_id=_require(entry, "contract_id", "links"),
        link_name=str(link_name) if link_name is not None else None,
        values={str(k): str(v) for k, v in values.items()} if values else None,
    )
