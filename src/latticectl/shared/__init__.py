"""
Shared types used across layers.

Data structures here are consumed by the resolver, placement, orchestration
and CLI layers without those layers importing from each other.
"""

from latticectl.shared.ids import (
    parse_module_id,
    parse_server_id,
    parse_service_id,
    validate_id,
)
from latticectl.shared.labels import labels_to_dict
from latticectl.shared.manifest import CapabilityEntry, LinkEntry, ManifestSpec
from latticectl.shared.results import Acknowledgement, AuctionResponse, OperationOutcome

__all__ = [
    "Acknowledgement",
    "AuctionResponse",
    "CapabilityEntry",
    "LinkEntry",
    "ManifestSpec",
    "OperationOutcome",
    "labels_to_dict",
    "parse_module_id",
    "parse_server_id",
    "parse_service_id",
    "validate_id",
]
