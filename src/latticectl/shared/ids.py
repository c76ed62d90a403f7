"""Public-key identifier validation for hosts, actors and providers.

Identifiers are 56-character base32 (RFC 4648 alphabet, upper case) public
keys whose first character encodes the key type.
"""

from __future__ import annotations

import re
from typing import Dict

from ..exceptions import IdentifierError

__all__ = [
    "PUBLIC_KEY_LENGTH",
    "parse_module_id",
    "parse_server_id",
    "parse_service_id",
    "validate_id",
]

PUBLIC_KEY_LENGTH = 56

_BASE32 = re.compile(r"^[A-Z2-7]+$")
_PREFIXES: Dict[str, str] = {
    "server": "N",
    "module": "M",
    "service": "V",
}


def validate_id(value: str, kind: str, field: str) -> str:
    """Return ``value`` stripped if it is a public key of ``kind``.

    Raises:
        IdentifierError: naming ``field`` when the key is malformed.
    """
    prefix = _PREFIXES[kind]
    candidate = (value or "").strip()
    if not candidate:
        raise IdentifierError(field, value, "must not be empty")
    if len(candidate) != PUBLIC_KEY_LENGTH:
        raise IdentifierError(
            field, value, f"expected {PUBLIC_KEY_LENGTH} characters, got {len(candidate)}"
        )
    if not _BASE32.match(candidate):
        raise IdentifierError(field, value, "must be upper-case base32")
    if candidate[0] != prefix:
        raise IdentifierError(field, value, f"{kind} keys start with '{prefix}'")
    return candidate


def parse_server_id(value: str, field: str = "host-id") -> str:
    return validate_id(value, "server", field)


def parse_module_id(value: str, field: str = "actor-id") -> str:
    return validate_id(value, "module", field)


def parse_service_id(value: str, field: str = "provider-id") -> str:
    return validate_id(value, "service", field)
