"""Parsing of ``KEY=VALUE`` pairs used for constraints and link values."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from ..exceptions import ValidationError

__all__ = ["labels_to_dict"]


def labels_to_dict(pairs: Optional[Iterable[str]], field: str = "label") -> Dict[str, str]:
    """Convert ``["k=v", ...]`` into a mapping; later keys override earlier ones."""
    out: Dict[str, str] = {}
    for raw in pairs or ():
        key, sep, value = str(raw).partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValidationError(
                f"invalid {field} '{raw}': expected KEY=VALUE"
            )
        out[key] = value
    return out
