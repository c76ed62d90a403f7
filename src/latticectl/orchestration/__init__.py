"""Multi-step orchestration of control operations."""

from latticectl.orchestration.manifest import apply_manifest

__all__ = ["apply_manifest"]
