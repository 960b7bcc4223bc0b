"""Load-time configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .constants import MAX_RESOURCE_SIZE

__all__ = ["LoadOptions", "ENV_MAX_RESOURCE_SIZE"]

ENV_MAX_RESOURCE_SIZE = "GLTFLOAD_MAX_RESOURCE_SIZE"


@dataclass(slots=True, frozen=True)
class LoadOptions:
    # Largest external file (asset or referenced resource) read in one go
    max_resource_size: int = MAX_RESOURCE_SIZE
    # Keep resolved buffer bytes after the first Buffer.get()
    memoize_buffers: bool = True

    @classmethod
    def from_env(cls) -> "LoadOptions":
        raw = os.getenv(ENV_MAX_RESOURCE_SIZE)
        if raw is None or not raw.strip():
            return cls()
        try:
            size = int(raw)
        except ValueError as e:
            raise ValueError(
                f"{ENV_MAX_RESOURCE_SIZE} must be an integer, got {raw!r}"
            ) from e
        if size <= 0:
            raise ValueError(f"{ENV_MAX_RESOURCE_SIZE} must be positive")
        return cls(max_resource_size=size)
