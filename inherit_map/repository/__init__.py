"""Repository layer - DDD repository pattern."""

from __future__ import annotations

from inherit_map.repository.base import Repository

__all__ = [
    "Repository",
]
