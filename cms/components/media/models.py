"""
Media component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MediaPlan:
    """
    Media references an item will hold after a mutation.

    media: the full field -> key mapping to persist.
    staged: keys written for this request (to discard on failure).
    replaced: keys the item held before and will no longer hold
              (to remove only after the new state is saved).
    """

    media: dict[str, str] = field(default_factory=dict)
    staged: tuple[str, ...] = ()
    replaced: tuple[str, ...] = ()
