"""Shuffle helpers."""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def shuffle_tracks(items: Sequence[T], rng: Optional[random.Random] = None) -> list[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
