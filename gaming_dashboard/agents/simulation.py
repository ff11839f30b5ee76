"""
Random draws used by the agents to simulate activity.

Every draw goes through ``rng.random()`` so a test can hand the agents a
scripted sequence of floats and assert exact counters.
"""

from __future__ import annotations

import math
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


def chance(rng: random.Random, threshold: float) -> bool:
    """True when the draw exceeds `threshold` (probability 1 - threshold)."""
    return rng.random() > threshold


def random_int(rng: random.Random, low: int, high: int) -> int:
    """Integer uniformly drawn from [low, high)."""
    return low + math.floor(rng.random() * (high - low))


def random_amount(rng: random.Random, low: float, high: float, digits: int = 2) -> float:
    """Float uniformly drawn from [low, high), truncated to `digits`."""
    scale = 10 ** digits
    return math.floor((low + rng.random() * (high - low)) * scale) / scale


def pick(rng: random.Random, items: Sequence[T]) -> T:
    """One element chosen uniformly."""
    if not items:
        raise ValueError("cannot pick from an empty sequence")
    return items[min(math.floor(rng.random() * len(items)), len(items) - 1)]
