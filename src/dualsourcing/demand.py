"""Demand sampling for simulated seasons."""

from __future__ import annotations

from collections.abc import Callable
import random


DemandGenerator = Callable[[float, float, random.Random], int]


def sample_demand(mean: float, std_dev: float, rng: random.Random) -> int:
    """Draw one normal demand sample, floored at zero and capped at mean + 3 sigma."""
    if std_dev <= 0:
        raise ValueError("Demand standard deviation must be positive.")
    value = rng.gauss(mean, std_dev)
    cap = int(mean + 3.0 * std_dev)
    return min(int(max(0.0, value)), cap)


def expected_demand(mean: float, std_dev: float, rng: random.Random) -> int:
    """Deterministic generator returning the truncated mean."""
    return int(mean)


def spawn_streams(seed: int | None, count: int) -> list[random.Random]:
    """Create independent random streams for runs executed in parallel."""
    if count <= 0:
        raise ValueError("Stream count must be positive.")
    root = random.Random(seed)
    return [random.Random(root.getrandbits(64)) for _ in range(count)]
