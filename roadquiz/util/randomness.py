from __future__ import annotations

"""Randomness helpers for shuffling and seeding."""

import os
import random
from typing import Optional


def env_seed() -> Optional[int]:
    """Integer value of the SEED env var, or None when unset or not an int."""
    seed = os.environ.get("SEED")
    if seed is None:
        return None
    try:
        return int(seed)
    except ValueError:
        return None


def seed_if_needed() -> None:
    """Seed the global RNG if the SEED env var is set."""
    s = env_seed()
    if s is not None:
        random.seed(s)


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Return a private RNG; seeded when a seed is given."""
    return random.Random(seed)
