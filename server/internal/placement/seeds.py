"""
Seed generation utilities for reproducible building placement.
"""

import random
from typing import Optional


def get_plan_seed(world_seed: int, plan_counter: int) -> int:
    """
    Generate deterministic seed for one application of a zoning plan.

    Args:
        world_seed: Global placement seed
        plan_counter: Number of plans applied before this one

    Returns:
        Deterministic plan seed
    """
    # Modulo to keep within 32-bit signed integer range
    seed = hash((world_seed, plan_counter)) % (2**31)
    return seed


def get_parcel_seed(plan_seed: int, parcel_id: int) -> int:
    """
    Generate deterministic seed for a single parcel within a plan.

    Args:
        plan_seed: Seed of the plan being applied
        parcel_id: Parcel identifier

    Returns:
        Deterministic parcel seed
    """
    seed = hash((plan_seed, parcel_id)) % (2**31)
    return seed


def seeded_random(seed: Optional[int]) -> random.Random:
    """
    Create the random source used for building selection.

    Args:
        seed: Seed value, or None for an unseeded generator

    Returns:
        Random instance
    """
    return random.Random(seed)
