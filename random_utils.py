"""
Seeded random number generation for Monte Carlo runs.

The uniform stream is a 32-bit Mulberry32 generator so that a given seed
reproduces the same sequence as the browser implementation of the planner.
"""
import math
from typing import Callable


MASK_32 = 0xFFFFFFFF
TWO_POW_32 = 4294967296.0
GOLDEN_INCREMENT = 0x6D2B79F5


def seeded_random(seed: int) -> Callable[[], float]:
    """
    Create a deterministic uniform generator on [0, 1).

    Args:
        seed: Seed value, reduced to a 32-bit unsigned integer

    Returns:
        Zero-argument function returning the next uniform draw
    """
    state = int(seed) & MASK_32

    def next_uniform() -> float:
        nonlocal state
        state = (state + GOLDEN_INCREMENT) & MASK_32
        t = state
        r = ((t ^ (t >> 15)) * (t | 1)) & MASK_32
        r ^= (r + (((r ^ (r >> 7)) * (r | 61)) & MASK_32)) & MASK_32
        return ((r ^ (r >> 14)) & MASK_32) / TWO_POW_32

    return next_uniform


def box_muller(random_fn: Callable[[], float]) -> float:
    """Draw one standard normal sample from two uniform draws (zero draws are redrawn)"""
    u = 0.0
    v = 0.0
    while u == 0:
        u = random_fn()
    while v == 0:
        v = random_fn()
    return math.sqrt(-2 * math.log(u)) * math.cos(2 * math.pi * v)
