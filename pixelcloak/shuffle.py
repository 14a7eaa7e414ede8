"""
Seeded pixel orderings

A stego key is turned into a 32-bit seed, and the seed drives a Mulberry32
generator feeding a Fisher-Yates shuffle. Encoder and decoder rebuild the
same ordering from the key alone, so everything here is integer-only.
"""

import logging

import numpy as np

from .hashes import md5

logger = logging.getLogger(__name__)

MASK32 = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5


def seed_from_key(key: str) -> int:
    """
    Polynomial string hash over UTF-16 code units (hash * 31 + unit),
    wrapped to a signed 32-bit value and returned as its absolute value.
    """
    h = 0
    units = key.encode('utf-16-le')
    for i in range(0, len(units), 2):
        unit = units[i] | (units[i + 1] << 8)
        h = (h * 31 + unit) & MASK32
    if h & 0x80000000:
        h -= 1 << 32
    return abs(h)


def seed_from_key_md5(key: str) -> int:
    """First 32 bits of the key's MD5 digest."""
    if not key:
        return 0
    return int(md5(key)[:8], 16)


def mulberry32(seed: int):
    """Return a generator function producing uint32 values from `seed`."""
    state = seed & MASK32

    def next_value() -> int:
        nonlocal state
        state = (state + MULBERRY_INCREMENT) & MASK32
        t = state
        t = ((t ^ (t >> 15)) * (t | 1)) & MASK32
        t ^= (t + ((t ^ (t >> 7)) * (t | 61))) & MASK32
        return (t ^ (t >> 14)) & MASK32

    return next_value


def shuffle(n: int, seed: int) -> np.ndarray:
    """
    Deterministic permutation of range(n).

    Args:
        n: number of indices
        seed: 32-bit seed

    Returns:
        int64 array holding a permutation of 0..n-1
    """
    order = list(range(n))
    random = mulberry32(seed)
    for i in range(n - 1, 0, -1):
        j = (random() * (i + 1)) >> 32
        order[i], order[j] = order[j], order[i]
    logger.debug("Shuffled %d indices", n)
    return np.array(order, dtype=np.int64)
