# src/imageset_core/seeding.py
"""
Seeded random values keyed by strings.

There is no generator object and no retained state: a sample is a pure
function of its seed string. Independent draws for one selection use the
same base id with a different suffix (event_id, event_id + "side", ...).

The arithmetic is fixed so values match previously generated data:
    seed  = sum(code_unit * (index + 1))     # UTF-16 code units
    state = (1103515245 * seed + 12345) mod 2147483647
    value = state / 2147483647
"""
from __future__ import annotations

from typing import Union

LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MODULUS = 2147483647


def _utf16_code_units(text: str):
    data = text.encode("utf-16-le", errors="surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def numeric_seed(seed: Union[str, int]) -> int:
    """Fold a seed string into an integer. Integers pass through."""
    if isinstance(seed, str):
        return sum(unit * (index + 1) for index, unit in enumerate(_utf16_code_units(seed)))
    return int(seed)


def lcg_state(seed: Union[str, int]) -> int:
    """One LCG step from the folded seed. A zero seed is treated as 1."""
    state = numeric_seed(seed) or 1
    return (LCG_MULTIPLIER * state + LCG_INCREMENT) % LCG_MODULUS


def seeded_random(seed: Union[str, int]) -> float:
    """Return a value in [0, 1) determined only by the seed."""
    return lcg_state(seed) / LCG_MODULUS


def seeded_index(seed: Union[str, int], count: int) -> int:
    """Pick an index in range(count) from a seed."""
    if count <= 0:
        raise ValueError("count must be positive")
    return min(int(seeded_random(seed) * count), count - 1)
