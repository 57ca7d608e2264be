"""
Unit tests for seeding.py

Tests:
- Exact LCG arithmetic for fixed seed strings
- Zero-seed handling
- UTF-16 code unit folding
- Range and determinism
"""

import pytest

from imageset_core.seeding import (
    LCG_MODULUS,
    lcg_state,
    numeric_seed,
    seeded_index,
    seeded_random,
)


class TestNumericSeed:
    """Tests for folding seed strings into integers."""

    def test_abc_weights_characters_by_position(self):
        """'abc' folds to 97*1 + 98*2 + 99*3."""
        assert numeric_seed("abc") == 590

    def test_integer_seed_passes_through(self):
        """Integer seeds are used as they are."""
        assert numeric_seed(42) == 42

    def test_non_bmp_character_uses_utf16_code_units(self):
        """An emoji counts as two surrogate code units."""
        assert numeric_seed("\U0001F600") == 0xD83D * 1 + 0xDE00 * 2

    def test_order_matters(self):
        """Character position changes the seed."""
        assert numeric_seed("ab") != numeric_seed("ba")


class TestSeededRandom:
    """Tests for the stateless seeded sampler."""

    def test_abc_exact_state(self):
        """(1103515245 * 590 + 12345) mod 2147483647 == 386461854."""
        assert lcg_state("abc") == 386461854

    def test_abc_exact_value(self):
        assert seeded_random("abc") == 386461854 / 2147483647

    def test_emoji_exact_state(self):
        """Surrogate pairs fold to a fixed state."""
        assert lcg_state("\U0001F600") == 1853044599

    def test_empty_seed_treated_as_one(self):
        """An empty string folds to 0, which is replaced by 1."""
        assert lcg_state("") == 1103527590
        assert lcg_state("") == lcg_state(1)

    def test_repeated_calls_identical(self):
        """The sampler keeps no state between calls."""
        values = {seeded_random("evt_5f3a9c") for _ in range(50)}
        assert len(values) == 1

    def test_suffixes_give_independent_values(self):
        """Suffixed seeds give distinct draws."""
        base = "evt_5f3a9c"
        values = {
            seeded_random(base),
            seeded_random(base + "side"),
            seeded_random(base + "repeat"),
            seeded_random(base + "normal"),
        }
        assert len(values) == 4

    @pytest.mark.parametrize("seed", ["a", "evt_1", "x" * 40, "event-0000000001"])
    def test_value_in_unit_interval(self, seed):
        """Values stay in [0, 1)."""
        value = seeded_random(seed)
        assert 0.0 <= value < 1.0

    def test_modulus_constant(self):
        assert LCG_MODULUS == 2147483647


class TestSeededIndex:
    """Tests for picking an index from a seed."""

    def test_index_in_range(self):
        """Indexes stay within the count."""
        for i in range(200):
            assert 0 <= seeded_index(f"evt_{i}", 7) < 7

    def test_index_matches_floor_of_value(self):
        """The index is the scaled value rounded down."""
        assert seeded_index("abc", 10) == int(seeded_random("abc") * 10)

    def test_zero_count_raises(self):
        """There is no index into an empty pool."""
        with pytest.raises(ValueError):
            seeded_index("abc", 0)
