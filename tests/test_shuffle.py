"""
Unit tests for seeded pixel orderings
"""

import numpy as np
import pytest

from pixelcloak.shuffle import mulberry32, seed_from_key, seed_from_key_md5, shuffle


class TestSeeds:

    @pytest.mark.parametrize("key,expected", [
        ("secret", 906277200),
        ("stego key", 1099634251),
        ("", 0),
        ("pässwörd🔑", 865320665),
    ])
    def test_seed_from_key(self, key, expected):
        assert seed_from_key(key) == expected

    @pytest.mark.parametrize("key,expected", [
        ("secret", 1589518996),
        ("stego key", 4125392858),
        ("", 0),
        ("pässwörd🔑", 843595214),
    ])
    def test_seed_from_key_md5(self, key, expected):
        assert seed_from_key_md5(key) == expected

    def test_seeds_fit_in_32_bits(self):
        for key in ["a" * 200, "zzzzzzzzzzzzzzzzzzzz", "🔑" * 50]:
            assert 0 <= seed_from_key(key) < 2 ** 32
            assert 0 <= seed_from_key_md5(key) < 2 ** 32


class TestShuffle:

    def test_pinned_permutations(self):
        assert shuffle(10, 906277200).tolist() == [9, 2, 4, 0, 5, 8, 3, 6, 7, 1]
        assert shuffle(10, 0).tolist() == [3, 8, 6, 4, 5, 9, 7, 1, 0, 2]

    def test_is_a_permutation(self):
        order = shuffle(10000, 12345)
        assert order.dtype == np.int64
        assert sorted(order.tolist()) == list(range(10000))

    def test_deterministic(self):
        assert np.array_equal(shuffle(500, 42), shuffle(500, 42))

    def test_different_seeds_differ(self):
        assert not np.array_equal(shuffle(500, 1), shuffle(500, 2))

    def test_trivial_sizes(self):
        assert shuffle(0, 7).tolist() == []
        assert shuffle(1, 7).tolist() == [0]

    def test_generator_stays_32_bit(self):
        random = mulberry32(2 ** 32 - 1)
        for _ in range(1000):
            assert 0 <= random() < 2 ** 32
