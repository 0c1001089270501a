# tests/unit/test_random_source.py
"""
Unit tests for injectable random sources.
"""

import pytest
import sys
import os
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), 'src'))

from planet_weather.utils.random_source import (
    RandomSource, NumpyRandomSource, SequenceRandomSource, uniform, random_int
)


class TestSequenceRandomSource:
    """Test suite for the replaying random source"""

    def test_replays_in_order_and_cycles(self):
        rng = SequenceRandomSource([0.1, 0.5, 0.9])
        draws = [rng.next_float() for _ in range(5)]

        assert draws == [0.1, 0.5, 0.9, 0.1, 0.5]
        assert rng.draw_count == 5
        assert rng.position == 2

    def test_empty_sequence_rejected(self):
        with pytest.raises(ValueError):
            SequenceRandomSource([])

    @pytest.mark.parametrize("value", [-0.1, 1.0, 1.5])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(ValueError):
            SequenceRandomSource([0.2, value])

    def test_satisfies_protocol(self):
        assert isinstance(SequenceRandomSource([0.3]), RandomSource)
        assert isinstance(NumpyRandomSource(1), RandomSource)


class TestNumpyRandomSource:
    """Test suite for the numpy-backed random source"""

    def test_seeded_sources_agree(self):
        a = NumpyRandomSource(seed=7)
        b = NumpyRandomSource(seed=7)

        assert [a.next_float() for _ in range(20)] == [b.next_float() for _ in range(20)]

    def test_values_in_unit_interval(self):
        rng = NumpyRandomSource(seed=3)
        for _ in range(1000):
            value = rng.next_float()
            assert 0.0 <= value < 1.0
            assert isinstance(value, float)


class TestDrawHelpers:
    """Test suite for uniform and random_int"""

    def test_uniform_maps_unit_interval(self):
        assert uniform(SequenceRandomSource([0.0]), 20.0, 60.0) == 20.0
        assert uniform(SequenceRandomSource([0.5]), 20.0, 60.0) == pytest.approx(40.0)
        assert uniform(SequenceRandomSource([0.25]), -1.0, 1.0) == pytest.approx(-0.5)

    def test_random_int_range(self):
        assert random_int(SequenceRandomSource([0.0]), 8, 5) == 8
        assert random_int(SequenceRandomSource([0.99]), 8, 5) == 12
        assert random_int(SequenceRandomSource([0.5]), 1, 3) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
