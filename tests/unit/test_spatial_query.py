# tests/unit/test_spatial_query.py
"""
Unit tests for point queries against the weather field.
"""

import numpy as np
import pytest
import sys
import os
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), 'src'))

from planet_weather.weather.cloud_cell import CloudCell
from planet_weather.weather.config import QueryConfig
from planet_weather.weather.spatial import SpatialQuery, LocalWeather


def make_cell(index, position, intensity):
    return CloudCell(index=index, position=np.array(position, dtype=float), intensity=intensity)


class TestSpatialQuery:
    """Test suite for SpatialQuery"""

    @pytest.fixture
    def query(self):
        return SpatialQuery(QueryConfig())

    def test_empty_result_far_from_cells(self, query):
        query.rebuild([make_cell(0, [60.0, 0.0, 0.0], 1.0)])

        local = query.query_at(np.array([-60.0, 0.0, 0.0]))

        assert isinstance(local, LocalWeather)
        assert local.intensity == 0.0
        assert not local.is_raining
        assert local.nearest_cell is None
        assert local.nearest_index is None
        assert local.distance == float('inf')

    def test_inverse_distance_blend(self, query):
        query.rebuild([
            make_cell(0, [60.0, 0.0, 0.0], 1.0),
            make_cell(1, [60.0, 10.0, 0.0], 0.0),
        ])

        local = query.query_at(np.array([60.0, 0.0, 0.0]))

        # influences 1.0 and 0.5
        assert local.intensity == pytest.approx(1.0 / 1.5)
        assert local.is_raining
        assert local.nearest_index == 0
        assert local.distance == pytest.approx(0.0)

    def test_raining_uses_unnormalized_sum(self, query):
        query.rebuild([make_cell(i, [60.0, 0.0, 0.0], 0.3) for i in range(3)])

        local = query.query_at(np.array([60.0, 0.0, 0.0]))

        assert local.intensity == pytest.approx(0.3)
        assert local.is_raining

    def test_single_weak_cell_not_raining(self, query):
        query.rebuild([make_cell(0, [60.0, 0.0, 0.0], 0.4)])

        local = query.query_at(np.array([60.0, 0.0, 0.0]))

        assert local.intensity == pytest.approx(0.4)
        assert not local.is_raining

    def test_cells_at_radius_excluded(self, query):
        query.rebuild([make_cell(0, [60.0, 20.0, 0.0], 1.0)])

        assert query.cells_in_range(np.array([60.0, 0.0, 0.0]), 20.0) == []
        assert query.query_at(np.array([60.0, 0.0, 0.0])).nearest_cell is None

    def test_cells_in_range_sorted_by_index(self, query):
        query.rebuild([
            make_cell(4, [0.0, 62.0, 0.0], 0.1),
            make_cell(1, [0.0, 63.0, 0.0], 0.1),
            make_cell(2, [0.0, -62.0, 0.0], 0.1),
        ])

        in_range = query.cells_in_range(np.array([0.0, 62.0, 0.0]), 5.0)

        assert [cell.index for cell, _ in in_range] == [1, 4]
        assert [d for _, d in in_range] == pytest.approx([1.0, 0.0])

    def test_rebuild_tracks_movement(self, query):
        cell = make_cell(0, [60.0, 0.0, 0.0], 0.8)
        query.rebuild([cell])

        cell.position = np.array([-60.0, 0.0, 0.0])
        query.rebuild([cell])

        assert query.query_at(np.array([60.0, 0.0, 0.0])).nearest_cell is None
        assert query.query_at(np.array([-60.0, 0.0, 0.0])).nearest_cell is cell

    def test_intensity_within_unit_interval(self, query):
        rng = np.random.default_rng(0)
        cells = [make_cell(i, rng.uniform(-40, 40, 3), rng.uniform(0, 1)) for i in range(40)]
        query.rebuild(cells)

        for point in rng.uniform(-40, 40, (50, 3)):
            local = query.query_at(point)
            assert 0.0 <= local.intensity <= 1.0 + 1e-12


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
