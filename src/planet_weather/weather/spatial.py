"""
Point queries against the weather field.
Inverse-distance blending of nearby cells, backed by an R-tree index.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Sequence, Tuple

from rtree import index

from .cloud_cell import CloudCell
from .config import QueryConfig
from ..utils.sphere_utils import get_bbox, distance_3d


@dataclass
class LocalWeather:
    """Weather blended at a world position"""
    nearest_index: Optional[int] = None
    nearest_cell: Optional[CloudCell] = None
    distance: float = float('inf')
    intensity: float = 0.0
    is_raining: bool = False
    wind_strength: float = 0.0
    wind_direction: np.ndarray = field(default_factory=lambda: np.zeros(3))


class SpatialQuery:
    """
    Read-only proximity queries over cell positions.

    The index is rebuilt from the cells once per tick, after every cell has moved.
    """

    def __init__(self, config: Optional[QueryConfig] = None):
        """
        Initialize spatial query.

        Args:
            config: Query parameters (influence radius, rain threshold)
        """
        self.config = config or QueryConfig()
        self._cells: Dict[int, CloudCell] = {}
        self._init_spatial_index()

    def _init_spatial_index(self):
        """Initialize R-tree spatial index"""
        p = index.Property()
        p.dimension = 3
        p.variant = index.RT_Star
        self.spatial_idx = index.Index(properties=p)

    def rebuild(self, cells: Sequence[CloudCell]):
        """
        Re-index cell positions.

        Args:
            cells: Cells in index order
        """
        self._cells = {cell.index: cell for cell in cells}
        self._init_spatial_index()
        for cell in self._cells.values():
            self.spatial_idx.insert(cell.index, get_bbox(cell.position, 0.0))

    def cells_in_range(self, position: np.ndarray, radius: float) -> List[Tuple[CloudCell, float]]:
        """
        Find cells strictly within radius of a position.

        Args:
            position: Query position [x, y, z]
            radius: Search radius

        Returns:
            List of (cell, distance) in cell-index order
        """
        position = np.asarray(position, dtype=np.float64)
        candidates = sorted(self.spatial_idx.intersection(get_bbox(position, radius)))

        in_range = []
        for cell_index in candidates:
            cell = self._cells[cell_index]
            distance = distance_3d(position, cell.position)
            if distance < radius:
                in_range.append((cell, distance))
        return in_range

    def query_at(self, position: np.ndarray) -> LocalWeather:
        """
        Blend weather of cells within the influence radius.

        Args:
            position: World position [x, y, z]

        Returns:
            LocalWeather with nearest cell and weighted intensity
            (wind fields are filled in by the field)
        """
        radius = self.config.influence_radius

        total_influence = 0.0
        weighted_intensity = 0.0
        result = LocalWeather()

        for cell, distance in self.cells_in_range(position, radius):
            influence = 1.0 - distance / radius
            total_influence += influence
            weighted_intensity += cell.intensity * influence

            if distance < result.distance:
                result.distance = distance
                result.nearest_cell = cell
                result.nearest_index = cell.index

        if total_influence > 0:
            result.intensity = weighted_intensity / total_influence
        # Raining is judged on the unnormalized sum
        result.is_raining = weighted_intensity > self.config.rain_threshold

        return result
