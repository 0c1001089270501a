"""
Procedural terrain height over the unit sphere.
Stand-in terrain collaborator for demos and long-run simulations.
"""

import numpy as np
from noise import pnoise3
from typing import Optional, Dict, Any


class PerlinTerrainSampler:
    """
    Fractal Perlin elevation sampled by surface direction.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize terrain sampler.

        Args:
            config: Generation parameters
        """
        self.config = config or {}

        # Default parameters
        self.octaves = self.config.get('octaves', 4)
        self.frequency = self.config.get('frequency', 1.5)
        self.amplitude = self.config.get('amplitude', 4.0)
        self.base_elevation = self.config.get('base_elevation', 0.5)
        self.persistence = self.config.get('persistence', 0.5)
        self.lacunarity = self.config.get('lacunarity', 2.0)
        self.seed = int(self.config.get('seed', 42))

    def __call__(self, nx: float, ny: float, nz: float) -> float:
        """
        Get elevation below a unit direction.

        Args:
            nx, ny, nz: Unit direction from the planet center

        Returns:
            Elevation in world units
        """
        noise_value = pnoise3(
            nx * self.frequency, ny * self.frequency, nz * self.frequency,
            octaves=self.octaves,
            persistence=self.persistence,
            lacunarity=self.lacunarity,
            base=self.seed
        )
        return self.base_elevation + noise_value * self.amplitude

    def sample_grid(self, resolution: int = 32) -> np.ndarray:
        """
        Sample elevation on a latitude/longitude grid.

        Args:
            resolution: Number of latitude rows (longitude uses twice as many)

        Returns:
            2D elevation array (resolution, 2 * resolution)
        """
        grid = np.zeros((resolution, 2 * resolution))
        for j in range(resolution):
            phi = np.pi * (j + 0.5) / resolution
            for i in range(2 * resolution):
                theta = np.pi * (i + 0.5) / resolution
                grid[j, i] = self(np.sin(phi) * np.cos(theta),
                                  np.cos(phi),
                                  np.sin(phi) * np.sin(theta))
        return grid

    def water_fraction(self, water_level: float, resolution: int = 32) -> float:
        """
        Approximate fraction of the surface below the water level.

        Args:
            water_level: Elevation threshold for water
            resolution: Grid resolution

        Returns:
            Area-weighted water fraction in [0, 1]
        """
        grid = self.sample_grid(resolution)
        phi = np.pi * (np.arange(resolution) + 0.5) / resolution
        weights = np.repeat(np.sin(phi)[:, None], 2 * resolution, axis=1)
        return float(np.sum(weights * (grid < water_level)) / np.sum(weights))
