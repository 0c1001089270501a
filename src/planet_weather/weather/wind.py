"""
Global wind model.
A single wind vector shared by all cells, regenerated in periodic gusts.
"""

import numpy as np
from typing import Optional, Dict, Any

from .config import WindConfig
from ..utils.random_source import RandomSource, NumpyRandomSource, uniform
from ..utils.sphere_utils import normalize, rotate_about_axis, VERTICAL_AXIS


class WindModel:
    """
    Shared wind direction and strength.

    Cells read the wind during a tick but never mutate it; only advance()
    does, and the field calls it before any cell moves.
    """

    def __init__(self, config: Optional[WindConfig] = None,
                 rng: Optional[RandomSource] = None):
        """
        Initialize wind model.

        Args:
            config: Wind parameters
            rng: Random source for gust timing, strength and yaw
        """
        self.config = config or WindConfig()
        self.rng = rng or NumpyRandomSource()

        self.direction = normalize(np.array(self.config.initial_direction, dtype=np.float64))
        self.strength = max(self.config.strength_floor, self.config.initial_strength)
        self.gust_timer = 0.0
        self.gust_count = 0

    def advance(self, dt: float):
        """
        Advance wind by one tick.

        Args:
            dt: Time step in seconds
        """
        cfg = self.config
        self.gust_timer += dt

        # Threshold re-drawn every tick
        if self.gust_timer > uniform(self.rng, cfg.gust_interval_min,
                                     cfg.gust_interval_min + cfg.gust_interval_spread):
            self._gust()

        # Linear decay toward the floor
        self.strength = max(cfg.strength_floor, self.strength - dt * cfg.decay_rate)

    def _gust(self):
        """Regenerate strength and yaw the direction around the vertical axis"""
        cfg = self.config
        self.gust_timer = 0.0
        self.gust_count += 1

        self.strength = uniform(self.rng, cfg.gust_strength_min,
                                cfg.gust_strength_min + cfg.gust_strength_spread)

        yaw = uniform(self.rng, -cfg.max_yaw, cfg.max_yaw)
        self.direction = normalize(rotate_about_axis(self.direction, VERTICAL_AXIS, yaw))

    def get_drift(self, scale: float) -> np.ndarray:
        """
        Get per-tick drift vector for a cell.

        Args:
            scale: Drift per unit of wind strength

        Returns:
            Displacement vector
        """
        return self.direction * self.strength * scale

    def get_wind_summary(self) -> Dict[str, Any]:
        """Get current wind state"""
        return {
            'direction': self.direction.copy(),
            'strength': float(self.strength),
            'heading': float(np.degrees(np.arctan2(self.direction[2], self.direction[0]))),
            'gust_timer': self.gust_timer,
            'gust_count': self.gust_count
        }
