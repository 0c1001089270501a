"""
Lightning controller.
Accumulates per-cell charge, rolls strike triggers and builds strike events.
"""

import logging
import numpy as np
from typing import Optional, List

from .config import LightningConfig
from .cloud_cell import CloudCell
from .events import LightningBolt, LightningStrikeEvent
from .states import WeatherState
from ..utils.random_source import RandomSource, NumpyRandomSource, uniform, random_int
from ..utils.sphere_utils import normalize, perpendicular_basis, lerp

logger = logging.getLogger(__name__)


class LightningController:
    """
    Charge accrual and probabilistic strike triggering for storm-capable cells.

    Strike probabilities apply once per tick, so strike frequency scales
    with tick rate.
    """

    def __init__(self, planet_radius: float,
                 config: Optional[LightningConfig] = None,
                 rng: Optional[RandomSource] = None):
        """
        Initialize lightning controller.

        Args:
            planet_radius: Planet radius in world units
            config: Lightning parameters
            rng: Random source for triggers and bolt geometry
        """
        self.planet_radius = planet_radius
        self.config = config or LightningConfig()
        self.rng = rng or NumpyRandomSource()

        # Flash window (presentational)
        self.flash_timer = 0.0
        self.flash_cell_index: Optional[int] = None

        self.strike_count = 0

    def accumulate(self, cell: CloudCell, dt: float) -> bool:
        """
        Accrue charge for one tick and roll the strike trigger.

        Args:
            cell: Cell to charge
            dt: Time step in seconds

        Returns:
            True if the cell should strike this tick
        """
        if not cell.can_storm:
            return False

        cfg = self.config

        if cell.weather_state == WeatherState.STORM:
            cell.lightning_charge += dt * cfg.storm_charge_rate
            return (cell.lightning_charge > cfg.storm_threshold
                    and self.rng.next_float() < cfg.storm_strike_probability)

        # Wet rain cells charge slowly
        if cell.weather_state == WeatherState.RAIN and cell.moisture > cfg.rain_min_moisture:
            cell.lightning_charge += dt * cfg.rain_charge_rate
            return (cell.lightning_charge > cfg.rain_threshold
                    and self.rng.next_float() < cfg.rain_strike_probability)

        return False

    def tick(self, cell: CloudCell, dt: float, time: float = 0.0) -> Optional[LightningStrikeEvent]:
        """
        Accumulate charge and trigger a strike if the roll succeeds.

        Args:
            cell: Cell to update
            dt: Time step in seconds
            time: Simulation time stamped on the event

        Returns:
            Strike event, or None
        """
        if self.accumulate(cell, dt):
            return self.trigger(cell, time)
        return None

    def trigger(self, cell: CloudCell, time: float = 0.0) -> LightningStrikeEvent:
        """
        Discharge a cell: reset its charge, build bolt geometry and start the flash.

        Args:
            cell: Striking cell
            time: Simulation time stamped on the event

        Returns:
            Strike event
        """
        cloud_position = cell.position.copy()
        strike_position = self.get_strike_point(cloud_position)
        bolt = self.build_bolt(cloud_position, strike_position)

        cell.lightning_charge = 0.0

        self.flash_timer = self.config.flash_duration
        self.flash_cell_index = cell.index
        self.strike_count += 1

        logger.info("Lightning strike from cell %d at (%.1f, %.1f, %.1f)", cell.index,
                    strike_position[0], strike_position[1], strike_position[2])

        return LightningStrikeEvent(
            cell_index=cell.index,
            position=strike_position,
            cloud_position=cloud_position,
            intensity=cell.intensity,
            bolt=bolt,
            time=time
        )

    def get_strike_point(self, cloud_position: np.ndarray) -> np.ndarray:
        """Project a cloud position onto the surface along its outward normal"""
        return normalize(cloud_position) * (self.planet_radius + self.config.strike_offset)

    def build_bolt(self, cloud_position: np.ndarray, strike_position: np.ndarray) -> LightningBolt:
        """
        Build a jagged main path with 1-3 branches.

        Args:
            cloud_position: Bolt start
            strike_position: Bolt end

        Returns:
            LightningBolt geometry
        """
        normal = normalize(cloud_position)
        tangent_a, tangent_b = perpendicular_basis(normal)

        segments = random_int(self.rng, 8, 5)
        points = []
        for i in range(segments + 1):
            t = i / segments
            point = lerp(cloud_position, strike_position, t)

            # Jitter interior points, strongest mid-bolt
            if 0 < i < segments:
                jitter = 2.0 * (1.0 - abs(t - 0.5) * 2.0)
                point = (point
                         + tangent_a * (self.rng.next_float() - 0.5) * jitter
                         + tangent_b * (self.rng.next_float() - 0.5) * jitter)
            points.append(point)

        branches = [self._build_branch(points, segments)
                    for _ in range(random_int(self.rng, 1, 3))]

        return LightningBolt(path=np.array(points), branches=branches)

    def _build_branch(self, points: List[np.ndarray], segments: int) -> np.ndarray:
        start = points[random_int(self.rng, 2, segments - 3)]
        direction = normalize(np.array([uniform(self.rng, -1.0, 1.0) for _ in range(3)]))

        branch = [start.copy()]
        current = start.copy()
        for _ in range(random_int(self.rng, 2, 3)):
            step = uniform(self.rng, 0.5, 1.5)
            current = current + direction * step
            current = current + np.array([uniform(self.rng, -0.25, 0.25) for _ in range(3)])
            branch.append(current)

        return np.array(branch)

    def update_flash(self, dt: float):
        """
        Count down the flash window.

        Args:
            dt: Time step in seconds
        """
        if self.flash_timer > 0:
            self.flash_timer = max(0.0, self.flash_timer - dt)
            if self.flash_timer == 0.0:
                self.flash_cell_index = None
        else:
            self.flash_cell_index = None

    @property
    def is_flashing(self) -> bool:
        return self.flash_timer > 0

    @property
    def flash_level(self) -> float:
        """Fade factor in [0, 1] for the light source and bolt opacity"""
        return self.flash_timer / self.config.flash_duration
