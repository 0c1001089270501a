"""
Weather field.
Owns the cloud cells, shared wind and lightning controller, advances them
each tick and aggregates a field-wide summary.
"""

import logging
import numpy as np
from dataclasses import replace
from typing import Optional, Dict, Any, List, Tuple, Union

from .config import WeatherConfig, load_weather_config
from .cloud_cell import CloudCell, TerrainSampler
from .events import EventQueue, WeatherChangeEvent, WeatherEvent
from .lightning import LightningController
from .spatial import SpatialQuery, LocalWeather
from .states import WeatherState, parse_state
from .wind import WindModel
from ..utils.random_source import RandomSource, NumpyRandomSource

logger = logging.getLogger(__name__)


class WeatherField:
    """
    Collection of independent weather cells above a spherical planet.

    Single-threaded and tick driven: call update() once per simulation frame,
    never re-entrantly, then drain_events().
    """

    def __init__(self, planet_radius: Optional[float] = None,
                 terrain_sampler: Optional[TerrainSampler] = None,
                 config: Optional[Union[Dict[str, Any], WeatherConfig]] = None,
                 config_file: Optional[str] = None,
                 rng: Optional[RandomSource] = None):
        """
        Initialize weather field and spawn all cells.

        Args:
            planet_radius: Planet radius (overrides config planet.radius)
            terrain_sampler: (nx, ny, nz) -> elevation, or None for a flat world
            config: Weather configuration dictionary or WeatherConfig
            config_file: Path to YAML configuration file
            rng: Random source (seeded numpy source by default)
        """
        if isinstance(config, WeatherConfig):
            config.validate()
            self.config = config
        else:
            self.config = load_weather_config(config, config_file)

        if planet_radius is not None:
            if planet_radius <= 0:
                raise ValueError(f"Planet radius must be positive, got {planet_radius}")
            self.config = replace(self.config, planet=replace(self.config.planet, radius=planet_radius))

        self.planet_radius = self.config.planet.radius
        self.terrain_sampler = terrain_sampler
        self.rng = rng or NumpyRandomSource()

        self.time = 0.0
        self.tick_count = 0

        self.wind = WindModel(self.config.wind, self.rng)
        self.lightning = LightningController(self.planet_radius, self.config.lightning, self.rng)
        self.spatial = SpatialQuery(self.config.query)
        self.events = EventQueue()

        self._cells: List[CloudCell] = []
        self._create_cells()

        self.active_count, self.storm_count = self._count_active()
        self.last_summary = WeatherState.CLEAR

    def _create_cells(self):
        """Spawn all cells once; no cells are created or destroyed afterwards"""
        cells_cfg = self.config.cells
        if cells_cfg.count is not None:
            count = cells_cfg.count
        else:
            count = cells_cfg.min_count + int(self.rng.next_float() * cells_cfg.count_variation)

        self._cells = [
            CloudCell.spawn(i, self.config, self.rng, self.terrain_sampler)
            for i in range(count)
        ]
        self.spatial.rebuild(self._cells)

        logger.info("Created weather field with %d cells (planet radius %.1f)",
                    count, self.planet_radius)

    @property
    def cells(self) -> Tuple[CloudCell, ...]:
        """Cells in index order"""
        return tuple(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def get_cell(self, index: int) -> Optional[CloudCell]:
        """
        Get a cell by stable index.

        Returns:
            CloudCell or None if out of range
        """
        if 0 <= index < len(self._cells):
            return self._cells[index]
        return None

    def update(self, dt: float, terrain_sampler: Optional[TerrainSampler] = None):
        """
        Advance the whole field by one tick.

        Args:
            dt: Time step in seconds (clamped by the caller)
            terrain_sampler: Overrides the sampler given at construction
        """
        sampler = terrain_sampler if terrain_sampler is not None else self.terrain_sampler

        # Wind first so every cell reads the same vector this tick
        self.wind.advance(dt)

        for cell in self._cells:
            cell.advance(dt, sampler, self.wind, self.config, self.rng)

            strike = self.lightning.tick(cell, dt, self.time + dt)
            if strike is not None:
                self.events.push(strike)

        self.lightning.update_flash(dt)
        self.spatial.rebuild(self._cells)

        self.time += dt
        self.tick_count += 1

        # Aggregate only after every cell has advanced
        self.active_count, self.storm_count = self._count_active()
        summary = self.classify(self.active_count, self.storm_count)

        if summary != self.last_summary:
            logger.info("Weather summary changed: %s -> %s (%d active, %d storms)",
                        self.last_summary.value, summary.value,
                        self.active_count, self.storm_count)
            self.events.push(WeatherChangeEvent(self.last_summary, summary, self.time))
            self.last_summary = summary

    def _count_active(self) -> Tuple[int, int]:
        active = sum(1 for c in self._cells if c.is_active)
        storms = sum(1 for c in self._cells if c.weather_state == WeatherState.STORM)
        return active, storms

    def classify(self, active_count: int, storm_count: int) -> WeatherState:
        """
        Derive the field summary from cell counts.

        Args:
            active_count: Cells not Clear
            storm_count: Cells in Storm

        Returns:
            Storm if any storm, else Rain above the active threshold,
            else Cloudy if anything is active, else Clear
        """
        if storm_count > 0:
            return WeatherState.STORM
        if active_count > self.config.summary.rain_active_count:
            return WeatherState.RAIN
        if active_count > 0:
            return WeatherState.CLOUDY
        return WeatherState.CLEAR

    def drain_events(self) -> List[WeatherEvent]:
        """Return and clear events emitted since the last drain"""
        return self.events.drain()

    def query_at(self, position: np.ndarray) -> LocalWeather:
        """
        Get blended local weather at a world position.

        Args:
            position: [x, y, z] world position

        Returns:
            LocalWeather (zero intensity and no nearest cell when nothing is in range)
        """
        local = self.spatial.query_at(position)
        local.wind_strength = float(self.wind.strength)
        local.wind_direction = self.wind.direction.copy()
        return local

    def get_weather_info(self) -> Dict[str, Any]:
        """
        Get global weather summary.

        Returns:
            Dictionary with aggregate weather statistics
        """
        active, storms = self._count_active()
        max_intensity = max((c.intensity for c in self._cells), default=0.0)

        return {
            'max_intensity': max_intensity,
            'active_cloud_count': active,
            'storm_count': storms,
            'wind_strength': float(self.wind.strength),
            'wind_direction': self.wind.direction.copy(),
            'is_raining': active > self.config.summary.info_raining_count,
            'is_storming': storms > 0,
            'summary': self.classify(active, storms)
        }

    def get_cell_states(self) -> List[Dict[str, Any]]:
        """Snapshots of every cell, keyed by stable index"""
        return [cell.snapshot() for cell in self._cells]

    # Debug / god-power surface
    def set_cloud_weather(self, index: int, state: Union[WeatherState, str]):
        """
        Force one cell's state, bypassing the transition table.
        Out-of-range indices are ignored.

        Args:
            index: Cell index
            state: WeatherState or its name
        """
        cell = self.get_cell(index)
        if cell is None:
            return

        try:
            weather = parse_state(state)
        except ValueError:
            logger.warning("Ignoring unknown weather state %r for cell %d", state, index)
            return

        cell.force_state(weather)

    def trigger_storm(self):
        """Force every storm-capable cell into Storm for 30 seconds"""
        for cell in self._cells:
            if cell.can_storm:
                cell.force_state(WeatherState.STORM, timer=30.0)

    def clear_weather(self):
        """Force every cell to Clear for 60 seconds"""
        for cell in self._cells:
            cell.force_state(WeatherState.CLEAR, timer=60.0)

    def get_info(self) -> Dict[str, Any]:
        """
        Get field information.

        Returns:
            Dictionary with field parameters
        """
        return {
            'planet_radius': self.planet_radius,
            'cell_count': len(self._cells),
            'storm_capable': sum(1 for c in self._cells if c.can_storm),
            'time': self.time,
            'ticks': self.tick_count,
            'strikes': self.lightning.strike_count,
            'has_terrain': self.terrain_sampler is not None
        }
