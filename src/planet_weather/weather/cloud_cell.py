"""
Cloud weather cell.
Each cell is a self-contained parcel of moisture drifting above the terrain,
running its own weather state machine.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Callable, Tuple

from .config import WeatherConfig
from .states import WeatherState, target_intensity_for
from .wind import WindModel
from ..utils.random_source import RandomSource, uniform
from ..utils.sphere_utils import (
    normalize, rotate_about_axis, random_unit_vector, VERTICAL_AXIS
)

logger = logging.getLogger(__name__)

# (nx, ny, nz) unit direction -> terrain elevation
TerrainSampler = Callable[[float, float, float], float]

# Initial states are drawn from this bag
INITIAL_STATE_BAG = (
    WeatherState.CLEAR, WeatherState.CLEAR,
    WeatherState.CLOUDY, WeatherState.CLOUDY,
    WeatherState.RAIN, WeatherState.RAIN,
    WeatherState.STORM
)


def sample_terrain(terrain_sampler: Optional[TerrainSampler], normal: np.ndarray) -> float:
    """
    Sample terrain elevation below a direction.

    Args:
        terrain_sampler: Terrain height function, or None for a flat world
        normal: Unit direction from the planet center

    Returns:
        Terrain elevation (0 without a sampler)
    """
    if terrain_sampler is None:
        return 0.0
    return float(terrain_sampler(float(normal[0]), float(normal[1]), float(normal[2])))


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


@dataclass
class CloudCell:
    """One weather automaton"""
    index: int
    position: np.ndarray  # [x, y, z] world position on the cloud shell

    weather_state: WeatherState = WeatherState.CLEAR
    intensity: float = 0.0
    target_intensity: float = 0.0
    moisture: float = 0.0
    is_over_water: bool = False
    can_storm: bool = True
    lightning_charge: float = 0.0

    state_timer: float = 30.0  # seconds until timer-driven transition
    state_progress: float = 0.0  # seconds since last transition

    orbit_axis: np.ndarray = field(default_factory=lambda: VERTICAL_AXIS.copy())
    orbit_speed: float = 0.0003  # radians per tick

    transition_count: int = 0

    @classmethod
    def spawn(cls, index: int, config: WeatherConfig, rng: RandomSource,
              terrain_sampler: Optional[TerrainSampler] = None) -> 'CloudCell':
        """
        Create a cell with randomized position, state and moisture.

        Args:
            index: Stable handle of the cell in its field
            config: Weather configuration
            rng: Random source
            terrain_sampler: Terrain height function

        Returns:
            New CloudCell
        """
        cells = config.cells
        movement = config.movement

        normal = random_unit_vector(rng)
        terrain_height = sample_terrain(terrain_sampler, normal)
        altitude = terrain_height + movement.min_altitude + rng.next_float() * movement.altitude_variation
        position = normal * (config.planet.radius + altitude)

        state = INITIAL_STATE_BAG[int(rng.next_float() * len(INITIAL_STATE_BAG))]
        intensity = target_intensity_for(state)

        # Stagger so cells don't all transition together
        timer = (cells.initial_timer_base
                 + rng.next_float() * cells.initial_timer_spread
                 + index * cells.initial_timer_stagger)

        # Storms and rain start wetter
        if state == WeatherState.STORM:
            moisture = uniform(rng, 0.7, 1.0)
        elif state == WeatherState.RAIN:
            moisture = uniform(rng, 0.5, 0.8)
        else:
            moisture = uniform(rng, 0.0, 0.5)

        orbit_axis = normalize(np.array([rng.next_float() - 0.5, 1.0, rng.next_float() - 0.5]))

        return cls(
            index=index,
            position=position,
            weather_state=state,
            intensity=intensity,
            target_intensity=intensity,
            moisture=_clamp01(moisture),
            is_over_water=(terrain_sampler is not None
                           and terrain_height < config.water_cycle.water_level),
            can_storm=rng.next_float() < cells.storm_capable_probability,
            lightning_charge=rng.next_float() * cells.initial_charge_max,
            state_timer=timer,
            state_progress=rng.next_float() * 10.0,
            orbit_axis=orbit_axis,
            orbit_speed=uniform(rng, cells.orbit_speed_min,
                                cells.orbit_speed_min + cells.orbit_speed_spread)
        )

    @property
    def surface_normal(self) -> np.ndarray:
        """Unit direction from the planet center to the cell"""
        return normalize(self.position)

    @property
    def radius(self) -> float:
        """Distance from the planet center"""
        return float(np.linalg.norm(self.position))

    @property
    def is_active(self) -> bool:
        return self.weather_state != WeatherState.CLEAR

    def advance(self, dt: float, terrain_sampler: Optional[TerrainSampler],
                wind: WindModel, config: WeatherConfig, rng: RandomSource):
        """
        Advance the cell by one tick (movement, water cycle, state timer, intensity).
        Lightning charge is handled by the LightningController afterwards.

        Args:
            dt: Time step in seconds
            terrain_sampler: Terrain height function, or None for a flat world
            wind: Shared wind (read only)
            config: Weather configuration
            rng: Random source
        """
        normal, terrain_height = self._move(terrain_sampler, wind, config)

        self.is_over_water = (terrain_sampler is not None
                              and terrain_height < config.water_cycle.water_level)
        self._update_water_cycle(dt, config, rng)

        self.state_progress += dt
        self.state_timer -= dt
        if self.state_timer <= 0:
            self.transition(config, rng)

        self._relax_intensity(dt, config.cells.intensity_relaxation_rate)

    def _move(self, terrain_sampler: Optional[TerrainSampler], wind: WindModel,
              config: WeatherConfig) -> Tuple[np.ndarray, float]:
        """
        Orbit, drift with the wind and ease toward hover altitude.

        Returns:
            Tuple of (surface normal, terrain height below the cell)
        """
        movement = config.movement

        position = rotate_about_axis(self.position, self.orbit_axis,
                                     self.orbit_speed * movement.move_speed_scale)
        position = position + wind.get_drift(movement.wind_drift)

        distance = np.linalg.norm(position)
        normal = normalize(position)
        terrain_height = sample_terrain(terrain_sampler, normal)

        hover = (terrain_height + movement.min_altitude
                 + np.sin(self.state_progress * movement.oscillation_frequency)
                 * movement.oscillation_amplitude)
        target_radius = config.planet.radius + hover

        # Blend toward target radius instead of snapping
        blend = movement.altitude_blend
        self.position = normal * (distance * (1.0 - blend) + target_radius * blend)

        return normal, terrain_height

    def _update_water_cycle(self, dt: float, config: WeatherConfig, rng: RandomSource):
        """Evaporate over water, precipitate and drain over land"""
        wc = config.water_cycle

        if self.is_over_water:
            self.moisture = _clamp01(self.moisture + dt * wc.evaporation_rate)

            if self.moisture > wc.cloud_formation_moisture and self.weather_state == WeatherState.CLEAR:
                self._enter_state(WeatherState.CLOUDY, 0.4, uniform(rng, 15.0, 35.0), 'evaporation')
            return

        # Saturated cell moving over land starts raining
        if self.moisture > wc.rain_onset_moisture and self.weather_state in (
                WeatherState.CLEAR, WeatherState.CLOUDY):
            self._enter_state(WeatherState.RAIN, 0.8, uniform(rng, 10.0, 25.0), 'saturation')

        if self.weather_state.is_precipitating:
            self.moisture = _clamp01(self.moisture - dt * wc.precipitation_rate)

            if self.moisture < wc.rain_stop_moisture:
                self._enter_state(WeatherState.CLOUDY, 0.2, uniform(rng, 5.0, 15.0), 'depleted')

        if self.weather_state == WeatherState.CLOUDY and self.moisture < wc.dissipation_moisture:
            self._enter_state(WeatherState.CLEAR, 0.0, uniform(rng, 20.0, 50.0), 'dissipated')

    def _relax_intensity(self, dt: float, rate: float):
        # Exponential approach; factor capped at 1 so it cannot overshoot
        factor = min(1.0, dt * rate)
        self.intensity = _clamp01(self.intensity + (self.target_intensity - self.intensity) * factor)

    def choose_next_state(self, rng: RandomSource) -> WeatherState:
        """
        Roll the timer-driven transition table for the current state.

        Args:
            rng: Random source

        Returns:
            Next weather state (may equal the current one)
        """
        state = self.weather_state
        moisture = self.moisture

        if state == WeatherState.CLEAR:
            if moisture > 0.5:
                return WeatherState.CLOUDY
            return WeatherState.CLOUDY if rng.next_float() < 0.4 else WeatherState.CLEAR

        if state == WeatherState.CLOUDY:
            roll = rng.next_float()
            # Wet cell over land precipitates
            if moisture > 0.6 and not self.is_over_water:
                return WeatherState.STORM if roll < 0.4 and self.can_storm else WeatherState.RAIN
            if moisture < 0.3:
                return WeatherState.CLEAR
            if roll < 0.2:
                return WeatherState.CLEAR
            if roll < 0.6:
                return WeatherState.RAIN if moisture > 0.5 else WeatherState.CLOUDY
            if self.can_storm and moisture > 0.6:
                return WeatherState.STORM
            return WeatherState.CLOUDY

        if state == WeatherState.RAIN:
            roll = rng.next_float()
            if moisture < 0.3:
                return WeatherState.CLOUDY
            if roll < 0.2:
                return WeatherState.CLOUDY
            if roll < 0.5 and self.can_storm and moisture > 0.5:
                return WeatherState.STORM
            return WeatherState.RAIN

        # Storm
        if rng.next_float() < 0.6:
            return WeatherState.STORM
        return WeatherState.RAIN if rng.next_float() < 0.5 else WeatherState.CLOUDY

    def transition(self, config: WeatherConfig, rng: RandomSource) -> WeatherState:
        """
        Timer-driven transition: roll the table, set target intensity, reset timer.

        Args:
            config: Weather configuration
            rng: Random source

        Returns:
            New weather state
        """
        next_state = self.choose_next_state(rng)
        cells = config.cells
        timer = uniform(rng, cells.transition_timer_min,
                        cells.transition_timer_min + cells.transition_timer_spread)
        self._enter_state(next_state, target_intensity_for(next_state), timer, 'timer')
        return next_state

    def _enter_state(self, state: WeatherState, target_intensity: float,
                     timer: float, reason: str):
        """Apply a transition"""
        if state != self.weather_state:
            logger.debug("Cell %d: %s -> %s (%s, moisture %.2f)", self.index,
                         self.weather_state.value, state.value, reason, self.moisture)
        self.weather_state = state
        self.target_intensity = _clamp01(target_intensity)
        self.state_timer = timer
        self.state_progress = 0.0
        self.transition_count += 1

    def force_state(self, state: WeatherState, timer: Optional[float] = None):
        """
        Set state and matching target intensity directly, bypassing the transition table.

        Args:
            state: New weather state
            timer: New state timer, or None to keep the current one
        """
        self.weather_state = state
        self.target_intensity = target_intensity_for(state)
        if timer is not None:
            self.state_timer = timer

    def snapshot(self) -> Dict[str, Any]:
        """Get a copy of the cell state for renderers and recording"""
        return {
            'index': self.index,
            'position': self.position.copy(),
            'state': self.weather_state.value,
            'intensity': self.intensity,
            'target_intensity': self.target_intensity,
            'moisture': self.moisture,
            'is_over_water': self.is_over_water,
            'can_storm': self.can_storm,
            'lightning_charge': self.lightning_charge,
            'state_timer': self.state_timer
        }
