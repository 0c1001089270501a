"""
Weather configuration.
Typed parameter sections with defaults, loadable from a dict or YAML file.
"""

import math
import yaml
from dataclasses import dataclass, field, fields, asdict
from typing import Optional, Dict, Any, List


@dataclass
class PlanetConfig:
    """Planet geometry"""
    radius: float = 50.0


@dataclass
class CellConfig:
    """Cell population and state-machine timing"""
    count: Optional[int] = None  # None = random in [min_count, min_count + count_variation)
    min_count: int = 25
    count_variation: int = 6
    storm_capable_probability: float = 0.75
    initial_charge_max: float = 0.5

    # Staggered first timer: base + r*spread + index*stagger
    initial_timer_base: float = 10.0
    initial_timer_spread: float = 80.0
    initial_timer_stagger: float = 2.0

    # Timer reset by the transition function: [min, min + spread)
    transition_timer_min: float = 20.0
    transition_timer_spread: float = 40.0

    intensity_relaxation_rate: float = 0.5

    orbit_speed_min: float = 0.0002  # rad per tick
    orbit_speed_spread: float = 0.0004


@dataclass
class MovementConfig:
    """Cell drift and hover above terrain"""
    min_altitude: float = 12.0
    altitude_variation: float = 5.0
    move_speed_scale: float = 3.0
    wind_drift: float = 0.005
    altitude_blend: float = 0.05  # fraction of target radius blended in per tick
    oscillation_amplitude: float = 2.0
    oscillation_frequency: float = 0.1


@dataclass
class WaterCycleConfig:
    """Moisture exchange between cells and the surface"""
    water_level: float = 0.5  # terrain below this height is water
    evaporation_rate: float = 0.08
    precipitation_rate: float = 0.1
    cloud_formation_moisture: float = 0.6
    rain_onset_moisture: float = 0.7
    rain_stop_moisture: float = 0.2
    dissipation_moisture: float = 0.3


@dataclass
class WindConfig:
    """Shared wind and gust parameters"""
    initial_direction: List[float] = field(default_factory=lambda: [1.0, 0.0, 0.5])
    initial_strength: float = 0.2
    gust_interval_min: float = 3.0
    gust_interval_spread: float = 5.0
    gust_strength_min: float = 0.15
    gust_strength_spread: float = 0.4
    max_yaw: float = 0.25  # radians either side
    decay_rate: float = 0.05
    strength_floor: float = 0.1


@dataclass
class LightningConfig:
    """Charge accrual and strike triggering"""
    storm_charge_rate: float = 0.25
    storm_threshold: float = 1.0
    storm_strike_probability: float = 0.08
    rain_charge_rate: float = 0.05
    rain_threshold: float = 1.5
    rain_strike_probability: float = 0.03
    rain_min_moisture: float = 0.7
    strike_offset: float = 0.5  # strike point height above planet radius
    flash_duration: float = 0.3


@dataclass
class QueryConfig:
    """Point-query blending"""
    influence_radius: float = 20.0
    rain_threshold: float = 0.5


@dataclass
class SummaryConfig:
    """Field-wide aggregate thresholds"""
    rain_active_count: int = 5  # summary is Rain above this many active cells
    info_raining_count: int = 3  # get_weather_info() is_raining above this


@dataclass
class WeatherConfig:
    """Complete weather configuration"""
    planet: PlanetConfig = field(default_factory=PlanetConfig)
    cells: CellConfig = field(default_factory=CellConfig)
    movement: MovementConfig = field(default_factory=MovementConfig)
    water_cycle: WaterCycleConfig = field(default_factory=WaterCycleConfig)
    wind: WindConfig = field(default_factory=WindConfig)
    lightning: LightningConfig = field(default_factory=LightningConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'WeatherConfig':
        """
        Build configuration from a (possibly partial) dictionary.

        Args:
            data: Section dictionaries keyed by section name. Unknown keys are ignored.

        Returns:
            Validated WeatherConfig
        """
        data = data or {}
        if 'weather' in data and isinstance(data['weather'], dict):
            data = data['weather']

        sections = {}
        for section in fields(cls):
            section_type = section.default_factory
            values = data.get(section.name) or {}
            known = {f.name for f in fields(section_type)}
            sections[section.name] = section_type(
                **{k: v for k, v in values.items() if k in known}
            )

        config = cls(**sections)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Get configuration as nested dictionary"""
        return asdict(self)

    def validate(self):
        """
        Check parameter ranges.

        Raises:
            ValueError: If a parameter would break a weather invariant
        """
        if not self.planet.radius > 0:
            raise ValueError(f"Planet radius must be positive, got {self.planet.radius}")

        if self.cells.count is not None and self.cells.count < 1:
            raise ValueError(f"Cell count must be at least 1, got {self.cells.count}")
        if self.cells.min_count < 1 or self.cells.count_variation < 1:
            raise ValueError("Cell min_count and count_variation must be at least 1")
        if self.cells.transition_timer_min <= 0 or self.cells.transition_timer_spread < 0:
            raise ValueError("Transition timer must reset to a positive value")

        if not math.isfinite(self.water_cycle.water_level):
            raise ValueError("Water level must be finite")

        rates = {
            'cells.intensity_relaxation_rate': self.cells.intensity_relaxation_rate,
            'water_cycle.evaporation_rate': self.water_cycle.evaporation_rate,
            'water_cycle.precipitation_rate': self.water_cycle.precipitation_rate,
            'wind.decay_rate': self.wind.decay_rate,
            'lightning.storm_charge_rate': self.lightning.storm_charge_rate,
            'lightning.rain_charge_rate': self.lightning.rain_charge_rate,
        }
        for name, value in rates.items():
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        # Probabilities, fractions and moisture thresholds
        unit_range = {
            'cells.storm_capable_probability': self.cells.storm_capable_probability,
            'lightning.storm_strike_probability': self.lightning.storm_strike_probability,
            'lightning.rain_strike_probability': self.lightning.rain_strike_probability,
            'movement.altitude_blend': self.movement.altitude_blend,
            'water_cycle.cloud_formation_moisture': self.water_cycle.cloud_formation_moisture,
            'water_cycle.rain_onset_moisture': self.water_cycle.rain_onset_moisture,
            'water_cycle.rain_stop_moisture': self.water_cycle.rain_stop_moisture,
            'water_cycle.dissipation_moisture': self.water_cycle.dissipation_moisture,
            'lightning.rain_min_moisture': self.lightning.rain_min_moisture,
        }
        for name, value in unit_range.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")

        if len(self.wind.initial_direction) != 3:
            raise ValueError("Wind initial_direction must have 3 components")
        if self.wind.strength_floor <= 0:
            raise ValueError("Wind strength floor must be positive")
        if self.lightning.flash_duration <= 0:
            raise ValueError("Lightning flash duration must be positive")
        if self.query.influence_radius <= 0:
            raise ValueError("Query influence radius must be positive")


def load_weather_config(config: Optional[Dict[str, Any]] = None,
                        config_file: Optional[str] = None) -> WeatherConfig:
    """
    Load weather configuration.

    Args:
        config: Configuration dictionary
        config_file: Path to YAML configuration file (takes precedence)

    Returns:
        Validated WeatherConfig (defaults when neither is given)
    """
    if config_file:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)

    return WeatherConfig.from_dict(config)
