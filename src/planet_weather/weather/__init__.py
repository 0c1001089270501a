"""
Procedural local weather: independent cloud cells with moisture-driven
state machines, shared wind and lightning.
"""

from .states import WeatherState, TARGET_INTENSITY, target_intensity_for, parse_state
from .config import WeatherConfig, load_weather_config
from .wind import WindModel
from .cloud_cell import CloudCell, TerrainSampler, sample_terrain
from .events import LightningBolt, LightningStrikeEvent, WeatherChangeEvent, EventQueue
from .lightning import LightningController
from .spatial import SpatialQuery, LocalWeather
from .field import WeatherField

__all__ = [
    'WeatherState',
    'TARGET_INTENSITY',
    'target_intensity_for',
    'parse_state',
    'WeatherConfig',
    'load_weather_config',
    'WindModel',
    'CloudCell',
    'TerrainSampler',
    'sample_terrain',
    'LightningBolt',
    'LightningStrikeEvent',
    'WeatherChangeEvent',
    'EventQueue',
    'LightningController',
    'SpatialQuery',
    'LocalWeather',
    'WeatherField'
]
