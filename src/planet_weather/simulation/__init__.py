"""
Simulation driver for the weather field.
PerlinTerrainSampler lives in .terrain_sampler (needs the optional 'terrain' extra).
"""

from .weather_runner import WeatherRunner, RunnerState, RunMetrics
from .weather_visualizer import WeatherVisualizer

__all__ = [
    'WeatherRunner',
    'RunnerState',
    'RunMetrics',
    'WeatherVisualizer'
]
