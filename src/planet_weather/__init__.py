"""
Planet weather simulation package.
"""

from .weather import WeatherField, WeatherState, CloudCell, LocalWeather
from .utils import NumpyRandomSource, SequenceRandomSource

__all__ = [
    'WeatherField',
    'WeatherState',
    'CloudCell',
    'LocalWeather',
    'NumpyRandomSource',
    'SequenceRandomSource'
]

__version__ = '0.1.0'
