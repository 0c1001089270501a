"""
Discrete weather states shared by cells and the field-wide summary.
"""

from enum import Enum
from typing import Union


class WeatherState(Enum):
    """Weather state of a cell (also used for the field summary)"""
    CLEAR = "clear"
    CLOUDY = "cloudy"
    RAIN = "rain"
    STORM = "storm"

    @property
    def is_precipitating(self) -> bool:
        return self in (WeatherState.RAIN, WeatherState.STORM)


# Intensity each state relaxes toward after a transition
TARGET_INTENSITY = {
    WeatherState.CLEAR: 0.0,
    WeatherState.CLOUDY: 0.3,
    WeatherState.RAIN: 0.7,
    WeatherState.STORM: 1.0
}


def target_intensity_for(state: WeatherState) -> float:
    """Get the fixed target intensity for a weather state"""
    return TARGET_INTENSITY[state]


def parse_state(value: Union[WeatherState, str]) -> WeatherState:
    """
    Coerce a state name or enum member to WeatherState.

    Args:
        value: WeatherState or its string value (case-insensitive)

    Returns:
        Matching WeatherState

    Raises:
        ValueError: If the name is not a known state
    """
    if isinstance(value, WeatherState):
        return value
    return WeatherState(str(value).strip().lower())
