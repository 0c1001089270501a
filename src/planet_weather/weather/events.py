"""
Outbound weather events.
The field appends events during update(); the driver drains them after each tick.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Union

from .states import WeatherState


@dataclass
class LightningBolt:
    """Jagged strike geometry for the rendering collaborator"""
    path: np.ndarray  # (N, 3) points from cloud to ground
    branches: List[np.ndarray] = field(default_factory=list)  # each (M, 3)

    @property
    def segment_count(self) -> int:
        return len(self.path) - 1


@dataclass
class LightningStrikeEvent:
    """A cell discharged lightning"""
    cell_index: int
    position: np.ndarray  # strike point near the surface
    cloud_position: np.ndarray
    intensity: float
    bolt: LightningBolt
    time: float = 0.0

    def to_dict(self) -> dict:
        return {
            'type': 'lightning_strike',
            'cell_index': self.cell_index,
            'position': self.position.tolist(),
            'cloud_position': self.cloud_position.tolist(),
            'intensity': self.intensity,
            'time': self.time
        }


@dataclass
class WeatherChangeEvent:
    """The field-wide summary changed"""
    previous: WeatherState
    summary: WeatherState
    time: float = 0.0

    def to_dict(self) -> dict:
        return {
            'type': 'weather_change',
            'previous': self.previous.value,
            'summary': self.summary.value,
            'time': self.time
        }


WeatherEvent = Union[LightningStrikeEvent, WeatherChangeEvent]


class EventQueue:
    """
    FIFO of events produced during ticks.
    """

    def __init__(self):
        self._events: List[WeatherEvent] = []

    def push(self, event: WeatherEvent):
        self._events.append(event)

    def drain(self) -> List[WeatherEvent]:
        """Return all pending events in emission order and clear the queue"""
        events = self._events
        self._events = []
        return events

    def __len__(self) -> int:
        return len(self._events)
