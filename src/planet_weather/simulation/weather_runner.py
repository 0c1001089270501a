"""
WeatherRunner: Tick driver for the weather field.
Clamps frame time, advances the field, drains its events and dispatches
them to listeners, with optional recording.
"""

import json
import logging
import time
import numpy as np
from collections import deque
from pathlib import Path
from typing import Dict, List, Any, Optional, Callable, Union
from dataclasses import dataclass, field, asdict
from enum import Enum

from ..weather.cloud_cell import TerrainSampler
from ..weather.events import LightningStrikeEvent, WeatherChangeEvent, WeatherEvent
from ..weather.field import WeatherField
from ..weather.states import WeatherState
from ..utils.random_source import NumpyRandomSource

logger = logging.getLogger(__name__)


class RunnerState(Enum):
    """States of runner execution"""
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunMetrics:
    """Performance and outcome metrics for a weather run"""
    total_steps: int = 0
    simulated_time: float = 0.0
    wall_time: float = 0.0

    mean_step_time_ms: float = 0.0
    max_step_time_ms: float = 0.0

    lightning_strikes: int = 0
    summary_changes: int = 0
    listener_errors: int = 0
    clamped_steps: int = 0

    # Seconds spent under each summary
    summary_durations: Dict[str, float] = field(
        default_factory=lambda: {state.value: 0.0 for state in WeatherState}
    )

    def update_timing(self, step_time_ms: float):
        """Update timing statistics"""
        self.mean_step_time_ms = (
            (self.mean_step_time_ms * self.total_steps + step_time_ms) /
            (self.total_steps + 1)
        )
        self.max_step_time_ms = max(self.max_step_time_ms, step_time_ms)


class WeatherRunner:
    """
    Drives a WeatherField at a fixed or caller-supplied tick rate.
    """

    def __init__(self,
                 config: Optional[Union[str, Dict[str, Any]]] = None,
                 terrain_sampler: Optional[TerrainSampler] = None,
                 dt: float = 1.0 / 30.0,
                 max_dt: float = 0.1,
                 seed: Optional[int] = None,
                 verbose: bool = False,
                 record: bool = False,
                 record_interval: int = 1,
                 max_event_log: int = 1000):
        """
        Initialize weather runner.

        Args:
            config: Path to weather YAML file or config dict
            terrain_sampler: Terrain height function passed to the field
            dt: Default time step in seconds
            max_dt: Upper clamp for a single step
            seed: Random seed for reproducible weather
            verbose: Print status lines
            record: Enable data recording
            record_interval: Record every N steps
            max_event_log: Number of most recent event dicts kept
        """
        if dt <= 0 or max_dt <= 0:
            raise ValueError("dt and max_dt must be positive")

        self.config = config
        self.terrain_sampler = terrain_sampler
        self.dt = dt
        self.max_dt = max_dt
        self.seed = seed
        self.verbose = verbose
        self.record = record
        self.record_interval = max(1, record_interval)

        self.field: Optional[WeatherField] = None
        self.state = RunnerState.UNINITIALIZED

        self.metrics = RunMetrics()
        self.events: deque = deque(maxlen=max_event_log)
        self.recording_data: Optional[List[Dict[str, Any]]] = [] if record else None

        self._weather_listeners: List[Callable[[WeatherChangeEvent], None]] = []
        self._strike_listeners: List[Callable[[LightningStrikeEvent], None]] = []

    def add_listener(self,
                     on_weather_change: Optional[Callable[[WeatherChangeEvent], None]] = None,
                     on_lightning_strike: Optional[Callable[[LightningStrikeEvent], None]] = None):
        """
        Register event callbacks.

        Args:
            on_weather_change: Called once per summary change
            on_lightning_strike: Called once per strike
        """
        if on_weather_change is not None:
            self._weather_listeners.append(on_weather_change)
        if on_lightning_strike is not None:
            self._strike_listeners.append(on_lightning_strike)

    def setup(self) -> WeatherField:
        """Create the weather field"""
        if isinstance(self.config, str):
            self.field = WeatherField(
                terrain_sampler=self.terrain_sampler,
                config_file=self.config,
                rng=NumpyRandomSource(self.seed)
            )
        else:
            self.field = WeatherField(
                terrain_sampler=self.terrain_sampler,
                config=self.config,
                rng=NumpyRandomSource(self.seed)
            )

        self.state = RunnerState.READY

        if self.verbose:
            info = self.field.get_info()
            print("Weather setup complete:")
            print(f"  - Cells: {info['cell_count']} ({info['storm_capable']} storm capable)")
            print(f"  - Planet radius: {info['planet_radius']}")
            print(f"  - Terrain: {'sampled' if info['has_terrain'] else 'flat'}")
            print(f"  - Update rate: {1/self.dt:.1f} Hz")

        return self.field

    def step(self, dt: Optional[float] = None) -> Dict[str, Any]:
        """
        Execute one tick.

        Args:
            dt: Frame time in seconds (default: runner dt), clamped to [0, max_dt]

        Returns:
            Dictionary with step results
        """
        if self.field is None:
            self.setup()

        step_start = time.perf_counter()

        frame_dt = self.dt if dt is None else dt
        clamped_dt = float(np.clip(frame_dt, 0.0, self.max_dt))
        if clamped_dt != frame_dt:
            self.metrics.clamped_steps += 1

        summary_before = self.field.last_summary
        self.field.update(clamped_dt)
        self.metrics.summary_durations[summary_before.value] += clamped_dt

        events = self.field.drain_events()
        self._dispatch(events)

        self.metrics.simulated_time += clamped_dt
        step_time_ms = (time.perf_counter() - step_start) * 1000
        self.metrics.update_timing(step_time_ms)
        self.metrics.total_steps += 1

        if self.recording_data is not None and self.metrics.total_steps % self.record_interval == 0:
            self._record_frame()

        return {
            'time': self.field.time,
            'step': self.metrics.total_steps,
            'dt': clamped_dt,
            'summary': self.field.last_summary,
            'events': events,
            'step_time_ms': step_time_ms
        }

    def _dispatch(self, events: List[WeatherEvent]):
        """Deliver drained events to listeners in emission order"""
        for event in events:
            self.events.append(event.to_dict())

            if isinstance(event, LightningStrikeEvent):
                self.metrics.lightning_strikes += 1
                listeners = self._strike_listeners
            else:
                self.metrics.summary_changes += 1
                listeners = self._weather_listeners
                if self.verbose:
                    print(f"  WEATHER: {event.previous.value} -> {event.summary.value} "
                          f"at T={event.time:.1f}s")

            for listener in listeners:
                try:
                    listener(event)
                except Exception:
                    self.metrics.listener_errors += 1
                    logger.exception("Weather listener %r failed", listener)

    def run(self, duration: float, status_interval: float = 10.0) -> Dict[str, Any]:
        """
        Run for a fixed simulated duration.

        Args:
            duration: Simulated seconds
            status_interval: Seconds between verbose status lines

        Returns:
            Results dictionary
        """
        if self.field is None:
            self.setup()

        self.state = RunnerState.RUNNING
        wall_start = time.perf_counter()
        next_status = status_interval

        try:
            elapsed = 0.0
            while elapsed < duration:
                result = self.step(min(self.dt, duration - elapsed))
                elapsed += result['dt']

                if self.verbose and elapsed >= next_status:
                    self._print_status()
                    next_status += status_interval

        except Exception:
            self.state = RunnerState.FAILED
            logger.exception("Weather run failed at T=%.2fs", self.field.time)
            raise

        self.metrics.wall_time += time.perf_counter() - wall_start
        self.state = RunnerState.COMPLETED

        return self.get_results()

    def _record_frame(self):
        """Record current field state"""
        info = self.field.get_weather_info()
        self.recording_data.append({
            'time': self.field.time,
            'summary': info['summary'].value,
            'active_cloud_count': info['active_cloud_count'],
            'storm_count': info['storm_count'],
            'max_intensity': info['max_intensity'],
            'wind_strength': info['wind_strength'],
            'flash_level': self.field.lightning.flash_level,
            'cells': [
                {
                    'index': cell.index,
                    'position': cell.position.tolist(),
                    'state': cell.weather_state.value,
                    'intensity': cell.intensity,
                    'moisture': cell.moisture
                }
                for cell in self.field.cells
            ]
        })

    def _print_status(self):
        """Print current status"""
        info = self.field.get_weather_info()
        print(f"T={self.field.time:6.1f}s | "
              f"Summary: {info['summary'].value:6s} | "
              f"Active: {info['active_cloud_count']:2d} | "
              f"Storms: {info['storm_count']:2d} | "
              f"Wind: {info['wind_strength']:.2f} | "
              f"Strikes: {self.metrics.lightning_strikes}")

    def get_results(self) -> Dict[str, Any]:
        """Get run results"""
        return {
            'state': self.state.value,
            'duration': self.metrics.simulated_time,
            'final_summary': self.field.last_summary.value if self.field else None,
            'metrics': asdict(self.metrics),
            'events': list(self.events),
            'field': self.field.get_info() if self.field else {}
        }

    def save_recording(self, filename: Union[str, Path]):
        """
        Save recorded frames and events to JSON.

        Args:
            filename: Output path
        """
        if self.recording_data is None:
            raise ValueError("Recording was not enabled for this runner")

        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            'config': {
                'dt': self.dt,
                'max_dt': self.max_dt,
                'seed': self.seed,
                'planet_radius': self.field.planet_radius if self.field else None
            },
            'frames': self.recording_data,
            'events': list(self.events),
            'metrics': asdict(self.metrics)
        }
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)

        if self.verbose:
            print(f"Recording saved to {path}")
