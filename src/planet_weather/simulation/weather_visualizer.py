"""
WeatherVisualizer: Debug plots of the weather field and recorded runs.
"""

import json
import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D
from pathlib import Path
from typing import Dict, Any, Optional, Tuple, Union

from ..weather.field import WeatherField
from ..weather.states import WeatherState


STATE_COLORS = {
    WeatherState.CLEAR.value: '#f2c94c',
    WeatherState.CLOUDY.value: '#9e9e9e',
    WeatherState.RAIN.value: '#2d9cdb',
    WeatherState.STORM.value: '#4b2991'
}

STATE_LEVELS = {state.value: i for i, state in enumerate(WeatherState)}


class WeatherVisualizer:
    """
    Snapshot and history plots for a weather field.
    """

    def __init__(self,
                 weather_field: Optional[WeatherField] = None,
                 recording: Optional[Union[str, Path, Dict[str, Any]]] = None,
                 figsize: Tuple[float, float] = (14, 7)):
        """
        Initialize visualizer.

        Args:
            weather_field: Live field to snapshot
            recording: Recording dict or path to a saved recording
            figsize: Figure size
        """
        self.weather_field = weather_field
        self.figsize = figsize

        self.recorded_data = None
        if isinstance(recording, (str, Path)):
            with open(recording, 'r') as f:
                self.recorded_data = json.load(f)
        elif recording is not None:
            self.recorded_data = recording

        self.fig = None
        self.axes = {}

    def create_figure(self):
        """Create snapshot (3D) and history panels"""
        if self.weather_field is None and not self.recorded_data:
            raise ValueError("Nothing to visualize: provide a field or a recording")

        self.fig = plt.figure(figsize=self.figsize)
        self.fig.suptitle("Weather Field", fontsize=14, fontweight='bold')

        gs = self.fig.add_gridspec(2, 2, hspace=0.35, wspace=0.25)
        self.axes['3d'] = self.fig.add_subplot(gs[:, 0], projection='3d')
        self.axes['summary'] = self.fig.add_subplot(gs[0, 1])
        self.axes['counts'] = self.fig.add_subplot(gs[1, 1])

        self.plot_cells(self.axes['3d'])
        self.plot_history(self.axes['summary'], self.axes['counts'])

        return self.fig

    def _cell_snapshot(self):
        if self.weather_field is not None:
            return [
                {'position': cell.position, 'state': cell.weather_state.value,
                 'intensity': cell.intensity}
                for cell in self.weather_field.cells
            ]
        return self.recorded_data['frames'][-1]['cells'] if self.recorded_data['frames'] else []

    def plot_cells(self, ax):
        """Scatter cells coloured by state, sized by intensity"""
        ax.set_title('Cells', fontsize=12)
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_zlabel('Z')

        cells = self._cell_snapshot()
        for state, color in STATE_COLORS.items():
            group = [c for c in cells if c['state'] == state]
            if not group:
                continue
            positions = np.array([c['position'] for c in group])
            sizes = [30 + 120 * c['intensity'] for c in group]
            ax.scatter(positions[:, 0], positions[:, 1], positions[:, 2],
                       c=color, s=sizes, label=state, alpha=0.85)

        if self.weather_field is not None:
            # Planet outline
            radius = self.weather_field.planet_radius
            u, v = np.mgrid[0:2 * np.pi:24j, 0:np.pi:12j]
            ax.plot_wireframe(radius * np.cos(u) * np.sin(v), radius * np.cos(v),
                              radius * np.sin(u) * np.sin(v), color='#6fcf97',
                              linewidth=0.3, alpha=0.4)

        if cells:
            ax.legend(loc='upper left', fontsize=8)

    def plot_history(self, summary_ax, counts_ax):
        """Plot summary level and active/storm counts over a recording"""
        summary_ax.set_title('Summary', fontsize=12)
        summary_ax.set_yticks(list(STATE_LEVELS.values()))
        summary_ax.set_yticklabels(list(STATE_LEVELS.keys()))
        summary_ax.grid(True, alpha=0.3)

        counts_ax.set_title('Active Cells', fontsize=12)
        counts_ax.set_xlabel('Time (s)')
        counts_ax.grid(True, alpha=0.3)

        if not self.recorded_data or not self.recorded_data.get('frames'):
            return

        frames = self.recorded_data['frames']
        times = [f['time'] for f in frames]

        summary_ax.step(times, [STATE_LEVELS[f['summary']] for f in frames],
                        where='post', color='#333333')

        counts_ax.plot(times, [f['active_cloud_count'] for f in frames], label='active')
        counts_ax.plot(times, [f['storm_count'] for f in frames], label='storm')

        strikes = [e['time'] for e in self.recorded_data.get('events', [])
                   if e['type'] == 'lightning_strike']
        for strike_time in strikes:
            counts_ax.axvline(strike_time, color='#f2994a', alpha=0.4, linewidth=0.8)

        counts_ax.legend(loc='upper right', fontsize=8)

    def save(self, filename: Union[str, Path], dpi: int = 100):
        """
        Save figure to file.

        Args:
            filename: Output image path
            dpi: Resolution
        """
        if self.fig is None:
            self.create_figure()
        self.fig.savefig(filename, dpi=dpi)

    def close(self):
        if self.fig is not None:
            plt.close(self.fig)
            self.fig = None
