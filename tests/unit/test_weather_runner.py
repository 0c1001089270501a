# tests/unit/test_weather_runner.py
"""
Unit tests for the weather runner and visualizer.
"""

import json
import matplotlib
matplotlib.use('Agg')

import pytest
import sys
import os
ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(os.path.join(ROOT, 'src'))

from planet_weather.simulation import WeatherRunner, RunnerState, WeatherVisualizer
from planet_weather.weather.events import WeatherChangeEvent
from planet_weather.weather.states import WeatherState


def force_storm(field):
    """Calm the field, then put cell 0 into a long-lived storm"""
    field.clear_weather()
    for cell in field.cells:
        cell.moisture = 0.5
    cell = field.get_cell(0)
    cell.force_state(WeatherState.STORM, timer=100.0)
    cell.moisture = 0.9


class TestWeatherRunner:
    """Test suite for WeatherRunner"""

    @pytest.fixture
    def runner(self):
        return WeatherRunner(config={'cells': {'count': 10}}, seed=1)

    def test_setup(self, runner):
        assert runner.state == RunnerState.UNINITIALIZED

        field = runner.setup()

        assert runner.state == RunnerState.READY
        assert len(field) == 10

    def test_setup_from_yaml(self):
        runner = WeatherRunner(config=os.path.join(ROOT, 'configs', 'weather', 'default_weather.yaml'),
                               seed=1)
        field = runner.setup()

        assert 25 <= len(field) <= 30
        assert field.planet_radius == 50.0

    @pytest.mark.parametrize("dt,max_dt", [(0.0, 0.1), (-0.1, 0.1), (0.1, 0.0)])
    def test_invalid_step_sizes(self, dt, max_dt):
        with pytest.raises(ValueError):
            WeatherRunner(dt=dt, max_dt=max_dt)

    def test_step_clamps_frame_time(self, runner):
        result = runner.step(1.0)
        assert result['dt'] == pytest.approx(0.1)

        result = runner.step(-0.5)
        assert result['dt'] == 0.0

        result = runner.step(0.05)
        assert result['dt'] == pytest.approx(0.05)

        assert runner.metrics.clamped_steps == 2
        assert runner.metrics.total_steps == 3
        assert runner.field.time == pytest.approx(0.15)

    def test_run_duration(self, runner):
        results = runner.run(5.0)

        assert results['state'] == 'completed'
        assert results['duration'] == pytest.approx(5.0)
        assert results['metrics']['total_steps'] >= 150
        assert results['final_summary'] in [s.value for s in WeatherState]
        assert sum(results['metrics']['summary_durations'].values()) == pytest.approx(5.0)

    def test_listeners_receive_events(self, runner):
        changes = []
        runner.add_listener(on_weather_change=changes.append)
        runner.setup()
        force_storm(runner.field)

        result = runner.step()

        assert len(changes) == 1
        assert isinstance(changes[0], WeatherChangeEvent)
        assert changes[0].summary == WeatherState.STORM
        assert result['summary'] == WeatherState.STORM
        assert result['events'] == changes
        assert runner.metrics.summary_changes == 1
        assert runner.events[0]['type'] == 'weather_change'

    def test_failing_listener_is_isolated(self, runner):
        received = []

        def broken(event):
            raise RuntimeError("listener failure")

        runner.add_listener(on_weather_change=broken)
        runner.add_listener(on_weather_change=received.append)
        runner.setup()
        force_storm(runner.field)

        runner.step()
        runner.step()

        assert len(received) == 1
        assert runner.metrics.listener_errors == 1
        assert runner.metrics.total_steps == 2

    def test_event_log_is_bounded(self):
        runner = WeatherRunner(config={'cells': {'count': 10}}, seed=1, max_event_log=2)
        runner.setup()

        force_storm(runner.field)
        runner.step()
        cell = runner.field.get_cell(0)
        cell.force_state(WeatherState.CLEAR, timer=100.0)
        cell.moisture = 0.5
        runner.step()
        force_storm(runner.field)
        runner.step()

        assert runner.metrics.summary_changes == 3
        assert len(runner.events) == 2
        assert [e['summary'] for e in runner.events] == ['clear', 'storm']
        assert len(runner.get_results()['events']) == 2

    def test_save_recording_requires_record(self, runner, tmp_path):
        runner.step()
        with pytest.raises(ValueError):
            runner.save_recording(tmp_path / "run.json")

    def test_recording(self, tmp_path):
        runner = WeatherRunner(config={'cells': {'count': 6}}, seed=2,
                               record=True, record_interval=5)
        runner.run(2.0)

        path = tmp_path / "runs" / "run.json"
        runner.save_recording(path)

        with open(path) as f:
            data = json.load(f)

        assert data['config']['seed'] == 2
        assert len(data['frames']) == runner.metrics.total_steps // 5
        frame = data['frames'][0]
        assert len(frame['cells']) == 6
        assert frame['summary'] in [s.value for s in WeatherState]


class TestWeatherVisualizer:
    """Test suite for WeatherVisualizer"""

    def test_requires_data(self):
        with pytest.raises(ValueError):
            WeatherVisualizer().create_figure()

    def test_live_field_snapshot(self, tmp_path):
        runner = WeatherRunner(config={'cells': {'count': 8}}, seed=3)
        runner.run(1.0)

        visualizer = WeatherVisualizer(weather_field=runner.field)
        output = tmp_path / "field.png"
        visualizer.save(output)
        visualizer.close()

        assert output.exists()
        assert visualizer.fig is None

    def test_recording_history(self, tmp_path):
        runner = WeatherRunner(config={'cells': {'count': 8}}, seed=3, record=True)
        runner.setup()
        force_storm(runner.field)
        runner.run(1.0)
        recording = tmp_path / "run.json"
        runner.save_recording(recording)

        visualizer = WeatherVisualizer(recording=recording)
        fig = visualizer.create_figure()

        assert set(visualizer.axes) == {'3d', 'summary', 'counts'}
        assert len(visualizer.axes['counts'].lines) >= 2
        visualizer.close()
        assert fig is not None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
