# tests/unit/test_config.py
"""
Unit tests for weather configuration loading and validation.
"""

import pytest
import sys
import os
ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(os.path.join(ROOT, 'src'))

from planet_weather.weather.config import WeatherConfig, load_weather_config


class TestWeatherConfig:
    """Test suite for WeatherConfig"""

    def test_defaults(self):
        config = WeatherConfig()

        assert config.planet.radius == 50.0
        assert config.cells.count is None
        assert config.cells.min_count == 25
        assert config.water_cycle.water_level == 0.5
        assert config.wind.strength_floor == 0.1
        assert config.lightning.flash_duration == 0.3
        assert config.query.influence_radius == 20.0
        assert config.summary.rain_active_count == 5

    def test_partial_dict_keeps_defaults(self):
        config = WeatherConfig.from_dict({
            'planet': {'radius': 80.0},
            'cells': {'count': 12}
        })

        assert config.planet.radius == 80.0
        assert config.cells.count == 12
        assert config.cells.storm_capable_probability == 0.75
        assert config.lightning.storm_threshold == 1.0

    def test_weather_key_unwrapped(self):
        config = WeatherConfig.from_dict({'weather': {'query': {'influence_radius': 10.0}}})
        assert config.query.influence_radius == 10.0

    def test_unknown_keys_ignored(self):
        config = WeatherConfig.from_dict({
            'planet': {'radius': 40.0, 'colour': 'blue'},
            'oceans': {'depth': 3}
        })
        assert config.planet.radius == 40.0

    def test_round_trip_dict(self):
        config = WeatherConfig.from_dict({'wind': {'decay_rate': 0.02}})
        assert WeatherConfig.from_dict(config.to_dict()) == config

    @pytest.mark.parametrize("data", [
        {'planet': {'radius': 0.0}},
        {'planet': {'radius': -5.0}},
        {'cells': {'count': 0}},
        {'cells': {'storm_capable_probability': 1.5}},
        {'lightning': {'storm_strike_probability': -0.1}},
        {'water_cycle': {'evaporation_rate': -1.0}},
        {'wind': {'strength_floor': 0.0}},
        {'wind': {'initial_direction': [1.0, 0.0]}},
        {'query': {'influence_radius': 0.0}},
        {'movement': {'altitude_blend': 1.5}},
        {'movement': {'altitude_blend': -0.1}},
        {'water_cycle': {'rain_onset_moisture': 1.2}},
        {'water_cycle': {'dissipation_moisture': -0.3}},
        {'lightning': {'rain_min_moisture': 2.0}},
    ])
    def test_invalid_values_rejected(self, data):
        with pytest.raises(ValueError):
            WeatherConfig.from_dict(data)


class TestLoadWeatherConfig:
    """Test suite for load_weather_config"""

    def test_no_input_gives_defaults(self):
        assert load_weather_config() == WeatherConfig()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "weather.yaml"
        path.write_text(
            "weather:\n"
            "  planet:\n"
            "    radius: 120.0\n"
            "  summary:\n"
            "    rain_active_count: 8\n"
        )

        config = load_weather_config(config_file=str(path))

        assert config.planet.radius == 120.0
        assert config.summary.rain_active_count == 8

    def test_file_takes_precedence(self, tmp_path):
        path = tmp_path / "weather.yaml"
        path.write_text("planet:\n  radius: 30.0\n")

        config = load_weather_config({'planet': {'radius': 90.0}}, config_file=str(path))
        assert config.planet.radius == 30.0

    def test_shipped_default_file_matches_defaults(self):
        path = os.path.join(ROOT, 'configs', 'weather', 'default_weather.yaml')
        config = load_weather_config(config_file=path)

        assert config.to_dict() == WeatherConfig().to_dict()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
