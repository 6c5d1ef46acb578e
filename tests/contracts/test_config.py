"""Tests for configuration models: aliases, clamping and provider order."""

from __future__ import annotations

from realweather.contracts.config import (
    ApiConfig,
    CloudPresetsConfig,
    Configuration,
    DustConfig,
    FogConfig,
    LogConfig,
    WindConfig,
)
from realweather.contracts.enums import WeatherProvider


class TestAliases:
    def test_kebab_case_keys(self):
        config = Configuration.model_validate({
            "realweather": {"mission": {"input": "in.miz", "output": "out.miz"}},
            "options": {
                "time": {"system-time": True, "offset": "-2h"},
                "weather": {
                    "icao": " kdfw ",
                    "runway-elevation": 180,
                    "clouds": {"fallback-to-legacy": True, "base": {"minimum": 100}},
                },
            },
            "metar": {"add-to-brief": False, "insert-key": "WX"},
        })
        assert config.realweather.mission.input == "in.miz"
        assert config.options.time.system_time is True
        assert config.options.time.offset == "-2h"
        assert config.options.weather.icao == "KDFW"
        assert config.options.weather.runway_elevation == 180
        assert config.options.weather.clouds.fallback_to_legacy is True
        assert config.options.weather.clouds.base.minimum == 100
        assert config.metar.add_to_brief is False
        assert config.metar.insert_key == "WX"

    def test_unknown_keys_ignored(self):
        config = Configuration.model_validate({"options": {"weather": {"legacy-flag": 1}}})
        assert config.options.weather.enable is True


class TestClamping:
    def test_wind_swapped_and_bounded(self):
        wind = WindConfig.model_validate({"minimum": 60, "maximum": 10, "gust-minimum": -5})
        assert (wind.minimum, wind.maximum) == (10, 50)
        assert wind.gust_minimum == 0

    def test_stability_must_be_positive(self):
        assert WindConfig(stability=0).stability == 0.143

    def test_direction_window_needs_both_ends(self):
        wind = WindConfig.model_validate({"direction-minimum": 90})
        assert wind.direction_minimum is None
        wind = WindConfig.model_validate({"direction-minimum": 450, "direction-maximum": -30})
        assert (wind.direction_minimum, wind.direction_maximum) == (90, 330)

    def test_fog_ranges(self):
        fog = FogConfig.model_validate({"thickness-maximum": 5000, "visibility-minimum": 7000, "visibility-maximum": 100})
        assert fog.thickness_maximum == 1000
        assert (fog.visibility_minimum, fog.visibility_maximum) == (100, 6000)

    def test_dust_floor(self):
        dust = DustConfig.model_validate({"visibility-minimum": 0, "visibility-maximum": 9000})
        assert (dust.visibility_minimum, dust.visibility_maximum) == (300, 3000)

    def test_log_level(self):
        assert LogConfig(level="DEBUG").level == "debug"
        assert LogConfig(level="chatty").level == "info"


class TestPresets:
    def test_unknown_default_is_cleared(self):
        assert CloudPresetsConfig(default="Preset99").default == ""

    def test_disallowed_default_is_cleared(self):
        presets = CloudPresetsConfig(default="Preset22", disallowed=["Preset22"])
        assert presets.default == ""

    def test_valid_default_kept(self):
        assert CloudPresetsConfig(default="RainyPreset2").default == "RainyPreset2"


class TestApiConfig:
    def test_priority_deduplicated_and_filtered(self):
        api = ApiConfig.model_validate({"provider-priority": ["CheckWX", "bogus", "checkwx", "aviationweather"]})
        assert api.provider_priority == ["checkwx", "aviationweather"]

    def test_enabled_providers_default(self):
        assert ApiConfig().enabled_providers() == [WeatherProvider.AVIATIONWEATHER]

    def test_custom_override_is_not_a_provider(self):
        api = ApiConfig.model_validate({"custom": {"enable": True, "override": True}})
        assert WeatherProvider.CUSTOM not in api.enabled_providers()
        api = ApiConfig.model_validate({"custom": {"enable": True}})
        assert WeatherProvider.CUSTOM in api.enabled_providers()
