"""Tests for mapping observations onto mission weather."""

from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from realweather.contracts.config import WeatherOptions
from realweather.contracts.enums import FogMode, Precipitation
from realweather.contracts.weather import CloudLayer, Observation, WindsAloft
from realweather.services.units import kt_to_mps
from realweather.services.weather.presets import CLOUD_PRESETS, find_preset
from realweather.services.weather.selection import (
    WeatherSelector,
    clamp_direction,
    resolve_fog_mode,
    select_base_layer,
    to_direction,
)


def _observation(**overrides) -> Observation:
    data = {
        "icao": "KDFW",
        "observed": datetime(2024, 3, 5, 14, 53, tzinfo=timezone.utc),
        "barometer_inhg": 29.92,
        "temperature_c": 15.0,
        "dewpoint_c": -2.0,
        "visibility_m": 16093.44,
        "wind_direction_deg": 270,
        "wind_speed_mps": kt_to_mps(5),
        "clouds": [CloudLayer(cover="CLR")],
    }
    data.update(overrides)
    return Observation(**data)


def _selector(seed: int = 1, **options) -> WeatherSelector:
    return WeatherSelector(WeatherOptions.model_validate(options), rng=random.Random(seed))


class TestSelectClouds:
    def test_overcast_rain_picks_rainy_preset(self):
        obs = _observation(clouds=[CloudLayer(cover="OVC", base_m=457.2)], conditions=["RA"])
        clouds = _selector().select_clouds(obs)
        assert clouds.preset == "RainyPreset1"
        assert clouds.base_m == 457

    def test_runway_elevation_is_added(self):
        obs = _observation(clouds=[CloudLayer(cover="OVC", base_m=457.2)], conditions=["RA"])
        clouds = _selector(runway_elevation=600).select_clouds(obs)
        assert clouds.base_m == 1057
        assert find_preset(clouds.preset).contains(1057)

    def test_clear_sky(self):
        clouds = _selector().select_clouds(_observation())
        assert clouds.is_clear
        assert clouds.base_m == 0

    def test_no_layers_is_clear(self):
        assert _selector().select_clouds(_observation(clouds=[])).is_clear

    def test_custom_fallback(self):
        obs = _observation(clouds=[CloudLayer(cover="FEW", base_m=300)])
        clouds = _selector(clouds={"fallback_to_legacy": True}).select_clouds(obs)
        assert clouds.preset == "CUSTOM FEW"
        assert clouds.is_custom
        assert clouds.custom_cover == "FEW"
        assert clouds.base_m == 300
        assert 1 <= clouds.density <= 3
        assert 200 <= clouds.thickness_m <= 2000
        assert clouds.precipitation == Precipitation.NONE

    def test_custom_storm_is_thick(self):
        obs = _observation(clouds=[CloudLayer(cover="FEW", base_m=300)], conditions=["+TSRA"])
        clouds = _selector(clouds={"fallback_to_legacy": True}).select_clouds(obs)
        assert clouds.preset == "CUSTOM FEW"
        assert 1500 <= clouds.thickness_m <= 2000
        assert clouds.precipitation == Precipitation.STORM

    def test_custom_precipitation_can_be_suppressed(self):
        obs = _observation(clouds=[CloudLayer(cover="FEW", base_m=300)], conditions=["RA"])
        selector = _selector(clouds={"fallback_to_legacy": True, "custom": {"allow_precipitation": False}})
        assert selector.select_clouds(obs).precipitation == Precipitation.NONE

    def test_custom_density_clamped(self):
        obs = _observation(clouds=[CloudLayer(cover="OVC", base_m=100)])
        selector = _selector(clouds={"fallback_to_legacy": True, "custom": {"density_maximum": 8}})
        clouds = selector.select_clouds(obs)
        assert clouds.preset == "CUSTOM OVC"
        assert clouds.density == 8
        assert clouds.base_m == 300

    def test_relaxed_match_without_fallback(self):
        obs = _observation(clouds=[CloudLayer(cover="FEW", base_m=300)])
        for seed in range(10):
            clouds = _selector(seed).select_clouds(obs)
            assert clouds.preset in ("Preset1", "Preset2")
            assert find_preset(clouds.preset).contains(clouds.base_m)

    def test_disallowed_presets_are_skipped(self):
        obs = _observation(clouds=[CloudLayer(cover="OVC", base_m=1000)], conditions=["RA"])
        for seed in range(10):
            selector = _selector(seed, clouds={"presets": {"disallowed": ["RainyPreset1"]}})
            clouds = selector.select_clouds(obs)
            assert clouds.preset in ("RainyPreset2", "RainyPreset3")
            assert clouds.base_m == 1000

    def test_disallowed_relaxed(self):
        obs = _observation(clouds=[CloudLayer(cover="OVC", base_m=457.2)], conditions=["RA"])
        selector = _selector(clouds={"presets": {"disallowed": ["RainyPreset1"]}})
        clouds = selector.select_clouds(obs)
        assert clouds.preset in ("RainyPreset2", "RainyPreset3", "RainyPreset6")
        assert find_preset(clouds.preset).contains(clouds.base_m)

    def test_default_preset_when_all_disallowed(self):
        obs = _observation(clouds=[CloudLayer(cover="FEW", base_m=1000)])
        selector = _selector(clouds={"presets": {"disallowed": ["Preset1", "Preset2"], "default": "Preset22"}})
        clouds = selector.select_clouds(obs)
        assert clouds.preset == "Preset22"
        # 7000 ft
        assert clouds.base_m == 2134

    def test_clear_when_nothing_allowed(self):
        obs = _observation(clouds=[CloudLayer(cover="FEW", base_m=1000)])
        selector = _selector(clouds={"presets": {"disallowed": ["Preset1", "Preset2"]}})
        assert selector.select_clouds(obs).is_clear

    def test_base_clamped_to_configured_range(self):
        obs = _observation(clouds=[CloudLayer(cover="OVC", base_m=4000)])
        clouds = _selector(clouds={"base": {"maximum": 2000}}).select_clouds(obs)
        assert clouds.base_m <= 2000
        assert find_preset(clouds.preset).contains(clouds.base_m)

    def test_selected_preset_always_fits_its_base(self):
        for kind in ("FEW", "SCT", "BKN", "OVC"):
            for base in (100, 900, 2000, 4500):
                name, chosen = _selector().select_preset(kind, base, False)
                if name:
                    assert find_preset(name).contains(chosen), (kind, base, name, chosen)
                    assert name in {p.name for p in CLOUD_PRESETS[kind]}


class TestSelectBaseLayer:
    def test_precipitation_uses_fullest_layer(self):
        layers = [CloudLayer(cover="FEW", base_m=300), CloudLayer(cover="OVC", base_m=900)]
        assert select_base_layer(layers, Precipitation.SOME).base_m == 900

    def test_first_ceiling_without_precipitation(self):
        layers = [
            CloudLayer(cover="FEW", base_m=300),
            CloudLayer(cover="BKN", base_m=900),
            CloudLayer(cover="OVC", base_m=1500),
        ]
        assert select_base_layer(layers, Precipitation.NONE).base_m == 900

    def test_first_layer_without_ceiling(self):
        layers = [CloudLayer(cover="FEW", base_m=300), CloudLayer(cover="SCT", base_m=900)]
        assert select_base_layer(layers, Precipitation.NONE).base_m == 300


class TestSelectWind:
    def test_ground_direction_flips(self):
        wind = _selector().select_wind(_observation())
        assert wind.ground.direction_deg == 90
        assert wind.ground.from_direction_deg == 270
        assert wind.ground.speed_mps == pytest.approx(2.572, abs=1e-3)

    def test_extrapolated_aloft(self):
        for seed in range(10):
            wind = _selector(seed).select_wind(_observation())
            assert 90 <= wind.at_2000.direction_deg <= 134
            assert wind.at_2000.direction_deg <= wind.at_8000.direction_deg <= wind.at_2000.direction_deg + 44
            assert wind.ground.speed_mps < wind.at_2000.speed_mps < wind.at_8000.speed_mps

    def test_forecast_aloft(self):
        aloft = WindsAloft(speed_2000_mps=12, direction_2000_deg=250, speed_8000_mps=30, direction_8000_deg=260)
        wind = _selector().select_wind(_observation(), aloft)
        assert (wind.at_2000.speed_mps, wind.at_2000.direction_deg) == (12, 70)
        assert (wind.at_8000.speed_mps, wind.at_8000.direction_deg) == (30, 80)

    def test_speed_and_gust_clamped(self):
        obs = _observation(wind_speed_mps=20, wind_gust_mps=25)
        wind = _selector(wind={"maximum": 5, "gust_maximum": 10}).select_wind(obs)
        assert wind.ground.speed_mps == 5
        assert wind.at_2000.speed_mps == 5
        assert wind.gust_mps == 10

    def test_direction_window(self):
        wind = _selector(wind={"direction_minimum": 100, "direction_maximum": 200}).select_wind(_observation())
        for layer in (wind.ground, wind.at_2000, wind.at_8000):
            assert 100 <= layer.direction_deg <= 200


class TestDirections:
    @pytest.mark.parametrize("from_deg, toward", [(0, 180), (90, 270), (270, 90), (360, 180), (180, 0)])
    def test_to_direction(self, from_deg, toward):
        assert to_direction(from_deg) == toward

    def test_clamp_inside(self):
        assert clamp_direction(150, 100, 200) == 150

    def test_clamp_nearest_edge(self):
        assert clamp_direction(90, 100, 200) == 100
        assert clamp_direction(250, 100, 200) == 200

    def test_window_through_north(self):
        assert clamp_direction(10, 330, 30) == 10
        assert clamp_direction(350, 330, 30) == 350
        assert clamp_direction(60, 330, 30) == 30
        assert clamp_direction(300, 330, 30) == 330


class TestSelectPressure:
    def test_standard_at_sea_level(self):
        qnh, qff = _selector().select_pressure(_observation())
        assert qnh == pytest.approx(1013.2, abs=0.1)
        assert qff == 760

    def test_elevated_field_reports_higher_qff(self):
        _, sea_level = _selector().select_pressure(_observation())
        _, elevated = _selector(runway_elevation=1000).select_pressure(_observation())
        assert elevated > sea_level


class TestFogAndDust:
    def test_no_fog_reported(self):
        fog = _selector().select_fog(_observation())
        assert not fog.enabled

    def test_auto_mode(self):
        fog = _selector().select_fog(_observation(conditions=["BR"]))
        assert fog.enabled
        assert fog.mode == FogMode.AUTO
        assert fog.thickness_m is None
        assert fog.visibility_m is None

    @pytest.mark.parametrize("mode", ["manual", "legacy"])
    def test_explicit_modes_pick_values(self, mode):
        options = {"fog": {"mode": mode, "thickness_maximum": 100, "visibility_minimum": 500, "visibility_maximum": 900}}
        fog = _selector(**options).select_fog(_observation(conditions=["FG"]))
        assert fog.mode == FogMode(mode)
        assert 0 <= fog.thickness_m <= 100
        assert 500 <= fog.visibility_m <= 900

    def test_unknown_mode_is_auto(self):
        assert resolve_fog_mode("thick") is FogMode.AUTO
        assert resolve_fog_mode("MANUAL") is FogMode.MANUAL

    def test_dust_visibility_clamped(self):
        assert _selector().select_dust(_observation(conditions=["DU"], visibility_m=100)).visibility_m == 300
        assert _selector().select_dust(_observation(conditions=["HZ"])).visibility_m == 3000

    def test_no_dust(self):
        assert not _selector().select_dust(_observation(conditions=["RA"])).enabled


class TestSelect:
    def test_disabled_sections_are_none(self):
        selector = _selector(wind={"enable": False}, clouds={"enable": False}, fog={"enable": False})
        params = selector.select(_observation())
        assert params.wind is None
        assert params.clouds is None
        assert params.fog is None
        assert params.temperature_c == 15.0
        assert params.pressure_mmhg == 760
        assert params.dust is not None

    def test_all_enabled(self):
        params = _selector().select(_observation(clouds=[CloudLayer(cover="OVC", base_m=457.2)], conditions=["RA"]))
        assert params.clouds.preset == "RainyPreset1"
        assert params.wind.ground.direction_deg == 90
