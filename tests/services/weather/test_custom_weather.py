"""Tests for custom weather files."""

from __future__ import annotations

import json

import pytest

from realweather.errors import ProviderFormatError
from realweather.services.weather.custom_weather import CustomWeatherSource
from realweather.services.weather.normalize import default_observation

CUSTOM_WEATHER = {
    "results": 1,
    "data": [
        {
            "temperature": {"celsius": -10},
            "wind": {"degrees": 45, "speed_mps": 12},
            "clouds": [{"code": "OVC", "meters": 600}],
            "conditions": [{"code": "+SN"}],
        }
    ],
}


def _write(tmp_path, payload) -> CustomWeatherSource:
    path = tmp_path / "custom-weather.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return CustomWeatherSource(path)


class TestCustomWeatherProvider:
    async def test_missing_fields_get_defaults(self, tmp_path):
        obs = await _write(tmp_path, CUSTOM_WEATHER).get_observation("kdfw")
        assert obs.icao == "KDFW"
        assert obs.temperature_c == -10
        assert obs.wind_direction_deg == 45
        assert obs.wind_speed_mps == 12
        assert obs.barometer_inhg == 29.92
        assert obs.clouds[0].base_m == 600
        assert obs.conditions == ["+SN"]

    async def test_missing_file(self, tmp_path):
        source = CustomWeatherSource(tmp_path / "nope.json")
        with pytest.raises(ProviderFormatError, match="unable to read"):
            await source.get_observation("KDFW")

    async def test_invalid_json(self, tmp_path):
        path = tmp_path / "custom-weather.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ProviderFormatError, match="could not parse"):
            await CustomWeatherSource(path).get_observation("KDFW")

    @pytest.mark.parametrize(
        "entry",
        [
            {"temperature": 15},
            {"wind": {"speed_kts": None}},
            {"clouds": [{"code": "BKN", "meters": "1500"}]},
            {"conditions": ["RA"]},
        ],
    )
    async def test_wrong_field_types(self, tmp_path, entry):
        source = _write(tmp_path, {"results": 1, "data": [entry]})
        with pytest.raises(ProviderFormatError, match="malformed data entry"):
            await source.get_observation("KDFW")

    async def test_not_utf8(self, tmp_path):
        path = tmp_path / "custom-weather.json"
        path.write_bytes(b'{"data": [{"icao": "\xff"}]}')
        with pytest.raises(ProviderFormatError, match="unable to read"):
            await CustomWeatherSource(path).get_observation("KDFW")


class TestOverride:
    def test_only_file_fields_replaced(self, tmp_path):
        fetched = default_observation("KDFW")
        merged = _write(tmp_path, CUSTOM_WEATHER).override(fetched)
        assert merged.icao == "KDFW"
        assert merged.temperature_c == -10
        assert merged.wind_speed_mps == 12
        assert merged.barometer_inhg == fetched.barometer_inhg
        assert merged.visibility_m == fetched.visibility_m
        assert merged.dewpoint_c == fetched.dewpoint_c
        assert [c.cover for c in merged.clouds] == ["OVC"]

    def test_wrong_field_types(self, tmp_path):
        source = _write(tmp_path, {"data": [{"wind": {"degrees": 90, "speed_kts": "calm"}}]})
        with pytest.raises(ProviderFormatError):
            source.override(default_observation("KDFW"))
