"""Tests for present-weather code classification."""

from __future__ import annotations

import pytest

from realweather.contracts.enums import Precipitation
from realweather.services.weather.conditions import (
    classify_precipitation,
    code_groups,
    has_dust,
    has_fog,
)


class TestCodeGroups:
    def test_intensity_and_vicinity_stripped(self):
        assert code_groups("+TSRA") == ["TS", "RA"]
        assert code_groups("-SHRA") == ["SH", "RA"]
        assert code_groups("VCFG") == ["FG"]
        assert code_groups("br") == ["BR"]


class TestClassifyPrecipitation:
    @pytest.mark.parametrize(
        "conditions, expected",
        [
            ([], Precipitation.NONE),
            (["BR"], Precipitation.NONE),
            (["-RA"], Precipitation.SOME),
            (["SN", "BR"], Precipitation.SOME),
            (["+SHRA"], Precipitation.SOME),
            (["TS"], Precipitation.STORM),
            (["+TSRA"], Precipitation.STORM),
        ],
    )
    def test_classification(self, conditions, expected):
        assert classify_precipitation(conditions) == expected

    def test_storm_dominates_regardless_of_order(self):
        assert classify_precipitation(["RA", "TS"]) == Precipitation.STORM
        assert classify_precipitation(["TS", "RA"]) == Precipitation.STORM

    def test_result_is_a_single_class(self):
        result = classify_precipitation(["DZ", "SQ", "GR"])
        assert result in set(Precipitation)
        assert result == Precipitation.STORM


class TestFogAndDust:
    def test_fog(self):
        assert has_fog(["BR"])
        assert has_fog(["-RA", "FG"])
        assert not has_fog(["RA"])

    def test_dust(self):
        assert has_dust(["HZ"])
        assert has_dust(["BLSA"])
        assert not has_dust(["BR", "RA"])
