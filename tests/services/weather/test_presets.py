"""Tests for the cloud preset catalog."""

from __future__ import annotations

from realweather.services.weather.presets import CLOUD_PRESETS, DECODE_PRESET, find_preset


class TestCatalog:
    def test_every_preset_decodes(self):
        for presets in CLOUD_PRESETS.values():
            for preset in presets:
                assert preset.name in DECODE_PRESET
                assert preset.min_base_m < preset.max_base_m

    def test_decoded_bases_are_three_digits(self):
        for layers in DECODE_PRESET.values():
            assert layers
            for layer in layers:
                assert len(layer.base_hundreds_ft) == 3
                assert layer.base_hundreds_ft.isdigit()

    def test_rain_families(self):
        assert {"OVC+RA", "BKN+RA", "SCT+RA"} <= set(CLOUD_PRESETS)
        assert "FEW+RA" not in CLOUD_PRESETS


class TestFindPreset:
    def test_known(self):
        preset = find_preset("RainyPreset1")
        assert (preset.min_base_m, preset.max_base_m) == (420, 2940)

    def test_unknown(self):
        assert find_preset("Preset99") is None


class TestBaseRange:
    def test_contains_is_inclusive(self):
        preset = find_preset("Preset1")
        assert preset.contains(840)
        assert preset.contains(4200)
        assert not preset.contains(839)

    def test_overlaps(self):
        preset = find_preset("Preset2")
        assert preset.overlaps(0, 15000)
        assert preset.overlaps(2000, 3000)
        assert not preset.overlaps(0, 1260)
        assert not preset.overlaps(2520, 5000)
