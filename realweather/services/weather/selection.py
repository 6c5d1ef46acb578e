"""Weather selection — map an Observation onto DCS weather parameters.

The cloud decision runs in three stages:

1. Pick the reported layer used as the base: the fullest layer when there
   is precipitation, else the first ceiling (BKN/OVC), else the first layer.
   Its base plus runway elevation is clamped to the configured range.
2. Pick a preset for that layer's coverage (``selected_preset``). The kind
   is tagged ``+RA`` when precipitation is present and a rainy preset
   family exists. Presets whose base range holds the computed base are
   preferred; when none fits the engine either synthesizes custom clouds,
   or relaxes the base match, or falls back to the configured default
   preset, or to clear skies.
3. Custom clouds derive density from the coverage letter and thickness
   from the precipitation class.

Every random choice goes through the injected ``random.Random``.
"""

from __future__ import annotations

import logging
import random

from realweather.contracts.config import WeatherOptions
from realweather.contracts.enums import CLEAR_CODES, COVERAGE_RANK, FogMode, Precipitation
from realweather.contracts.weather import (
    CUSTOM_PREFIX,
    CloudLayer,
    CloudSelection,
    DustParameters,
    FogParameters,
    MissionWeatherParameters,
    Observation,
    WindLayer,
    WindParameters,
    WindsAloft,
)
from realweather.services.units import (
    clamp,
    feet_to_meters,
    hpa_to_mmhg,
    inhg_to_hpa,
    qnh_to_qff,
    wind_profile,
)
from realweather.services.weather.conditions import classify_precipitation, has_dust, has_fog
from realweather.services.weather.presets import CLOUD_PRESETS, DECODE_PRESET, CloudPreset, find_preset

logger = logging.getLogger(__name__)

# Cloud kinds that have a rainy preset family
_RAIN_KINDS = ("OVC", "BKN", "SCT")

_CUSTOM_BASE_RANGE = (300, 5000)

# Sky coverage (density 0-10) per coverage code
_DENSITY_BANDS = {
    "FEW": (1, 3),
    "SCT": (4, 6),
    "BKN": (7, 9),
    "OVC": (10, 10),
    "OVX": (10, 10),
}

_THICKNESS_RANGES = {
    Precipitation.STORM: (1500, 2000),
    Precipitation.SOME: (200, 2000),
    Precipitation.NONE: (200, 2000),
}

ALOFT_HEIGHTS_M = (2000, 8000)


class WeatherSelector:
    """Compute mission weather from an observation and configured clamps."""

    def __init__(self, options: WeatherOptions, rng: random.Random | None = None):
        self._options = options
        self._rng = rng or random.Random()

    # --- full selection ---

    def select(
        self,
        observation: Observation,
        winds_aloft: WindsAloft | None = None,
    ) -> MissionWeatherParameters:
        """Run every enabled selection and collect the results."""
        opts = self._options
        params = MissionWeatherParameters()
        if opts.wind.enable:
            params.wind = self.select_wind(observation, winds_aloft)
        if opts.temperature.enable:
            params.temperature_c = observation.temperature_c
        if opts.pressure.enable:
            params.qnh_hpa, params.pressure_mmhg = self.select_pressure(observation)
        if opts.fog.enable:
            params.fog = self.select_fog(observation)
        if opts.dust.enable:
            params.dust = self.select_dust(observation)
        if opts.clouds.enable:
            params.clouds = self.select_clouds(observation)
        return params

    # --- clouds ---

    def select_clouds(self, observation: Observation) -> CloudSelection:
        """Choose the cloud preset (or custom clouds) for an observation."""
        if not observation.clouds:
            return CloudSelection()

        precip = classify_precipitation(observation.conditions)
        layer = select_base_layer(observation.clouds, precip)

        base_cfg = self._options.clouds.base
        base = int(self._options.runway_elevation + 0.5) + int(layer.base_m)
        base = clamp(base, base_cfg.minimum, base_cfg.maximum)

        preset, base = self.select_preset(layer.cover, base, precip > Precipitation.NONE)
        if preset.startswith(CUSTOM_PREFIX):
            return self.custom_clouds(preset, base, precip)
        return CloudSelection(preset=preset, base_m=base)

    def select_preset(self, kind: str, base: int, precip: bool) -> tuple[str, int]:
        """Select a preset name and base (meters) for a coverage kind.

        Returns ``("", 0)`` for clear skies and ``("CUSTOM <kind>", base)``
        when custom clouds should be synthesized.
        """
        clouds_cfg = self._options.clouds
        if kind in CLEAR_CODES:
            return "", 0

        if precip:
            if kind in _RAIN_KINDS:
                kind = f"{kind}+RA"
            elif clouds_cfg.fallback_to_legacy:
                logger.info("No suitable weather preset for code=%s and base=%d", kind, base)
                logger.info("Fallback to no preset is enabled, using custom weather")
                return CUSTOM_PREFIX + kind[:3], base
            else:
                logger.warning("No suitable preset for %s clouds with precip", kind)
                logger.warning("Fallback to no preset is disabled, so precip will be ignored")

        valid: list[CloudPreset] = []
        valid_ignore_base: list[CloudPreset] = []
        for preset in CLOUD_PRESETS.get(kind, ()):
            if not self._preset_allowed(preset.name):
                continue
            if preset.contains(base):
                valid.append(preset)
            elif preset.overlaps(clouds_cfg.base.minimum, clouds_cfg.base.maximum):
                valid_ignore_base.append(preset)

        if valid:
            return self._rng.choice(valid).name, base

        logger.info("No suitable weather preset for code=%s and base=%d", kind, base)

        if clouds_cfg.fallback_to_legacy:
            logger.info("Fallback to no preset is enabled, using custom weather")
            return CUSTOM_PREFIX + kind[:3], base

        logger.info("Fallback to no preset is disabled. Expanding search to only %s", kind)

        if valid_ignore_base:
            preset = self._rng.choice(valid_ignore_base)
            low = max(preset.min_base_m, clouds_cfg.base.minimum)
            high = min(preset.max_base_m, clouds_cfg.base.maximum)
            return preset.name, self._rng.randint(low, high)

        return self._default_preset(kind)

    def _default_preset(self, kind: str) -> tuple[str, int]:
        clouds_cfg = self._options.clouds
        default = clouds_cfg.presets.default
        if default and self._default_preset_valid(default):
            logger.warning("No allowed presets for %s. Defaulting to %s.", kind, default)
            base_ft = int(DECODE_PRESET[default][0].base_hundreds_ft) * 100
            base = int(feet_to_meters(base_ft) + 0.5)
            base = clamp(base, clouds_cfg.base.minimum, clouds_cfg.base.maximum)
            return default, base

        logger.warning("No allowed presets for %s. Defaulting to CLR.", kind)
        return "", 0

    def _default_preset_valid(self, name: str) -> bool:
        preset = find_preset(name)
        base_cfg = self._options.clouds.base
        return (
            preset is not None
            and self._preset_allowed(name)
            and preset.overlaps(base_cfg.minimum, base_cfg.maximum)
        )

    def _preset_allowed(self, name: str) -> bool:
        return name not in self._options.clouds.presets.disallowed

    def custom_clouds(self, preset: str, base: int, precip: Precipitation) -> CloudSelection:
        """Synthesize a custom cloud layer when no preset fits."""
        clouds_cfg = self._options.clouds
        low = max(_CUSTOM_BASE_RANGE[0], clouds_cfg.base.minimum)
        high = min(_CUSTOM_BASE_RANGE[1], clouds_cfg.base.maximum)
        if low > high:
            low, high = clouds_cfg.base.minimum, clouds_cfg.base.maximum
        base = clamp(base, low, high)

        thickness = self._rng.randint(*_THICKNESS_RANGES[Precipitation(precip)])

        cover = preset[len(CUSTOM_PREFIX):len(CUSTOM_PREFIX) + 3]
        band = _DENSITY_BANDS.get(cover, (0, 0))
        density = self._rng.randint(*band)
        density = clamp(density, clouds_cfg.custom.density_minimum, clouds_cfg.custom.density_maximum)

        if not clouds_cfg.custom.allow_precipitation:
            precip = Precipitation.NONE

        return CloudSelection(
            preset=preset,
            base_m=base,
            thickness_m=thickness,
            density=density,
            precipitation=precip,
        )

    # --- fog / dust ---

    def select_fog(self, observation: Observation) -> FogParameters:
        fog_cfg = self._options.fog
        if not has_fog(observation.conditions):
            return FogParameters(enabled=False)

        mode = resolve_fog_mode(fog_cfg.mode)
        if mode is FogMode.AUTO:
            return FogParameters(enabled=True, mode=mode)

        visibility = self._rng.randint(fog_cfg.visibility_minimum, fog_cfg.visibility_maximum)
        thickness = self._rng.randint(fog_cfg.thickness_minimum, fog_cfg.thickness_maximum)
        return FogParameters(enabled=True, mode=mode, thickness_m=thickness, visibility_m=visibility)

    def select_dust(self, observation: Observation) -> DustParameters:
        dust_cfg = self._options.dust
        if not has_dust(observation.conditions):
            return DustParameters(enabled=False)
        visibility = int(clamp(observation.visibility_m, dust_cfg.visibility_minimum, dust_cfg.visibility_maximum))
        return DustParameters(enabled=True, visibility_m=visibility)

    # --- wind ---

    def select_wind(self, observation: Observation, winds_aloft: WindsAloft | None = None) -> WindParameters:
        """Compute ground and aloft winds in the simulator's "toward" convention.

        Aloft winds come from the forecast when available, otherwise they
        are extrapolated from the ground wind with the power law and their
        directions veer randomly by up to 45 degrees per layer.
        """
        wind_cfg = self._options.wind

        def _speed(value: float) -> float:
            return clamp(value, wind_cfg.minimum, wind_cfg.maximum)

        ground_speed = _speed(observation.wind_speed_mps)
        ground_dir = to_direction(observation.wind_direction_deg)

        if winds_aloft is not None:
            speed_2000 = _speed(winds_aloft.speed_2000_mps)
            speed_8000 = _speed(winds_aloft.speed_8000_mps)
            dir_2000 = to_direction(winds_aloft.direction_2000_deg)
            dir_8000 = to_direction(winds_aloft.direction_8000_deg)
        else:
            speed_2000, speed_8000 = (
                _speed(wind_profile(
                    height,
                    self._options.runway_elevation,
                    observation.wind_speed_mps,
                    wind_cfg.stability,
                    fixed_reference=wind_cfg.fixed_reference,
                ))
                for height in ALOFT_HEIGHTS_M
            )
            dir_2000 = (ground_dir + self._rng.randrange(45)) % 360
            dir_8000 = (dir_2000 + self._rng.randrange(45)) % 360

        if wind_cfg.direction_minimum is not None:
            window = (wind_cfg.direction_minimum, wind_cfg.direction_maximum)
            ground_dir, dir_2000, dir_8000 = (
                clamp_direction(d, *window) for d in (ground_dir, dir_2000, dir_8000)
            )

        gust = clamp(observation.wind_gust_mps, wind_cfg.gust_minimum, wind_cfg.gust_maximum)

        return WindParameters(
            ground=WindLayer(speed_mps=ground_speed, direction_deg=ground_dir),
            at_2000=WindLayer(speed_mps=speed_2000, direction_deg=dir_2000),
            at_8000=WindLayer(speed_mps=speed_8000, direction_deg=dir_8000),
            gust_mps=gust,
        )

    # --- pressure ---

    def select_pressure(self, observation: Observation) -> tuple[float, int]:
        """Return ``(qnh_hpa, qff_mmhg)``; QFF is what DCS expects."""
        qnh = inhg_to_hpa(observation.barometer_inhg)
        qff = qnh_to_qff(qnh, self._options.runway_elevation, observation.temperature_c, observation.latitude)
        return qnh, int(hpa_to_mmhg(qff) + 0.5)


def select_base_layer(clouds: list[CloudLayer], precip: Precipitation) -> CloudLayer:
    """Pick the reported layer whose base drives preset selection."""
    if precip > Precipitation.NONE:
        best = clouds[0]
        best_rank = 0
        for layer in clouds:
            rank = COVERAGE_RANK.get(layer.cover, 0)
            if rank > best_rank:
                best, best_rank = layer, rank
        return best

    for layer in clouds:
        if layer.cover in ("BKN", "OVC"):
            return layer
    return clouds[0]


def resolve_fog_mode(mode: str) -> FogMode:
    try:
        return FogMode(mode.lower())
    except ValueError:
        logger.warning('Unknown fog option "%s": defaulting to auto', mode)
        return FogMode.AUTO


def to_direction(from_deg: float) -> int:
    """Convert a meteorological "from" direction to DCS "toward"."""
    return int(from_deg + 180) % 360


def clamp_direction(direction: int, minimum: int, maximum: int) -> int:
    """Clamp a heading into a window that may wrap through north."""
    if minimum <= maximum:
        if minimum <= direction <= maximum:
            return direction
    elif direction >= minimum or direction <= maximum:
        return direction

    # outside the window: snap to the nearest edge
    def _distance(a: int, b: int) -> int:
        d = abs(a - b) % 360
        return min(d, 360 - d)

    if _distance(direction, minimum) <= _distance(direction, maximum):
        return minimum
    return maximum
