"""Mission mutation — apply computed weather, time and date to a mission.

Every change is a targeted field assignment on the loaded document; nothing
outside the written paths is touched. The document is serialized in memory
first and only then replaces the file on disk, so a failure never leaves a
half-written mission behind.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from realweather.adapters.lua_serializer import dump_global
from realweather.adapters.lua_state import ENCODING, ENCODING_ERRORS, LuaState
from realweather.contracts.config import Options
from realweather.contracts.enums import FogMode, Precipitation
from realweather.contracts.weather import (
    CloudSelection,
    DustParameters,
    FogParameters,
    MissionWeatherParameters,
    Observation,
    WindParameters,
    WindsAloft,
)
from realweather.services.mission_clock import compute_date, compute_start_time, reference_time
from realweather.services.units import celsius_to_fahrenheit, hpa_to_inhg, meters_to_feet, mps_to_kt
from realweather.services.weather.selection import WeatherSelector

logger = logging.getLogger(__name__)

MISSION_GLOBAL = "mission"
DICTIONARY_GLOBAL = "dictionary"
BRIEF_KEY = "DictKey_descriptionText_1"
METAR_HEADER = "==Real Weather METAR=="

# DCS fog2 modes
FOG2_MODE_AUTO = 2
FOG2_MODE_MANUAL = 4

PRESET_CLOUD_THICKNESS = 200


class MissionUpdater:
    """Apply weather, time and date updates to unpacked mission documents.

    The ``LuaState`` is shared between the mission and the dictionary
    document of a run.
    """

    def __init__(self, options: Options, lua: LuaState | None = None, selector: WeatherSelector | None = None):
        self._options = options
        self._lua = lua or LuaState()
        self._selector = selector or WeatherSelector(options.weather)

    def update_mission(
        self,
        path: Path,
        observation: Observation,
        winds_aloft: WindsAloft | None = None,
    ) -> MissionWeatherParameters:
        """Update the mission document at ``path`` in place.

        Returns the parameters that were applied. Raises ``DocumentError``
        subclasses when the document cannot be read, updated or written;
        the file on disk is left untouched in that case.
        """
        logger.info("Loading mission into Lua VM...")
        self._lua.load_document(path, MISSION_GLOBAL)
        logger.info("Loaded mission into Lua VM")
        logger.info("Updating mission...")

        opts = self._options
        params = MissionWeatherParameters()
        if opts.weather.enable:
            params = self._selector.select(observation, winds_aloft)
            self.apply_weather(params)

        if opts.time.enable:
            reference = reference_time(observation.observed, opts.time.system_time)
            seconds, shifted = compute_start_time(reference, opts.time.offset)
            self._lua.assign("mission.start_time", seconds)
            params.start_time_s = seconds
            logger.info("Time:\n\tStart time: %d (%s)", seconds, shifted.strftime("%H:%M:%S"))

        if opts.date.enable:
            reference = reference_time(observation.observed, opts.date.system_date)
            day = compute_date(reference, opts.date.offset)
            self._lua.assign("mission.date.Year", day.year)
            self._lua.assign("mission.date.Month", day.month)
            self._lua.assign("mission.date.Day", day.day)
            params.mission_date = day
            logger.info("Date:\n\tYear: %d\n\tMonth: %d\n\tDay: %d", day.year, day.month, day.day)

        logger.info("Updated mission")
        logger.info("Writing new mission file...")
        self._write_document(path, MISSION_GLOBAL)
        logger.info("Wrote new mission file")
        return params

    def apply_weather(self, params: MissionWeatherParameters) -> None:
        """Assign every computed weather section present in ``params``."""
        if params.wind is not None:
            self._apply_wind(params.wind)
        if params.temperature_c is not None:
            self._lua.assign("mission.weather.season.temperature", round(params.temperature_c, 3))
            logger.info(
                "Temperature: %0.1f C (%0.1f F)",
                params.temperature_c,
                celsius_to_fahrenheit(params.temperature_c),
            )
        if params.pressure_mmhg is not None:
            self._lua.assign("mission.weather.qnh", params.pressure_mmhg)
            logger.info(
                "QNH: %d hPa (%0.2f inHg), QFF written: %d mmHg",
                int(params.qnh_hpa + 0.5),
                hpa_to_inhg(params.qnh_hpa),
                params.pressure_mmhg,
            )
        if params.fog is not None:
            self._apply_fog(params.fog)
        if params.dust is not None:
            self._apply_dust(params.dust)
        if params.clouds is not None:
            self._apply_clouds(params.clouds)

    def _apply_wind(self, wind: WindParameters) -> None:
        layers = (("at8000", wind.at_8000), ("at2000", wind.at_2000), ("atGround", wind.ground))
        for name, layer in layers:
            self._lua.assign(f"mission.weather.wind.{name}.speed", round(layer.speed_mps, 3))
            self._lua.assign(f"mission.weather.wind.{name}.dir", layer.direction_deg)
        self._lua.assign("mission.weather.groundTurbulence", round(wind.gust_mps, 4))

        logger.info(
            "Winds:\n"
            "\tAt 8000 meters (26000 ft): %0.3f m/s (%d kt) from %03d\n"
            "\tAt 2000 meters (6500 ft): %0.3f m/s (%d kt) from %03d\n"
            "\tAt ground: %0.3f m/s (%d kt) from %03d",
            wind.at_8000.speed_mps, round(mps_to_kt(wind.at_8000.speed_mps)), wind.at_8000.from_direction_deg,
            wind.at_2000.speed_mps, round(mps_to_kt(wind.at_2000.speed_mps)), wind.at_2000.from_direction_deg,
            wind.ground.speed_mps, round(mps_to_kt(wind.ground.speed_mps)), wind.ground.from_direction_deg,
        )
        logger.info("Gusts: %0.3f m/s (%d kt)", wind.gust_mps, round(mps_to_kt(wind.gust_mps)))

    def _apply_fog(self, fog: FogParameters) -> None:
        if not fog.enabled:
            self._lua.assign("mission.weather.enable_fog", False)
            self._lua.assign("mission.weather.fog2", None)
            logger.info("Fog: disabled")
            return

        mode = FogMode(fog.mode)
        if mode is FogMode.LEGACY:
            self._lua.assign("mission.weather.enable_fog", True)
            self._lua.assign("mission.weather.fog.thickness", fog.thickness_m)
            self._lua.assign("mission.weather.fog.visibility", fog.visibility_m)
            self._lua.assign("mission.weather.fog2", None)
        elif mode is FogMode.MANUAL:
            self._lua.assign("mission.weather.enable_fog", False)
            self._lua.assign("mission.weather.fog2", {
                "mode": FOG2_MODE_MANUAL,
                "manual": {
                    1: {"thickness": fog.thickness_m, "time": 0, "visibility": fog.visibility_m},
                },
            })
        else:
            self._lua.assign("mission.weather.enable_fog", False)
            self._lua.assign("mission.weather.fog2", {"mode": FOG2_MODE_AUTO})

        if mode is FogMode.AUTO:
            logger.info("Fog:\n\tEnabled: true\n\tMode:    auto")
        else:
            logger.info(
                "Fog:\n\tThickness:  %d meters (%d feet)\n\tVisibility: %d meters (%d feet)\n"
                "\tEnabled: true\n\tMode:    %s",
                fog.thickness_m, int(meters_to_feet(fog.thickness_m)),
                fog.visibility_m, int(meters_to_feet(fog.visibility_m)),
                mode.value,
            )

    def _apply_dust(self, dust: DustParameters) -> None:
        if dust.enabled:
            self._lua.assign("mission.weather.dust_density", dust.visibility_m)
        self._lua.assign("mission.weather.enable_dust", dust.enabled)
        logger.info(
            "Dust:\n\tVisibility: %d meters (%d feet)\n\tEnabled: %s",
            dust.visibility_m, int(meters_to_feet(dust.visibility_m)), dust.enabled,
        )

    def _apply_clouds(self, clouds: CloudSelection) -> None:
        if clouds.is_custom:
            fields = {
                "thickness": clouds.thickness_m,
                "density": clouds.density,
                "preset": None,
                "base": clouds.base_m,
                "iprecptns": int(clouds.precipitation),
            }
        else:
            fields = {
                "thickness": PRESET_CLOUD_THICKNESS,
                "density": 0,
                "preset": clouds.preset or None,
                "base": clouds.base_m,
                "iprecptns": 0,
            }
        for key, value in fields.items():
            self._lua.assign(f"mission.weather.clouds.{key}", value)

        if clouds.is_custom:
            logger.info(
                "Clouds:\n\tPreset: %s\n\tBase:      %4d meters (%5d feet)\n"
                "\tThickness: %4d meters (%5d feet)\n\tDensity: %d\n\tPrecipitation: %s",
                clouds.preset,
                clouds.base_m, int(meters_to_feet(clouds.base_m)),
                clouds.thickness_m, int(meters_to_feet(clouds.thickness_m)),
                clouds.density,
                Precipitation(clouds.precipitation).name.lower(),
            )
        else:
            logger.info(
                "Clouds:\n\tPreset: %s\n\tBase: %d meters (%d feet)",
                clouds.preset or "clear",
                clouds.base_m, int(meters_to_feet(clouds.base_m)),
            )

    # --- brief ---

    def update_brief(self, path: Path, metar: str, insert_key: str) -> str:
        """Insert or replace the METAR block in the mission description.

        Returns the new description text.
        """
        logger.info("Loading mission brief into Lua VM...")
        dictionary = self._lua.load_document(path, DICTIONARY_GLOBAL)
        logger.info("Parsing mission brief for METAR insertion location...")

        brief = insert_metar(dictionary.get(BRIEF_KEY), metar, insert_key)

        logger.info("Adding METAR to mission brief...")
        self._lua.assign(f"{DICTIONARY_GLOBAL}.{BRIEF_KEY}", brief)
        self._write_document(path, DICTIONARY_GLOBAL)
        logger.info("Added METAR to mission brief")
        return brief

    def _write_document(self, path: Path, name: str) -> None:
        path = Path(path)
        text = dump_global(name, self._lua.get_global(name))
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_bytes(text.encode(ENCODING, ENCODING_ERRORS))
        os.replace(tmp, path)


def insert_metar(brief: object, metar: str, insert_key: str) -> str:
    """Place ``metar`` in ``brief`` under the METAR header.

    The line following ``insert_key`` is replaced when present, otherwise
    the block is appended after a blank line. A missing or non-text brief
    is replaced by the METAR alone.
    """
    if not isinstance(brief, str):
        logger.info("Unable to parse existing brief, new brief will be written")
        return metar

    block = f"{METAR_HEADER}\n{metar}\n"
    if insert_key:
        pattern = re.compile(re.escape(insert_key) + r"\n(.*)\n")
        if pattern.search(brief):
            return pattern.sub(lambda _: block, brief)

    logger.info("METAR will be appended to brief")
    return f"{brief}\n\n{block}"
