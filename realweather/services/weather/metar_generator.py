"""Render the weather applied to a mission back into METAR text.

Wind, altimeter and clouds come from the computed mission parameters so the
text matches what the mission will show; station, time, visibility,
temperatures and conditions come from the observation.
"""

from __future__ import annotations

from realweather.contracts.weather import CloudSelection, MissionWeatherParameters, Observation
from realweather.services.units import hpa_to_inhg, meters_to_feet, meters_to_miles, mps_to_kt
from realweather.services.weather.presets import DECODE_PRESET

MAX_VISIBILITY_SM = 10


def generate_metar(
    observation: Observation,
    params: MissionWeatherParameters | None = None,
    remarks: str = "",
) -> str:
    """Format ``observation`` and ``params`` as a single METAR line."""
    params = params or MissionWeatherParameters()
    groups = [
        "METAR:",
        observation.icao,
        observation.observed.strftime("%d%H%MZ"),
        _wind_group(observation, params),
        f"{min(int(meters_to_miles(observation.visibility_m)), MAX_VISIBILITY_SM)}SM",
    ]
    groups.extend(observation.conditions)
    groups.extend(cloud_groups(params.clouds))
    groups.append(f"{_temperature(observation.temperature_c)}/{_temperature(observation.dewpoint_c)}")
    groups.append(_altimeter_group(observation, params))
    groups.append("NOSIG")
    if remarks:
        groups.append(remarks)
    return " ".join(groups)


def cloud_groups(clouds: CloudSelection | None) -> list[str]:
    """Cloud groups for a selection: ``CLR``, a decoded preset, or a custom layer."""
    if clouds is None or clouds.is_clear:
        return ["CLR"]

    base = _hundreds_of_feet(clouds.base_m)
    layers = DECODE_PRESET.get(clouds.preset)
    if layers is None:
        return [f"{clouds.custom_cover}{base:03d}"]

    groups = [f"{layers[0].cover}{base:03d}"]
    groups.extend(f"{layer.cover}{layer.base_hundreds_ft}" for layer in layers[1:])
    return groups


def _wind_group(observation: Observation, params: MissionWeatherParameters) -> str:
    if params.wind is not None:
        direction = params.wind.ground.from_direction_deg
        speed_kt = mps_to_kt(params.wind.ground.speed_mps)
        gust_kt = mps_to_kt(params.wind.gust_mps)
    else:
        direction = int(observation.wind_direction_deg) % 360
        speed_kt = observation.wind_speed_kt
        gust_kt = observation.wind_gust_kt

    speed, gust = round(speed_kt), round(gust_kt)
    if gust > 0:
        return f"{direction:03d}{speed:02d}G{gust:02d}KT"
    return f"{direction:03d}{speed:02d}KT"


def _altimeter_group(observation: Observation, params: MissionWeatherParameters) -> str:
    inhg = observation.barometer_inhg
    if params.qnh_hpa is not None:
        inhg = hpa_to_inhg(params.qnh_hpa)
    return f"A{round(inhg * 100):04d}"


def _temperature(celsius: float) -> str:
    value = round(celsius)
    if value < 0:
        return f"M{-value:02d}"
    return f"{value:02d}"


def _hundreds_of_feet(base_m: float) -> int:
    return int(meters_to_feet(base_m) + 50) // 100
