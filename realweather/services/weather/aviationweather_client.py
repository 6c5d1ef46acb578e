"""NOAA Aviation Weather Center METAR client."""

from __future__ import annotations

import logging
import random
import re
from typing import Any

import httpx

from realweather.contracts.enums import WeatherProvider
from realweather.contracts.weather import Observation
from realweather.errors import ProviderFormatError, TransportError
from realweather.services.units import feet_to_meters, hpa_to_inhg, kt_to_mps, miles_to_meters
from realweather.services.weather.normalize import (
    MALFORMED_ERRORS,
    parse_cloud_layers,
    parse_observed,
    validate_observation,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://aviationweather.gov/api/data/metar"

PROVIDER = WeatherProvider.AVIATIONWEATHER.value

_VISIBILITY_RE = re.compile(r"^(\d+(?:\.\d+)?)\+?$")


class AviationWeatherClient:
    """Async HTTP client for METAR observations."""

    name = PROVIDER

    def __init__(self, http_client: httpx.AsyncClient | None = None, rng: random.Random | None = None):
        self._client = http_client or httpx.AsyncClient(timeout=5.0)
        self._rng = rng or random.Random()

    async def get_observation(self, icao: str) -> Observation:
        """Fetch the most recent METAR for an ICAO code."""
        logger.info("Getting weather from Aviation Weather...")
        try:
            resp = await self._client.get(
                BASE_URL,
                params={"ids": icao.upper(), "format": "json"},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(PROVIDER, f"bad status {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            raise TransportError(PROVIDER, f"request failed: {exc}") from exc

        logger.debug("Got weather data: %s", resp.text)
        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderFormatError(PROVIDER, "response is not JSON") from exc

        if not isinstance(data, list) or not data:
            raise ProviderFormatError(PROVIDER, f"no results for ICAO {icao}")

        try:
            fields = parse_metar(data[0], self._rng)
        except MALFORMED_ERRORS as exc:
            raise ProviderFormatError(PROVIDER, f"malformed METAR entry: {exc!r}") from exc
        fields["icao"] = icao.upper()
        observation = validate_observation(fields, PROVIDER)
        logger.info("Parsed weather")
        return observation


def parse_metar(raw: dict[str, Any], rng: random.Random) -> dict[str, Any]:
    """Map a single METAR JSON entry onto Observation fields."""
    if not isinstance(raw, dict):
        raise ProviderFormatError(PROVIDER, "METAR entry is not an object")

    fields: dict[str, Any] = {
        "temperature_c": raw.get("temp"),
        "dewpoint_c": raw.get("dewp"),
        "observed": parse_observed(raw.get("reportTime") or raw.get("obsTime")),
    }

    wdir = raw.get("wdir")
    if isinstance(wdir, (int, float)):
        fields["wind_direction_deg"] = float(wdir)
    elif wdir is not None:
        # variable winds ("VRB") get a random direction
        logger.info("Converting variable winds to random direction")
        fields["wind_direction_deg"] = float(rng.randrange(36) * 10)

    if raw.get("wspd") is not None:
        fields["wind_speed_mps"] = kt_to_mps(raw["wspd"])
    if raw.get("wgst") is not None:
        fields["wind_gust_mps"] = kt_to_mps(raw["wgst"])

    fields["visibility_m"] = _parse_visibility(raw.get("visib"))

    if raw.get("altim") is not None:
        fields["barometer_inhg"] = hpa_to_inhg(raw["altim"])

    wx = raw.get("wxString")
    if wx:
        fields["conditions"] = wx.split()

    fields["clouds"] = parse_cloud_layers([
        (
            layer.get("cover"),
            feet_to_meters(layer["base"]) if layer.get("base") is not None else None,
        )
        for layer in raw.get("clouds") or []
    ])

    if raw.get("lat") is not None and raw.get("lon") is not None:
        fields["latitude"] = raw["lat"]
        fields["longitude"] = raw["lon"]

    return fields


def _parse_visibility(visib) -> float | None:
    """Convert visibility to meters. NOAA reports statute miles, e.g. ``6.2`` or ``"10+"``."""
    if visib is None:
        return None
    if isinstance(visib, (int, float)):
        return miles_to_meters(visib)
    match = _VISIBILITY_RE.match(str(visib).strip())
    if match is None:
        logger.warning("Failed to parse visibility %r from Aviation Weather", visib)
        return 9000.0
    return miles_to_meters(float(match.group(1)))
