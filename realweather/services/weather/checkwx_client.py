"""CheckWX decoded METAR client.

The decoded CheckWX shape is also the format of custom weather files, so
the payload mapping here is shared with ``custom_weather``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from realweather.contracts.enums import WeatherProvider
from realweather.contracts.weather import Observation
from realweather.errors import ProviderFormatError, TransportError
from realweather.services.units import kt_to_mps, miles_to_meters
from realweather.services.weather.normalize import (
    MALFORMED_ERRORS,
    parse_cloud_layers,
    parse_observed,
    validate_observation,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://api.checkwx.com/metar"

PROVIDER = WeatherProvider.CHECKWX.value


class CheckWXClient:
    """Async HTTP client for the CheckWX decoded METAR endpoint."""

    name = PROVIDER

    def __init__(self, api_key: str, http_client: httpx.AsyncClient | None = None):
        self._api_key = api_key
        self._client = http_client or httpx.AsyncClient(timeout=5.0)

    async def get_observation(self, icao: str) -> Observation:
        logger.info("Getting weather from CheckWX...")
        try:
            resp = await self._client.get(
                f"{BASE_URL}/{icao.upper()}/decoded",
                headers={"X-API-Key": self._api_key},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(PROVIDER, f"bad status {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            raise TransportError(PROVIDER, f"request failed: {exc}") from exc

        logger.debug("Got weather data: %s", resp.text)
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProviderFormatError(PROVIDER, "response is not JSON") from exc

        observation = validate_observation(decode_payload(payload, PROVIDER), PROVIDER)
        logger.info("Parsed weather")
        return observation


def decode_payload(payload: Any, provider: str) -> dict[str, Any]:
    """Map a decoded ``{"results": n, "data": [...]}`` payload onto Observation fields.

    Raises ``ProviderFormatError`` for any payload that is not in the decoded
    shape, including fields of the wrong JSON type.
    """
    if not isinstance(payload, dict):
        raise ProviderFormatError(provider, "payload is not an object")
    entries = payload.get("data") or []
    if not isinstance(entries, list):
        raise ProviderFormatError(provider, "data is not a list")
    results = payload.get("results", len(entries))
    if not isinstance(results, int) or results < 1 or not entries:
        raise ProviderFormatError(provider, "no data to check")
    entry = entries[0]
    if not isinstance(entry, dict):
        raise ProviderFormatError(provider, "data entry is not an object")
    try:
        return decode_entry(entry)
    except MALFORMED_ERRORS as exc:
        raise ProviderFormatError(provider, f"malformed data entry: {exc!r}") from exc


def decode_entry(entry: dict[str, Any]) -> dict[str, Any]:
    """Map one decoded METAR entry. Absent sections map to ``None``."""
    fields: dict[str, Any] = {
        "icao": (entry.get("icao") or "").upper() or None,
        "observed": parse_observed(entry.get("observed")),
    }

    barometer = entry.get("barometer") or {}
    fields["barometer_inhg"] = barometer.get("hg")

    fields["temperature_c"] = (entry.get("temperature") or {}).get("celsius")
    fields["dewpoint_c"] = (entry.get("dewpoint") or {}).get("celsius")

    visibility = entry.get("visibility") or {}
    if visibility.get("meters_float") is not None:
        fields["visibility_m"] = visibility["meters_float"]
    elif visibility.get("miles_float") is not None:
        fields["visibility_m"] = miles_to_meters(visibility["miles_float"])

    wind = entry.get("wind")
    if wind is not None:
        fields["wind_direction_deg"] = wind.get("degrees", 0)
        if wind.get("speed_mps") is not None:
            fields["wind_speed_mps"] = wind["speed_mps"]
        else:
            fields["wind_speed_mps"] = kt_to_mps(wind.get("speed_kts", 0))
        if wind.get("gust_mps") is not None:
            fields["wind_gust_mps"] = wind["gust_mps"]
        else:
            fields["wind_gust_mps"] = kt_to_mps(wind.get("gust_kts", 0))

    if "clouds" in entry:
        fields["clouds"] = parse_cloud_layers([
            (cloud.get("code"), cloud.get("meters")) for cloud in entry.get("clouds") or []
        ])

    if "conditions" in entry:
        fields["conditions"] = [
            c["code"] for c in entry.get("conditions") or [] if c.get("code")
        ]

    station = entry.get("station") or {}
    coordinates = (station.get("geometry") or {}).get("coordinates")
    if coordinates and len(coordinates) >= 2:
        fields["longitude"], fields["latitude"] = coordinates[0], coordinates[1]

    return fields


def encode_entry(observation: Observation) -> dict[str, Any]:
    """Render an Observation in the decoded shape, metric fields only.

    ``decode_entry(encode_entry(obs))`` reproduces ``obs`` exactly since no
    unit conversion is involved.
    """
    return {
        "icao": observation.icao,
        "observed": observation.observed.isoformat(),
        "barometer": {"hg": observation.barometer_inhg},
        "temperature": {"celsius": observation.temperature_c},
        "dewpoint": {"celsius": observation.dewpoint_c},
        "visibility": {"meters_float": observation.visibility_m},
        "wind": {
            "degrees": observation.wind_direction_deg,
            "speed_mps": observation.wind_speed_mps,
            "gust_mps": observation.wind_gust_mps,
        },
        "clouds": [{"code": c.cover, "meters": c.base_m} for c in observation.clouds],
        "conditions": [{"code": code} for code in observation.conditions],
        "station": {
            "geometry": {
                "coordinates": [observation.longitude, observation.latitude],
                "type": "Point",
            },
        },
    }
