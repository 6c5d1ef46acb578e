"""Open-Meteo API client for winds aloft."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx

from realweather.contracts.weather import WindsAloft, utc_now
from realweather.errors import ProviderFormatError, TransportError
from realweather.services.weather.normalize import MALFORMED_ERRORS

logger = logging.getLogger(__name__)

BASE_URL = "https://api.open-meteo.com/v1/forecast"

PROVIDER = "openmeteo"

# 800 hPa sits near 2000 m, 400 hPa near 7200 m
_HOURLY_VARS = [
    "windspeed_800hPa",
    "windspeed_400hPa",
    "winddirection_800hPa",
    "winddirection_400hPa",
]


class OpenMeteoClient:
    """Async HTTP client for the Open-Meteo forecast API."""

    def __init__(self, http_client: httpx.AsyncClient | None = None):
        self._client = http_client or httpx.AsyncClient(timeout=5.0)

    async def get_winds_aloft(
        self,
        latitude: float,
        longitude: float,
        now: datetime | None = None,
    ) -> WindsAloft:
        """Fetch forecast winds aloft for the current UTC hour."""
        logger.info("Getting winds aloft data from Open Meteo...")
        params = {
            "latitude": f"{latitude:.6f}",
            "longitude": f"{longitude:.6f}",
            "hourly": ",".join(_HOURLY_VARS),
            "wind_speed_unit": "ms",
        }
        try:
            resp = await self._client.get(BASE_URL, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(PROVIDER, f"bad status {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            raise TransportError(PROVIDER, f"request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderFormatError(PROVIDER, "response is not JSON") from exc

        try:
            winds = _parse_winds_aloft(data, now or utc_now())
        except MALFORMED_ERRORS as exc:
            raise ProviderFormatError(PROVIDER, f"malformed hourly data: {exc!r}") from exc
        logger.info("Parsed winds aloft data: %s", winds)
        return winds


def _parse_winds_aloft(data: dict, now: datetime) -> WindsAloft:
    """Pick the hourly entry matching ``now`` (first entry if none matches)."""
    hourly = data.get("hourly") if isinstance(data, dict) else None
    if not hourly:
        raise ProviderFormatError(PROVIDER, "response has no hourly data")

    target = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:00")
    times = hourly.get("time") or []
    index = times.index(target) if target in times else 0

    def _at(key: str):
        values = hourly.get(key) or []
        if index >= len(values) or values[index] is None:
            raise ProviderFormatError(PROVIDER, f"missing {key}")
        return values[index]

    return WindsAloft(
        speed_2000_mps=_at("windspeed_800hPa"),
        direction_2000_deg=int(_at("winddirection_800hPa")),
        speed_8000_mps=_at("windspeed_400hPa"),
        direction_8000_deg=int(_at("winddirection_400hPa")),
    )
