"""Observation normalization — defaults, overrides and the fallback observation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from realweather.contracts.enums import CLEAR_CODES, CloudCover
from realweather.contracts.weather import CloudLayer, Observation, utc_now
from realweather.errors import ProviderFormatError

logger = logging.getLogger(__name__)

# Wrong JSON types in a payload surface as one of these while mapping it
MALFORMED_ERRORS = (TypeError, AttributeError, KeyError, ValueError)

# Defaults applied to fields a provider could not supply
OBSERVATION_DEFAULTS: dict[str, Any] = {
    "barometer_inhg": 29.92,
    "temperature_c": 15.0,
    "dewpoint_c": 0.0,
    "visibility_m": 9000.0,
    "wind_direction_deg": 0.0,
    "wind_speed_mps": 0.0,
    "wind_gust_mps": 0.0,
    "longitude": 0.0,
    "latitude": 0.0,
}

_DEFAULT_DESCRIPTIONS = {
    "barometer_inhg": "No barometer data, defaulting to 29.92 inHg",
    "temperature_c": "No temperature data, defaulting to 15 Celsius",
    "dewpoint_c": "No dewpoint data, defaulting to 0 Celsius",
    "visibility_m": "No visibility data, defaulting to 9000 meters",
    "wind_speed_mps": "No wind data, defaulting to calm",
    "longitude": "No station location, defaulting to 0, 0",
}


def validate_observation(fields: dict[str, Any], provider: str) -> Observation:
    """Fill conservative defaults for missing fields and build an Observation.

    Raises ``ProviderFormatError`` when the remaining data still does not
    form a valid observation.
    """
    data = {key: value for key, value in fields.items() if value is not None}

    for key, default in OBSERVATION_DEFAULTS.items():
        if key not in data:
            if key in _DEFAULT_DESCRIPTIONS:
                logger.warning(_DEFAULT_DESCRIPTIONS[key])
            data[key] = default

    if "observed" not in data:
        logger.warning("No observation time, defaulting to now")
        data["observed"] = utc_now()

    if not data.get("icao"):
        raise ProviderFormatError(provider, "observation has no station identifier")

    try:
        return Observation.model_validate(data)
    except ValidationError as exc:
        raise ProviderFormatError(provider, f"invalid observation: {exc}") from exc


def parse_cloud_layers(layers: list[tuple[str | None, float | None]]) -> list[CloudLayer]:
    """Build cloud layers from ``(cover, base_m)`` pairs.

    Clear-sky covers keep a zero base; layers without a cover or a base,
    or with an unknown cover code, are skipped.
    """
    clouds: list[CloudLayer] = []
    for cover, base_m in layers:
        if cover is None:
            continue
        try:
            code = CloudCover(cover.upper())
        except ValueError:
            logger.warning("Skipping cloud layer with unsupported cover %r", cover)
            continue
        if code.value in CLEAR_CODES:
            clouds.append(CloudLayer(cover=code, base_m=0))
        elif base_m is not None:
            clouds.append(CloudLayer(cover=code, base_m=max(0.0, base_m)))
    return clouds


def parse_observed(value: str | None) -> datetime | None:
    """Parse a provider timestamp as UTC.

    Accepts ISO 8601 (with or without ``Z``) and ``YYYY-MM-DD HH:MM:SS``.
    """
    if not value:
        return None
    try:
        observed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Could not parse observation time %r", value)
        return None
    if observed.tzinfo is None:
        observed = observed.replace(tzinfo=timezone.utc)
    return observed.astimezone(timezone.utc)


def default_observation(icao: str = "DGAA") -> Observation:
    """Built-in observation used when every provider fails."""
    return Observation(
        icao=icao or "DGAA",
        observed=utc_now(),
        barometer_inhg=29.92,
        temperature_c=15.0,
        dewpoint_c=10.0,
        visibility_m=16093.44,
        wind_direction_deg=270,
        wind_speed_mps=1.25,
        wind_gust_mps=3.0,
        clouds=[CloudLayer(cover=CloudCover.CLR)],
    )


def apply_override(observation: Observation, fields: dict[str, Any]) -> Observation:
    """Replace only the fields present in ``fields``.

    Raises ``ProviderFormatError`` when the merged observation is invalid.
    """
    present = {key: value for key, value in fields.items() if value is not None}
    if not present:
        return observation
    merged = observation.model_dump(exclude={"wind_speed_kt", "wind_gust_kt", "visibility_miles"})
    merged.update(present)
    try:
        return Observation.model_validate(merged)
    except ValidationError as exc:
        raise ProviderFormatError("custom", f"invalid override: {exc}") from exc
