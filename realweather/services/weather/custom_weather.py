"""Custom weather read from a local JSON file in the CheckWX decoded shape.

Used either as a regular provider or as an override applied on top of a
successfully fetched observation.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from realweather.contracts.enums import WeatherProvider
from realweather.contracts.weather import Observation
from realweather.errors import ProviderFormatError
from realweather.services.weather.checkwx_client import decode_payload
from realweather.services.weather.normalize import apply_override, validate_observation

logger = logging.getLogger(__name__)

PROVIDER = WeatherProvider.CUSTOM.value


class CustomWeatherSource:
    """Observation source backed by a JSON file."""

    name = PROVIDER

    def __init__(self, path: Path):
        self._path = Path(path)

    def read_fields(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ProviderFormatError(PROVIDER, f"unable to read {self._path}: {exc}") from exc
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ProviderFormatError(PROVIDER, f"could not parse {self._path}: {exc}") from exc
        logger.info("Read weather data: %s", json.dumps(payload, separators=(",", ":")))
        return decode_payload(payload, PROVIDER)

    async def get_observation(self, icao: str) -> Observation:
        fields = self.read_fields()
        if not fields.get("icao"):
            fields["icao"] = icao.upper()
        observation = validate_observation(fields, PROVIDER)
        logger.info("Parsed custom weather data")
        return observation

    def override(self, observation: Observation) -> Observation:
        """Replace the fields present in the file, keep everything else."""
        logger.info("Overriding weather with custom data from %s", self._path)
        return apply_override(observation, self.read_fields())
