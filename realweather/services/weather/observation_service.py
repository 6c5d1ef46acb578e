"""Provider fallback orchestration.

Providers are tried strictly in priority order; the first valid
observation wins. Every failure is logged and the next provider is tried.
When all of them fail the built-in default observation is used.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import httpx

from realweather.contracts.config import ApiConfig
from realweather.contracts.enums import WeatherProvider
from realweather.contracts.weather import Observation
from realweather.errors import ProviderError
from realweather.services.weather.aviationweather_client import AviationWeatherClient
from realweather.services.weather.checkwx_client import CheckWXClient
from realweather.services.weather.custom_weather import CustomWeatherSource
from realweather.services.weather.normalize import default_observation

logger = logging.getLogger(__name__)


class ObservationProvider(Protocol):
    name: str

    async def get_observation(self, icao: str) -> Observation: ...


class ObservationService:
    """Fetch one observation from a prioritized list of providers."""

    def __init__(
        self,
        providers: list[ObservationProvider],
        override: CustomWeatherSource | None = None,
    ):
        self._providers = providers
        self._override = override

    async def get_observation(self, icao: str) -> tuple[Observation, str | None]:
        """Return the observation and the name of the provider that supplied it.

        The provider name is ``None`` when the default observation was used.
        """
        for provider in self._providers:
            try:
                observation = await provider.get_observation(icao)
            except ProviderError as exc:
                logger.warning("Error getting weather from %s, trying next provider: %s", provider.name, exc)
                continue

            if self._override is not None:
                try:
                    observation = self._override.override(observation)
                except ProviderError as exc:
                    logger.error("Could not apply custom weather override, no overrides applied: %s", exc)
            return observation, provider.name

        logger.error("All weather providers failed, using default weather")
        return default_observation(icao), None


def build_providers(api: ApiConfig, http_client: httpx.AsyncClient) -> list[ObservationProvider]:
    """Instantiate the enabled providers in configured priority order."""
    providers: list[ObservationProvider] = []
    for provider in api.enabled_providers():
        if provider is WeatherProvider.AVIATIONWEATHER:
            providers.append(AviationWeatherClient(http_client=http_client))
        elif provider is WeatherProvider.CHECKWX:
            if not api.checkwx.key:
                logger.warning("CheckWX is enabled but no API key is configured; skipping")
                continue
            providers.append(CheckWXClient(api.checkwx.key, http_client=http_client))
        elif provider is WeatherProvider.CUSTOM:
            providers.append(CustomWeatherSource(Path(api.custom.file)))
    return providers


def build_override(api: ApiConfig) -> CustomWeatherSource | None:
    if api.custom.enable and api.custom.override:
        return CustomWeatherSource(Path(api.custom.file))
    return None
