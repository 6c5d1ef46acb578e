"""CLI entry point.

Usage:
    realweather -c config.toml
    realweather --input mission.miz --output realweather.miz --icao KDFW
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import random
from pathlib import Path

import httpx

from realweather import __version__
from realweather.adapters import miz_archive
from realweather.adapters.lua_state import LuaState
from realweather.config import DEFAULT_CONFIG_PATH, load_config
from realweather.contracts.config import Configuration
from realweather.contracts.weather import MissionWeatherParameters, Observation, WindsAloft
from realweather.errors import ArchiveError, ConfigValidationError, DocumentError, ProviderError
from realweather.services.mission_service import MissionUpdater
from realweather.services.weather.metar_generator import generate_metar
from realweather.services.weather.observation_service import (
    ObservationService,
    build_override,
    build_providers,
)
from realweather.services.weather.openmeteo_client import OpenMeteoClient
from realweather.services.weather.selection import WeatherSelector

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
HTTP_TIMEOUT = 5.0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply real-world weather to a DCS mission")
    parser.add_argument("-c", "--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to config.toml")
    parser.add_argument("--input", type=Path, help="Input mission file (overrides config)")
    parser.add_argument("--output", type=Path, help="Output mission file (overrides config)")
    parser.add_argument("--icao", type=str, help="Station to fetch weather for (overrides config)")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def configure_logging(config: Configuration | None, verbose: bool) -> None:
    """Console logging, plus a rotating file when ``[log] file`` is set."""
    if config is None:
        level = logging.DEBUG if verbose else logging.INFO
    else:
        level = logging.DEBUG if verbose else getattr(logging, config.log.level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)

    if config is not None and config.log.file:
        handler = logging.handlers.RotatingFileHandler(
            config.log.file,
            maxBytes=config.log.max_size * 1024 * 1024,
            backupCount=config.log.max_backups,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def apply_overrides(config: Configuration, args: argparse.Namespace) -> Configuration:
    mission = config.realweather.mission
    if args.input is not None:
        mission.input = str(args.input)
    if args.output is not None:
        mission.output = str(args.output)
    if args.icao:
        config.options.weather.icao = args.icao.strip().upper()
    return config


async def fetch_weather(
    config: Configuration,
    http_client: httpx.AsyncClient,
) -> tuple[Observation, str | None, WindsAloft | None]:
    """Fetch the observation and, when enabled, forecast winds aloft."""
    service = ObservationService(
        build_providers(config.api, http_client),
        override=build_override(config.api),
    )
    observation, provider = await service.get_observation(config.options.weather.icao)
    if provider is not None:
        logger.info("Using weather from %s", provider)

    winds_aloft = None
    if config.api.openmeteo.enable and config.options.weather.wind.enable:
        try:
            winds_aloft = await OpenMeteoClient(http_client=http_client).get_winds_aloft(
                observation.latitude, observation.longitude,
            )
        except ProviderError as exc:
            logger.warning("Error getting winds aloft, falling back to wind profile: %s", exc)
    return observation, provider, winds_aloft


async def _fetch_with_client(config: Configuration):
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT) as http:
        return await fetch_weather(config, http)


def run(
    config: Configuration,
    observation: Observation,
    winds_aloft: WindsAloft | None = None,
    rng: random.Random | None = None,
) -> tuple[bool, str]:
    """Update the configured mission. Returns ``(mission_updated, metar)``.

    Raises ``ArchiveError`` when the archive cannot be read or written.
    """
    files = config.realweather.mission
    updater = MissionUpdater(
        config.options,
        LuaState(),
        WeatherSelector(config.options.weather, rng),
    )

    with miz_archive.unpacked(Path(files.input)) as workdir:
        updated = True
        try:
            params = updater.update_mission(workdir / miz_archive.MISSION_ENTRY, observation, winds_aloft)
        except DocumentError as exc:
            logger.error("Error updating mission: %s", exc)
            updated = False
            params = MissionWeatherParameters()

        metar = generate_metar(observation, params, config.metar.remarks)

        if config.metar.add_to_brief:
            dictionary = workdir / miz_archive.DICTIONARY_ENTRY
            if not dictionary.is_file():
                logger.warning("Mission has no dictionary, METAR not added to brief")
            else:
                try:
                    updater.update_brief(dictionary, metar, config.metar.insert_key)
                except DocumentError as exc:
                    logger.error("Error adding METAR to brief: %s", exc)

        miz_archive.pack(workdir, Path(files.output))

    return updated, metar


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(None, args.verbose)
    logger.info("Real Weather %s", __version__)

    try:
        config = apply_overrides(load_config(args.config), args)
    except ConfigValidationError as exc:
        logger.error("%s", exc)
        return 1

    configure_logging(config, args.verbose)

    if not config.realweather.mission.input:
        logger.error("No input mission configured")
        return 1
    if not config.options.weather.icao:
        logger.warning("No ICAO configured, providers will not find a station")

    observation, _, winds_aloft = asyncio.run(_fetch_with_client(config))

    try:
        updated, metar = run(config, observation, winds_aloft)
    except ArchiveError as exc:
        logger.error("Error processing mission archive: %s", exc)
        return 1

    logger.info("METAR: %s", metar)
    return 0 if updated else 1


if __name__ == "__main__":
    raise SystemExit(main())
