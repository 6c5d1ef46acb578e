"""Configuration models — validated view of ``config.toml``.

Individual out-of-range values never fail validation: they are clamped or
reset to a safe default and a warning is logged. Only unsatisfiable
settings raise ``ConfigValidationError`` (see ``realweather.config``).
"""

from __future__ import annotations

import logging
from typing import Self

from pydantic import Field, field_validator, model_validator

from realweather.contracts.common import ConfigSection
from realweather.contracts.enums import WeatherProvider
from realweather.services.weather.presets import DECODE_PRESET

logger = logging.getLogger(__name__)


def _ordered_pair(section: str, low: float, high: float) -> tuple[float, float]:
    if low > high:
        logger.warning("%s minimum %s is above maximum %s; swapping", section, low, high)
        return high, low
    return low, high


def _bounded(name: str, value: float, low: float, high: float) -> float:
    if value < low:
        logger.warning("%s is set below min of %s; defaulting to %s", name, low, low)
        return low
    if value > high:
        logger.warning("%s is set above max of %s; defaulting to %s", name, high, high)
        return high
    return value


# --- realweather / log ---


class MissionFilesConfig(ConfigSection):
    input: str = ""
    output: str = "realweather.miz"


class RealWeatherConfig(ConfigSection):
    mission: MissionFilesConfig = Field(default_factory=MissionFilesConfig)


class LogConfig(ConfigSection):
    file: str = ""
    level: str = "info"
    max_size: int = Field(default=50, ge=1, description="MB per log file")
    max_backups: int = Field(default=3, ge=0)

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if value.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            logger.warning("Unknown log level %r; defaulting to info", value)
            return "info"
        return value.lower()


# --- api ---


class ProviderToggle(ConfigSection):
    enable: bool = True


class CheckWXConfig(ConfigSection):
    enable: bool = False
    key: str = ""


class CustomWeatherConfig(ConfigSection):
    enable: bool = False
    file: str = "custom-weather.json"
    override: bool = False


class ApiConfig(ConfigSection):
    provider_priority: list[str] = Field(
        default_factory=lambda: [p.value for p in WeatherProvider]
    )
    aviationweather: ProviderToggle = Field(default_factory=ProviderToggle)
    checkwx: CheckWXConfig = Field(default_factory=CheckWXConfig)
    custom: CustomWeatherConfig = Field(default_factory=CustomWeatherConfig)
    openmeteo: ProviderToggle = Field(default_factory=ProviderToggle)

    @field_validator("provider_priority")
    @classmethod
    def _known_providers(cls, value: list[str]) -> list[str]:
        known = {p.value for p in WeatherProvider}
        ordered: list[str] = []
        for name in value:
            name = name.lower()
            if name not in known:
                logger.warning("Unknown weather provider %r in provider-priority; ignoring", name)
                continue
            if name not in ordered:
                ordered.append(name)
        return ordered

    def enabled_providers(self) -> list[WeatherProvider]:
        """Providers in priority order, skipping disabled ones."""
        flags = {
            WeatherProvider.AVIATIONWEATHER: self.aviationweather.enable,
            WeatherProvider.CHECKWX: self.checkwx.enable,
            WeatherProvider.CUSTOM: self.custom.enable and not self.custom.override,
        }
        return [WeatherProvider(p) for p in self.provider_priority if flags[WeatherProvider(p)]]


# --- options ---


class WindConfig(ConfigSection):
    enable: bool = True
    minimum: float = 0
    maximum: float = 50
    gust_minimum: float = 0
    gust_maximum: float = 50
    stability: float = 0.143
    fixed_reference: bool = False
    direction_minimum: int | None = None
    direction_maximum: int | None = None

    @model_validator(mode="after")
    def _clamp(self) -> Self:
        if self.stability <= 0:
            logger.warning(
                "Stability %0.3f must be greater than 0; defaulting to neutral stability 0.143",
                self.stability,
            )
            self.stability = 0.143
        self.minimum = _bounded("Wind minimum", self.minimum, 0, 50)
        self.maximum = _bounded("Wind maximum", self.maximum, 0, 50)
        self.minimum, self.maximum = _ordered_pair("Wind", self.minimum, self.maximum)
        self.gust_minimum = _bounded("Gust minimum", self.gust_minimum, 0, 50)
        self.gust_maximum = _bounded("Gust maximum", self.gust_maximum, 0, 50)
        self.gust_minimum, self.gust_maximum = _ordered_pair(
            "Gust", self.gust_minimum, self.gust_maximum
        )
        if (self.direction_minimum is None) != (self.direction_maximum is None):
            logger.warning("Wind direction window needs both minimum and maximum; ignoring")
            self.direction_minimum = self.direction_maximum = None
        if self.direction_minimum is not None:
            self.direction_minimum %= 360
            self.direction_maximum %= 360
        return self


class CloudBaseConfig(ConfigSection):
    minimum: int = 0
    maximum: int = 15000

    @model_validator(mode="after")
    def _clamp(self) -> Self:
        self.minimum = int(_bounded("Cloud base minimum", self.minimum, 0, 15000))
        self.maximum = int(_bounded("Cloud base maximum", self.maximum, 0, 15000))
        self.minimum, self.maximum = _ordered_pair("Cloud base", self.minimum, self.maximum)
        return self


class CloudPresetsConfig(ConfigSection):
    default: str = ""
    disallowed: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _known_presets(self) -> Self:
        if self.default and self.default not in DECODE_PRESET:
            logger.warning("Default preset %s is not a valid preset. Using clear instead", self.default)
            self.default = ""
        for name in self.disallowed:
            if name not in DECODE_PRESET:
                logger.warning("Disallowed preset %s is not a known preset", name)
        if self.default and self.default in self.disallowed:
            logger.warning("Default preset %s is also disallowed. Using clear instead", self.default)
            self.default = ""
        return self


class CustomCloudConfig(ConfigSection):
    density_minimum: int = 0
    density_maximum: int = 10
    allow_precipitation: bool = True

    @model_validator(mode="after")
    def _clamp(self) -> Self:
        self.density_minimum = int(_bounded("Custom cloud density minimum", self.density_minimum, 0, 10))
        self.density_maximum = int(_bounded("Custom cloud density maximum", self.density_maximum, 0, 10))
        self.density_minimum, self.density_maximum = _ordered_pair(
            "Custom cloud density", self.density_minimum, self.density_maximum
        )
        return self


class CloudsConfig(ConfigSection):
    enable: bool = True
    fallback_to_legacy: bool = False
    base: CloudBaseConfig = Field(default_factory=CloudBaseConfig)
    presets: CloudPresetsConfig = Field(default_factory=CloudPresetsConfig)
    custom: CustomCloudConfig = Field(default_factory=CustomCloudConfig)


class FogConfig(ConfigSection):
    enable: bool = True
    mode: str = "auto"
    thickness_minimum: int = 0
    thickness_maximum: int = 100
    visibility_minimum: int = 0
    visibility_maximum: int = 6000

    @model_validator(mode="after")
    def _clamp(self) -> Self:
        self.thickness_minimum = int(_bounded("Fog minimum thickness", self.thickness_minimum, 0, 1000))
        self.thickness_maximum = int(_bounded("Fog maximum thickness", self.thickness_maximum, 0, 1000))
        self.thickness_minimum, self.thickness_maximum = _ordered_pair(
            "Fog thickness", self.thickness_minimum, self.thickness_maximum
        )
        self.visibility_minimum = int(_bounded("Fog minimum visibility", self.visibility_minimum, 0, 6000))
        self.visibility_maximum = int(_bounded("Fog maximum visibility", self.visibility_maximum, 0, 6000))
        self.visibility_minimum, self.visibility_maximum = _ordered_pair(
            "Fog visibility", self.visibility_minimum, self.visibility_maximum
        )
        return self


class DustConfig(ConfigSection):
    enable: bool = True
    visibility_minimum: int = 300
    visibility_maximum: int = 3000

    @model_validator(mode="after")
    def _clamp(self) -> Self:
        self.visibility_minimum = int(_bounded("Dust visibility minimum", self.visibility_minimum, 300, 3000))
        self.visibility_maximum = int(_bounded("Dust visibility maximum", self.visibility_maximum, 300, 3000))
        self.visibility_minimum, self.visibility_maximum = _ordered_pair(
            "Dust visibility", self.visibility_minimum, self.visibility_maximum
        )
        return self


class WeatherOptions(ConfigSection):
    enable: bool = True
    icao: str = ""
    runway_elevation: float = 0
    wind: WindConfig = Field(default_factory=WindConfig)
    clouds: CloudsConfig = Field(default_factory=CloudsConfig)
    fog: FogConfig = Field(default_factory=FogConfig)
    dust: DustConfig = Field(default_factory=DustConfig)
    temperature: ProviderToggle = Field(default_factory=ProviderToggle)
    pressure: ProviderToggle = Field(default_factory=ProviderToggle)

    @field_validator("icao")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper()


class TimeOptions(ConfigSection):
    enable: bool = True
    system_time: bool = False
    offset: str = "0"


class DateOptions(ConfigSection):
    enable: bool = True
    system_date: bool = False
    offset: str = "0"


class Options(ConfigSection):
    time: TimeOptions = Field(default_factory=TimeOptions)
    date: DateOptions = Field(default_factory=DateOptions)
    weather: WeatherOptions = Field(default_factory=WeatherOptions)


class MetarConfig(ConfigSection):
    remarks: str = ""
    add_to_brief: bool = True
    insert_key: str = "==Real Weather METAR=="


class Configuration(ConfigSection):
    """Root configuration."""

    realweather: RealWeatherConfig = Field(default_factory=RealWeatherConfig)
    log: LogConfig = Field(default_factory=LogConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    options: Options = Field(default_factory=Options)
    metar: MetarConfig = Field(default_factory=MetarConfig)
