"""Weather models — normalized observations and computed mission weather.

``Observation`` is built once per run from whichever provider succeeds.
``MissionWeatherParameters`` is computed fresh from it and consumed by
both the mission writer and the METAR generator.
"""

from datetime import date, datetime, timezone

from pydantic import ConfigDict, Field, computed_field

from realweather.contracts.common import RealWeatherModel
from realweather.contracts.enums import CloudCover, FogMode, Precipitation
from realweather.services.units import meters_to_miles, mps_to_kt


class CloudLayer(RealWeatherModel):
    """A single reported cloud layer."""

    model_config = ConfigDict(frozen=True)

    cover: CloudCover
    base_m: float = Field(default=0, ge=0, description="Cloud base in meters AGL")


class Observation(RealWeatherModel):
    """Provider-agnostic weather snapshot for one station."""

    model_config = ConfigDict(frozen=True)

    icao: str = Field(..., min_length=3, max_length=4)
    observed: datetime

    barometer_inhg: float = Field(..., gt=0)
    temperature_c: float
    dewpoint_c: float
    visibility_m: float = Field(..., ge=0)

    wind_direction_deg: float = Field(default=0, ge=0, le=360, description="Wind from")
    wind_speed_mps: float = Field(default=0, ge=0)
    wind_gust_mps: float = Field(default=0, ge=0)

    clouds: list[CloudLayer] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)

    longitude: float = Field(default=0, ge=-180, le=180)
    latitude: float = Field(default=0, ge=-90, le=90)

    @computed_field
    @property
    def wind_speed_kt(self) -> float:
        return mps_to_kt(self.wind_speed_mps)

    @computed_field
    @property
    def wind_gust_kt(self) -> float:
        return mps_to_kt(self.wind_gust_mps)

    @computed_field
    @property
    def visibility_miles(self) -> float:
        return meters_to_miles(self.visibility_m)


class WindsAloft(RealWeatherModel):
    """Forecast winds near 2000 m (800 hPa) and 8000 m (400 hPa)."""

    speed_2000_mps: float = Field(..., ge=0)
    direction_2000_deg: int = Field(..., ge=0, le=360, description="Wind from")
    speed_8000_mps: float = Field(..., ge=0)
    direction_8000_deg: int = Field(..., ge=0, le=360, description="Wind from")


class WindLayer(RealWeatherModel):
    """Wind for one simulator layer, direction in the "blows toward" convention."""

    speed_mps: float = Field(..., ge=0)
    direction_deg: int = Field(..., ge=0, lt=360)

    @property
    def from_direction_deg(self) -> int:
        return (self.direction_deg + 180) % 360


class WindParameters(RealWeatherModel):
    ground: WindLayer
    at_2000: WindLayer
    at_8000: WindLayer
    gust_mps: float = Field(..., ge=0, description="Written as ground turbulence")


class FogParameters(RealWeatherModel):
    """Fog selection. Thickness and visibility are ``None`` in auto mode."""

    enabled: bool = False
    mode: FogMode = FogMode.AUTO
    thickness_m: int | None = Field(default=None, ge=0)
    visibility_m: int | None = Field(default=None, ge=0)


class DustParameters(RealWeatherModel):
    enabled: bool = False
    visibility_m: int = Field(default=0, ge=0)


class CloudSelection(RealWeatherModel):
    """Chosen cloud preset, or a synthesized custom layer.

    ``preset`` is ``""`` for clear skies, a catalog name for presets, or
    ``"CUSTOM <cover>"`` when no preset fits and custom clouds are used.
    """

    preset: str = ""
    base_m: int = Field(default=0, ge=0)
    thickness_m: int | None = Field(default=None, ge=0)
    density: int | None = Field(default=None, ge=0, le=10)
    precipitation: Precipitation = Precipitation.NONE

    @property
    def is_clear(self) -> bool:
        return self.preset == ""

    @property
    def is_custom(self) -> bool:
        return self.preset.startswith(CUSTOM_PREFIX)

    @property
    def custom_cover(self) -> str:
        """Coverage code of a custom selection, e.g. ``"OVC"``."""
        return self.preset[len(CUSTOM_PREFIX):len(CUSTOM_PREFIX) + 3]


CUSTOM_PREFIX = "CUSTOM "


class MissionWeatherParameters(RealWeatherModel):
    """Everything computed for one mission update.

    Sections are ``None`` when the matching option is disabled.
    """

    wind: WindParameters | None = None
    temperature_c: float | None = None
    qnh_hpa: float | None = Field(default=None, description="Raw QNH for the METAR")
    pressure_mmhg: int | None = Field(default=None, description="QFF written to the mission")
    fog: FogParameters | None = None
    dust: DustParameters | None = None
    clouds: CloudSelection | None = None
    start_time_s: int | None = Field(default=None, ge=0, lt=86400)
    mission_date: date | None = None


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(tz=timezone.utc)
