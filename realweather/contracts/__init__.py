"""Real Weather data contracts — Pydantic v2 models.

Inputs
------
- ``Observation`` — one normalized station report, built once per run
  from whichever provider answers first
- ``WindsAloft`` — forecast winds near 2000 m and 8000 m (optional)
- ``Configuration`` — validated ``config.toml``

Computed (never persisted)
--------------------------
- ``MissionWeatherParameters`` — everything written into the mission and
  rendered back as METAR text: ``WindParameters``, ``FogParameters``,
  ``DustParameters``, ``CloudSelection``, start time and date
"""

from realweather.contracts.common import ConfigSection, RealWeatherModel
from realweather.contracts.config import (
    ApiConfig,
    CloudsConfig,
    Configuration,
    DateOptions,
    FogConfig,
    LogConfig,
    MetarConfig,
    Options,
    TimeOptions,
    WeatherOptions,
    WindConfig,
)
from realweather.contracts.enums import (
    CLEAR_CODES,
    CloudCover,
    FogMode,
    Precipitation,
    WeatherProvider,
)
from realweather.contracts.weather import (
    CUSTOM_PREFIX,
    CloudLayer,
    CloudSelection,
    DustParameters,
    FogParameters,
    MissionWeatherParameters,
    Observation,
    WindLayer,
    WindParameters,
    WindsAloft,
)

__all__ = [
    # Base
    "ConfigSection",
    "RealWeatherModel",
    # Enums
    "CLEAR_CODES",
    "CloudCover",
    "FogMode",
    "Precipitation",
    "WeatherProvider",
    # Observations
    "CloudLayer",
    "Observation",
    "WindsAloft",
    # Computed
    "CUSTOM_PREFIX",
    "CloudSelection",
    "DustParameters",
    "FogParameters",
    "MissionWeatherParameters",
    "WindLayer",
    "WindParameters",
    # Configuration
    "ApiConfig",
    "CloudsConfig",
    "Configuration",
    "DateOptions",
    "FogConfig",
    "LogConfig",
    "MetarConfig",
    "Options",
    "TimeOptions",
    "WeatherOptions",
    "WindConfig",
]
