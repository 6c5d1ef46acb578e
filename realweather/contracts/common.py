"""Base classes for Real Weather contracts.

Unit conventions (all contracts):
- **Heights and distances**: meters — suffix ``_m``
- **Speeds**: meters per second — suffix ``_mps``
- **Pressure**: inches of mercury for observations (``_inhg``),
  hPa (``_hpa``) and mmHg (``_mmhg``) for computed values
- **Temperatures**: degrees Celsius — suffix ``_c``
- **Headings/angles**: degrees — suffix ``_deg``
- **Datetimes**: always UTC

Knots, feet and statute miles only appear at the edges (provider payloads
and generated METAR text) and are converted through
``realweather.services.units``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class RealWeatherModel(BaseModel):
    """Base model with JSON-friendly dict conversion.

    - Enums serialize as their values.
    - ``to_dict()`` produces a JSON-safe dict (datetimes as ISO 8601).
    - ``from_dict()`` hydrates from such a dict.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RealWeatherModel":
        """Create model instance from a dict."""
        return cls.model_validate(data)


def kebab_case(name: str) -> str:
    """Alias generator mapping ``field_name`` to ``field-name`` config keys."""
    return name.replace("_", "-")


class ConfigSection(BaseModel):
    """Base model for configuration sections read from TOML."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=kebab_case,
        extra="ignore",
    )
