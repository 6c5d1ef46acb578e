"""Present-weather code families and precipitation classification."""

from __future__ import annotations

import re
from collections.abc import Iterable

from realweather.contracts.enums import Precipitation

STORM_CODES = ("TS", "SQ", "FC")
PRECIP_CODES = ("RA", "SN", "DZ", "GR", "GS", "IC", "PL", "SG", "UP")
FOG_CODES = ("FG", "BR")
DUST_CODES = ("DU", "SA", "HZ", "FU", "VA", "PO", "DS", "SS")

_GROUP_RE = re.compile(r"[A-Z]{2}")


def code_groups(code: str) -> list[str]:
    """Split a present-weather code into its two-letter groups.

    ``"+TSRA"`` -> ``["TS", "RA"]``; intensity and the vicinity marker are
    dropped.
    """
    code = code.strip().upper().lstrip("+-")
    if code.startswith("VC"):
        code = code[2:]
    return _GROUP_RE.findall(code)


def classify_precipitation(conditions: Iterable[str]) -> Precipitation:
    """Classify condition codes as no, some, or stormy precipitation.

    Storm codes dominate regardless of their position in the list.
    """
    some = False
    for condition in conditions:
        groups = code_groups(condition)
        if groups and groups[0] in STORM_CODES:
            return Precipitation.STORM
        if any(group in PRECIP_CODES for group in groups):
            some = True
    return Precipitation.SOME if some else Precipitation.NONE


def has_fog(conditions: Iterable[str]) -> bool:
    return _has_any(conditions, FOG_CODES)


def has_dust(conditions: Iterable[str]) -> bool:
    return _has_any(conditions, DUST_CODES)


def _has_any(conditions: Iterable[str], family: tuple[str, ...]) -> bool:
    return any(group in family for condition in conditions for group in code_groups(condition))
