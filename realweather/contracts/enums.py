"""Enumerations shared across all Real Weather contracts."""

from enum import Enum, IntEnum


class CloudCover(str, Enum):
    """METAR cloud amount, including the clear-sky variants."""
    FEW = "FEW"
    SCT = "SCT"
    BKN = "BKN"
    OVC = "OVC"
    OVX = "OVX"
    CLR = "CLR"
    SKC = "SKC"
    NSC = "NSC"
    NCD = "NCD"
    CAVOK = "CAVOK"


CLEAR_CODES = frozenset({"CAVOK", "CLR", "SKC", "NSC", "NCD"})

# Higher rank = more sky covered
COVERAGE_RANK = {"FEW": 1, "SCT": 2, "BKN": 3, "OVC": 4, "OVX": 4}


class Precipitation(IntEnum):
    """Precipitation class. Values match the simulator's ``iprecptns`` field."""
    NONE = 0
    SOME = 1
    STORM = 2


class FogMode(str, Enum):
    LEGACY = "legacy"
    MANUAL = "manual"
    AUTO = "auto"


class WeatherProvider(str, Enum):
    AVIATIONWEATHER = "aviationweather"
    CHECKWX = "checkwx"
    CUSTOM = "custom"
