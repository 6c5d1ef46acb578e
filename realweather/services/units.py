"""Unit conversions and atmospheric helpers.

Every ratio is defined once in its forward direction; reverse conversions
divide by the same constant so repeated round trips do not drift.
"""

from __future__ import annotations

import math

KT_TO_MPS = 1852.0 / 3600.0
FEET_TO_METERS = 0.3048
MILES_TO_METERS = 1609.344
INHG_TO_MMHG = 25.4
MMHG_TO_HPA = 1.33322387415
INHG_TO_HPA = INHG_TO_MMHG * MMHG_TO_HPA

# QFE drop per meter of station elevation
HPA_PER_METER = 0.111

_DEG_TO_RAD = math.pi / 180


def kt_to_mps(kt: float) -> float:
    return kt * KT_TO_MPS


def mps_to_kt(mps: float) -> float:
    return mps / KT_TO_MPS


def feet_to_meters(feet: float) -> float:
    return feet * FEET_TO_METERS


def meters_to_feet(meters: float) -> float:
    return meters / FEET_TO_METERS


def miles_to_meters(miles: float) -> float:
    return miles * MILES_TO_METERS


def meters_to_miles(meters: float) -> float:
    return meters / MILES_TO_METERS


def inhg_to_hpa(inhg: float) -> float:
    return inhg * INHG_TO_HPA


def hpa_to_inhg(hpa: float) -> float:
    return hpa / INHG_TO_HPA


def hpa_to_mmhg(hpa: float) -> float:
    return hpa / MMHG_TO_HPA


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 1.8 + 32


def clamp(value, minimum, maximum):
    """Clamp ``value`` into ``[minimum, maximum]``."""
    return max(minimum, min(value, maximum))


def wind_profile(
    target_height_m: float,
    reference_height_m: float,
    reference_speed_mps: float,
    stability: float,
    fixed_reference: bool = False,
) -> float:
    """Extrapolate wind speed to ``target_height_m`` with the power law.

    ``speed = ref_speed * (target / ref) ** stability``

    The target height floors at 0 m and the reference height at 1 m. With
    ``fixed_reference`` the reference height is always 1 m regardless of
    the runway elevation passed in.
    """
    if fixed_reference:
        reference = 1.0
    else:
        reference = _floor(reference_height_m, 1.0)
    target = _floor(target_height_m, 0.0)
    return reference_speed_mps * math.pow(target / reference, stability)


def qnh_to_qff(qnh_hpa: float, elevation_m: float, temperature_c: float, latitude_deg: float) -> float:
    """Reduce a QNH to QFF (both hPa).

    Uses the SMHI method: a temperature-inversion corrected mean
    temperature in one of three linear regimes, then the barometric
    exponential correction for station elevation and latitude.
    """
    qfe = qnh_hpa - HPA_PER_METER * elevation_m

    if temperature_c < -7:
        t = 0.5 * temperature_c + 275
    elif temperature_c < 2:
        t = 0.535 * temperature_c + 275.6
    else:
        t = 1.07 * temperature_c + 274.5

    exponent = elevation_m * 0.034163 * (1 - 0.0026373 * math.cos(latitude_deg * _DEG_TO_RAD)) / t
    return qfe * math.exp(exponent)


def _floor(value: float, minimum: float) -> float:
    if value is None or math.isnan(value):
        return minimum
    return max(minimum, value)
