"""
Builds a TrackerConfiguration from the settings document.

Every angle in the settings is in degrees and is converted to radians here.
"""
import calendar
import logging
import re
from datetime import datetime
from typing import Tuple

import numpy as np

from pvtrack.core.config import (
    ArrayType,
    AzimuthLimits,
    Bifacial,
    FixedTilt,
    RowGeometry,
    SeasonalTilt,
    SingleAxis,
    TrackerConfiguration,
    TwoAxis,
    VerticalAxis,
)
from pvtrack.core.errors import ConfigurationError, Severity
from pvtrack.core.settings import ParameterProvider

logger = logging.getLogger(__name__)

OS = "O&S"
BIFACIAL = "Bifacial"

# Fixed Tilted Plane keys were renamed in this format version
FIXED_KEYS_VERSION = "0.9.3"


def version_key(version) -> Tuple[int, ...]:
    """'0.9.3' -> (0, 9, 3). Non-numeric suffixes are ignored."""
    parts = []
    for chunk in str(version).split("."):
        digits = re.match(r"\d*", chunk.strip()).group()
        parts.append(int(digits) if digits else 0)
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


class _Reader:
    """Typed access on top of a ParameterProvider."""

    def __init__(self, settings: ParameterProvider):
        self.settings = settings

    def raw(self, section, key, severity=Severity.FATAL, default=None):
        return self.settings.get_scalar(section, key, severity, default)

    def number(self, section, key, severity=Severity.FATAL, default=None) -> float:
        value = self.raw(section, key, severity, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{section}/{key} must be a number, got {value!r}") from None

    def angle(self, section, key) -> float:
        return float(np.radians(self.number(section, key)))

    def flag(self, section, key, default=False) -> bool:
        value = self.raw(section, key, Severity.WARNING, default)
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("true", "1", "yes"):
            return True
        if text in ("false", "0", "no"):
            return False
        raise ConfigurationError(f"{section}/{key} must be true or false, got {value!r}")

    def month(self, section, key) -> int:
        value = self.raw(section, key)
        text = str(value).strip()
        if text.isdigit() and 1 <= int(text) <= 12:
            return int(text)
        for fmt in ("%b", "%B"):
            try:
                return datetime.strptime(text, fmt).month
            except ValueError:
                continue
        raise ConfigurationError(f"{section}/{key} is not a month: {value!r}")

    def day(self, section, key, month: int) -> int:
        value = self.raw(section, key)
        try:
            number = float(str(value).strip())
        except ValueError:
            number = None
        # JSON writers may store 21 as 21.0
        if number is None or not number.is_integer():
            raise ConfigurationError(f"{section}/{key} is not a day number: {value!r}")
        day = int(number)
        # Checked against a leap year so Feb 29 is accepted
        if not 1 <= day <= calendar.monthrange(2000, month)[1]:
            raise ConfigurationError(
                f"{section}/{key}: day {day} does not exist in {calendar.month_abbr[month]}"
            )
        return day


def configure(settings: ParameterProvider) -> TrackerConfiguration:
    """
    Resolves the orientation strategy named by O&S/ArrayType.
    Raises ConfigurationError if the strategy is unknown or a required
    setting is missing.
    """
    reader = _Reader(settings)
    use_bifacial = reader.flag(BIFACIAL, "UseBifacialModel")
    array_type = ArrayType.parse(reader.raw(OS, "ArrayType"))

    builder = _BUILDERS[array_type]
    config = builder(reader, array_type, use_bifacial)
    logger.info("Configured %s tracker (%s)", array_type.value, config.mode.name)
    return config


def _fixed_plane(reader: _Reader, array_type, use_bifacial) -> TrackerConfiguration:
    if version_key(reader.settings.format_version) >= version_key(FIXED_KEYS_VERSION):
        slope_key, azimuth_key = "PlaneTiltFix", "AzimuthFix"
    else:
        slope_key, azimuth_key = "PlaneTilt", "Azimuth"
    params = FixedTilt(reader.angle(OS, slope_key), reader.angle(OS, azimuth_key))
    return TrackerConfiguration(array_type, params, _fixed_bifacial(reader, use_bifacial))


def _unlimited_rows(reader: _Reader, array_type, use_bifacial) -> TrackerConfiguration:
    params = FixedTilt(reader.angle(OS, "PlaneTilt"), reader.angle(OS, "Azimuth"))
    return TrackerConfiguration(array_type, params, _fixed_bifacial(reader, use_bifacial))


def _fixed_bifacial(reader: _Reader, use_bifacial):
    if not use_bifacial:
        return None
    return Bifacial(ground_clearance=reader.number(BIFACIAL, "GroundClearance"))


def _seasonal(reader: _Reader, array_type, use_bifacial) -> TrackerConfiguration:
    summer_month = reader.month(OS, "SummerMonth")
    winter_month = reader.month(OS, "WinterMonth")
    params = SeasonalTilt(
        azimuth=reader.angle(OS, "AzimuthSeasonal"),
        summer_month=summer_month,
        summer_day=reader.day(OS, "SummerDay", summer_month),
        winter_month=winter_month,
        winter_day=reader.day(OS, "WinterDay", winter_month),
        summer_tilt=reader.angle(OS, "PlaneTiltSummer"),
        winter_tilt=reader.angle(OS, "PlaneTiltWinter"),
    )
    return TrackerConfiguration(array_type, params)


def _horizontal_axis(reader: _Reader, array_type, use_bifacial, suffix: str,
                     min_tilt_key, max_tilt_key) -> TrackerConfiguration:
    axis_tilt = reader.angle(OS, f"AxisTilt{suffix}")
    axis_azimuth = reader.angle(OS, f"AxisAzimuth{suffix}")
    if axis_tilt == 0 and not (np.isclose(axis_azimuth, 0.0) or np.isclose(abs(axis_azimuth), np.pi / 2)):
        raise ConfigurationError(
            f"{array_type.value}: a horizontal axis must point N-S (0 deg) or E-W (+/-90 deg), "
            f"got {np.degrees(axis_azimuth):.1f} deg"
        )

    max_tilt = reader.angle(OS, max_tilt_key)
    if min_tilt_key:
        min_tilt = reader.angle(OS, min_tilt_key)
        min_rotation = min_tilt
    else:
        # Symmetric rotation range for trackers that only carry a maximum
        min_tilt = 0.0
        min_rotation = -max_tilt

    backtracking = None
    if reader.flag(OS, f"BacktrackOpt{suffix}"):
        backtracking = _rows(reader, suffix)

    bifacial = None
    if use_bifacial:
        rows = _rows(reader, suffix)
        bifacial = Bifacial(reader.number(BIFACIAL, "GroundClearance"), rows.array_width)

    params = SingleAxis(
        axis_tilt=axis_tilt,
        axis_azimuth=axis_azimuth,
        min_tilt=min_tilt,
        max_tilt=max_tilt,
        # A tilted axis is clamped on rotation instead of tilt
        min_rotation=min_rotation,
        max_rotation=max_tilt,
        backtracking=backtracking,
    )
    return TrackerConfiguration(array_type, params, bifacial)


def _rows(reader: _Reader, suffix: str) -> RowGeometry:
    return RowGeometry(
        row_pitch=reader.number(OS, f"Pitch{suffix}"),
        array_width=reader.number(OS, f"WActive{suffix}"),
    )


def _elevation_tracking(reader, array_type, use_bifacial):
    return _horizontal_axis(reader, array_type, use_bifacial, "SAET", "MinTiltSAET", "MaxTiltSAET")


def _horizontal_tracking(reader, array_type, use_bifacial):
    # N-S trackers only carry a maximum; the rotation limit doubles as max tilt
    return _horizontal_axis(reader, array_type, use_bifacial, "SAST", None, "RotationMaxSAST")


def _tilt_and_roll(reader: _Reader, array_type, use_bifacial) -> TrackerConfiguration:
    params = SingleAxis(
        axis_tilt=reader.angle(OS, "AxisTiltTART"),
        axis_azimuth=reader.angle(OS, "AxisAzimuthTART"),
        min_rotation=reader.angle(OS, "RotationMinTART"),
        max_rotation=reader.angle(OS, "RotationMaxTART"),
    )
    bifacial = None
    if use_bifacial:
        # Older documents have no width; zero keeps the clearance constant
        bifacial = Bifacial(reader.number(BIFACIAL, "GroundClearance"),
                            reader.number(OS, "WActiveTART", Severity.WARNING, 0.0))
    return TrackerConfiguration(array_type, params, bifacial)


def _azimuth_limits(reader: _Reader, suffix: str) -> AzimuthLimits:
    return AzimuthLimits(
        reference=reader.angle(OS, f"AzimuthRef{suffix}"),
        minimum=reader.angle(OS, f"MinAzimuth{suffix}"),
        maximum=reader.angle(OS, f"MaxAzimuth{suffix}"),
    )


def _two_axis(reader: _Reader, array_type, use_bifacial) -> TrackerConfiguration:
    params = TwoAxis(
        min_tilt=reader.angle(OS, "MinTiltTAXT"),
        max_tilt=reader.angle(OS, "MaxTiltTAXT"),
        limits=_azimuth_limits(reader, "TAXT"),
    )
    return TrackerConfiguration(array_type, params)


def _vertical_axis(reader: _Reader, array_type, use_bifacial) -> TrackerConfiguration:
    params = VerticalAxis(
        slope=reader.angle(OS, "PlaneTiltAVAT"),
        limits=_azimuth_limits(reader, "AVAT"),
    )
    return TrackerConfiguration(array_type, params)


_BUILDERS = {
    ArrayType.FIXED_TILTED_PLANE: _fixed_plane,
    ArrayType.FIXED_TILTED_PLANE_SEASONAL_ADJUSTMENT: _seasonal,
    ArrayType.UNLIMITED_ROWS: _unlimited_rows,
    ArrayType.SINGLE_AXIS_ELEVATION_TRACKING: _elevation_tracking,
    ArrayType.SINGLE_AXIS_HORIZONTAL_TRACKING: _horizontal_tracking,
    ArrayType.TILT_AND_ROLL_TRACKING: _tilt_and_roll,
    ArrayType.TWO_AXIS_TRACKING: _two_axis,
    ArrayType.AZIMUTH_VERTICAL_AXIS_TRACKING: _vertical_axis,
}
