import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

from pvtrack.core.errors import ConfigurationError


class TrackMode(Enum):
    NO_TRACKING = "NOAT"
    SINGLE_AXIS = "SAXT"
    VERTICAL_AXIS = "AVAT"
    TWO_AXIS = "TAXT"
    SEASONAL_FIXED_TILT = "FTSA"


class ArrayType(Enum):
    """
    Orientation strategies as named in the settings document.
    Several strategies share a TrackMode; e.g. Unlimited Rows orients
    like a fixed plane and only differs for row shading downstream.
    """
    FIXED_TILTED_PLANE = "Fixed Tilted Plane"
    FIXED_TILTED_PLANE_SEASONAL_ADJUSTMENT = "Fixed Tilted Plane Seasonal Adjustment"
    UNLIMITED_ROWS = "Unlimited Rows"
    SINGLE_AXIS_ELEVATION_TRACKING = "Single Axis Elevation Tracking (E-W)"
    SINGLE_AXIS_HORIZONTAL_TRACKING = "Single Axis Horizontal Tracking (N-S)"
    TILT_AND_ROLL_TRACKING = "Tilt and Roll Tracking"
    TWO_AXIS_TRACKING = "Two Axis Tracking"
    AZIMUTH_VERTICAL_AXIS_TRACKING = "Azimuth (Vertical Axis) Tracking"

    @property
    def mode(self) -> TrackMode:
        return _ARRAY_MODES[self]

    @classmethod
    def parse(cls, name) -> "ArrayType":
        """
        Looks up a strategy by name, ignoring case, spaces and punctuation,
        so 'SingleAxisElevationTracking(E-W)' matches the display name.
        """
        key = _compact(name)
        for array_type in cls:
            if _compact(array_type.value) == key:
                return array_type
        raise ConfigurationError(f"Unknown orientation and shading type: {name!r}")


def _compact(name) -> str:
    return re.sub(r"[^0-9a-z]", "", str(name).lower())


_ARRAY_MODES = {
    ArrayType.FIXED_TILTED_PLANE: TrackMode.NO_TRACKING,
    ArrayType.FIXED_TILTED_PLANE_SEASONAL_ADJUSTMENT: TrackMode.SEASONAL_FIXED_TILT,
    ArrayType.UNLIMITED_ROWS: TrackMode.NO_TRACKING,
    ArrayType.SINGLE_AXIS_ELEVATION_TRACKING: TrackMode.SINGLE_AXIS,
    ArrayType.SINGLE_AXIS_HORIZONTAL_TRACKING: TrackMode.SINGLE_AXIS,
    ArrayType.TILT_AND_ROLL_TRACKING: TrackMode.SINGLE_AXIS,
    ArrayType.TWO_AXIS_TRACKING: TrackMode.TWO_AXIS,
    ArrayType.AZIMUTH_VERTICAL_AXIS_TRACKING: TrackMode.VERTICAL_AXIS,
}


@dataclass(frozen=True)
class RowGeometry:
    """Row layout needed for backtracking [m]."""
    row_pitch: float
    array_width: float


@dataclass(frozen=True)
class Bifacial:
    # Clearance measured with the surface flat (tilt = 0) [m]
    ground_clearance: float
    array_width: float = 0.0


@dataclass(frozen=True)
class FixedTilt:
    slope: float
    azimuth: float


@dataclass(frozen=True)
class SingleAxis:
    """
    One-axis tracker. A horizontal axis (axis_tilt == 0) uses the tilt
    limits, a tilted axis (tilt and roll) uses the rotation limits.
    """
    axis_tilt: float
    axis_azimuth: float
    min_tilt: float = 0.0
    max_tilt: float = np.pi / 2
    min_rotation: float = -np.pi
    max_rotation: float = np.pi
    backtracking: Optional[RowGeometry] = None


@dataclass(frozen=True)
class AzimuthLimits:
    # Limits are expressed relative to the reference azimuth
    reference: float
    minimum: float
    maximum: float


@dataclass(frozen=True)
class TwoAxis:
    min_tilt: float
    max_tilt: float
    limits: AzimuthLimits


@dataclass(frozen=True)
class VerticalAxis:
    slope: float
    limits: AzimuthLimits


@dataclass(frozen=True)
class SeasonalTilt:
    azimuth: float
    summer_month: int
    summer_day: int
    winter_month: int
    winter_day: int
    summer_tilt: float
    winter_tilt: float


TrackerParams = Union[FixedTilt, SingleAxis, VerticalAxis, TwoAxis, SeasonalTilt]

_MODE_PARAMS = {
    TrackMode.NO_TRACKING: FixedTilt,
    TrackMode.SINGLE_AXIS: SingleAxis,
    TrackMode.VERTICAL_AXIS: VerticalAxis,
    TrackMode.TWO_AXIS: TwoAxis,
    TrackMode.SEASONAL_FIXED_TILT: SeasonalTilt,
}


@dataclass(frozen=True)
class TrackerConfiguration:
    """
    Resolved tracker setup. Angles in radians, lengths in meters.
    Azimuths: 0 = true south, negative = east, positive = west, +/-pi = north.
    """
    array_type: ArrayType
    params: TrackerParams
    bifacial: Optional[Bifacial] = None

    def __post_init__(self):
        expected = _MODE_PARAMS[self.array_type.mode]
        if not isinstance(self.params, expected):
            raise ConfigurationError(
                f"{self.array_type.value} requires {expected.__name__} parameters, "
                f"got {type(self.params).__name__}"
            )

    @property
    def mode(self) -> TrackMode:
        return self.array_type.mode

    @property
    def use_backtracking(self) -> bool:
        return isinstance(self.params, SingleAxis) and self.params.backtracking is not None

    @property
    def use_bifacial(self) -> bool:
        return self.bifacial is not None
