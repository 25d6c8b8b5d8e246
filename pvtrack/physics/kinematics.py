"""
Closed-form surface orientation for each tracker geometry.

Angles are radians. Azimuths use the plant convention:
0 = true south, negative towards east, positive towards west, +/-pi = north.

References:
    Braun & Mitchell, Solar geometry for fixed and tracking surfaces,
        Solar Energy 31(5), 1983.
    Marion & Dobos, Rotation Angle for the Optimum Tracking of One-Axis
        Trackers, NREL/TP-6A20-58891, 2013.
    Lorenzo, Narvarte & Munoz, Tracking and back-tracking,
        Prog. Photovolt. 19(6), 2011.
"""
import calendar
from dataclasses import dataclass
from datetime import date
from typing import Tuple

import numpy as np

from pvtrack.core.config import AzimuthLimits, RowGeometry, SeasonalTilt, SingleAxis, TwoAxis
from pvtrack.core.errors import GeometryError
from pvtrack.physics.incidence import cos_incidence_angle

HALF_PI = np.pi / 2
AXIS_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Pose:
    slope: float
    azimuth: float
    rotation: float = 0.0
    correction: float = 0.0


def is_horizontal(axis: SingleAxis) -> bool:
    return abs(axis.axis_tilt) < AXIS_TOLERANCE


def is_east_west(axis_azimuth: float) -> bool:
    return abs(abs(axis_azimuth) - HALF_PI) < AXIS_TOLERANCE


def is_north_south(axis_azimuth: float) -> bool:
    return abs(axis_azimuth) < AXIS_TOLERANCE


def backtracking_correction(slope: float, rows: RowGeometry) -> float:
    """
    Slope reduction that keeps the row's shadow within the pitch.
    Zero when the shadow already fits.
    """
    cos_slope = np.cos(slope)
    with np.errstate(divide="ignore"):
        shadow = np.divide(rows.array_width, cos_slope)
    if shadow > rows.row_pitch:
        return float(np.arccos(rows.row_pitch * cos_slope / rows.array_width))
    return 0.0


def horizontal_axis_pose(sun_zenith: float, sun_azimuth: float, axis: SingleAxis) -> Pose:
    east_west = is_east_west(axis.axis_azimuth)
    if east_west:
        # A positive min tilt means the tracker can only face its dominant direction
        if axis.min_tilt <= 0:
            surface_azimuth = np.pi if abs(sun_azimuth) >= abs(axis.axis_azimuth) else 0.0
        else:
            surface_azimuth = axis.axis_azimuth - HALF_PI
    elif is_north_south(axis.axis_azimuth):
        surface_azimuth = HALF_PI if sun_azimuth >= axis.axis_azimuth else -HALF_PI
    else:
        raise GeometryError(
            f"Horizontal axis azimuth {np.degrees(axis.axis_azimuth):.1f} deg is neither N-S nor E-W"
        )

    slope = np.arctan2(np.sin(sun_zenith) * np.cos(surface_azimuth - sun_azimuth), np.cos(sun_zenith))

    correction = 0.0
    if axis.backtracking is not None:
        correction = backtracking_correction(slope, axis.backtracking)
        slope -= correction

    if east_west:
        if axis.min_tilt <= 0:
            # Compared against the signed axis azimuth
            if abs(sun_azimuth) <= axis.axis_azimuth:
                slope = min(axis.max_tilt, slope)
            elif abs(sun_azimuth) > axis.axis_azimuth:
                slope = min(abs(axis.min_tilt), slope)
        else:
            slope = min(slope, axis.max_tilt)
            slope = max(slope, axis.min_tilt)
    else:
        slope = min(axis.max_tilt, slope)

    rotation = slope
    if east_west:
        if surface_azimuth > HALF_PI:
            rotation = -rotation    # north-facing
    else:
        rotation *= np.sign(surface_azimuth)    # east-facing is negative

    return Pose(float(slope), float(surface_azimuth), float(rotation), correction)


def wrap_azimuth(azimuth: float) -> float:
    """Single +/-2pi step back into [-pi, pi]."""
    if azimuth > np.pi:
        azimuth -= 2 * np.pi
    elif azimuth < -np.pi:
        azimuth += 2 * np.pi
    return azimuth


def tilted_axis_pose(sun_zenith: float, sun_azimuth: float, axis: SingleAxis,
                     previous_azimuth: float) -> Pose:
    """
    Tilt and roll tracker (Marion & Dobos). The surface azimuth is undefined
    for a flat surface, in which case previous_azimuth is kept.
    """
    cos_axis_incidence = cos_incidence_angle(sun_zenith, sun_azimuth, axis.axis_tilt, axis.axis_azimuth)
    # Eq. 7
    rotation = np.arctan2(np.sin(sun_zenith) * np.sin(sun_azimuth - axis.axis_azimuth), cos_axis_incidence)
    rotation = min(axis.max_rotation, rotation)
    rotation = max(axis.min_rotation, rotation)

    # Eq. 1
    slope = np.arccos(np.cos(rotation) * np.cos(axis.axis_tilt))

    azimuth = previous_azimuth
    if slope != 0:
        offset = np.arcsin(np.clip(np.sin(rotation) / np.sin(slope), -1.0, 1.0))
        if -np.pi <= rotation < -HALF_PI:
            azimuth = axis.axis_azimuth - offset - np.pi    # Eq. 3
        elif HALF_PI < rotation <= np.pi:
            azimuth = axis.axis_azimuth - offset + np.pi    # Eq. 4
        else:
            azimuth = axis.axis_azimuth + offset            # Eq. 2

    # The paper measures azimuth 0-360 from north
    azimuth = wrap_azimuth(azimuth)
    return Pose(float(slope), float(azimuth), float(rotation))


def _to_reference(azimuth: float, reference: float) -> float:
    if azimuth >= 0:
        return azimuth - reference
    return azimuth + reference


def limited_azimuth(sun_azimuth: float, limits: AzimuthLimits) -> float:
    """
    Follows the sun in azimuth within limits expressed relative to the
    reference azimuth.
    """
    azimuth = _to_reference(sun_azimuth, limits.reference)
    azimuth = max(limits.minimum, azimuth)
    azimuth = min(limits.maximum, azimuth)
    return float(_to_reference(azimuth, limits.reference))


def two_axis_pose(sun_zenith: float, sun_azimuth: float, params: TwoAxis) -> Pose:
    slope = max(params.min_tilt, sun_zenith)
    slope = min(params.max_tilt, slope)
    return Pose(float(slope), limited_azimuth(sun_azimuth, params.limits))


def day_of_year(year: int, month: int, day: int) -> int:
    # Feb 29 boundaries fall back to Feb 28 in common years
    day = min(day, calendar.monthrange(year, month)[1])
    return date(year, month, day).timetuple().tm_yday


def season_boundaries(year: int, params: SeasonalTilt) -> Tuple[int, int]:
    """(summer, winter) day-of-year for the given calendar year."""
    return (day_of_year(year, params.summer_month, params.summer_day),
            day_of_year(year, params.winter_month, params.winter_day))


def seasonal_slope(doy: int, summer_doy: int, winter_doy: int, params: SeasonalTilt) -> float:
    if summer_doy - winter_doy > 0:
        # Winter date comes first in the calendar year
        if winter_doy <= doy < summer_doy:
            return params.winter_tilt
        return params.summer_tilt
    if summer_doy <= doy < winter_doy:
        return params.summer_tilt
    return params.winter_tilt
