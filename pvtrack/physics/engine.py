import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from pvtrack.core.config import (
    FixedTilt,
    SeasonalTilt,
    SingleAxis,
    TrackerConfiguration,
    TrackMode,
    VerticalAxis,
)
from pvtrack.core.errors import GeometryError
from pvtrack.core.resolver import configure
from pvtrack.core.settings import ParameterProvider
from pvtrack.physics import kinematics
from pvtrack.physics.incidence import incidence_angle
from pvtrack.physics.kinematics import Pose

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrientationResult:
    surface_slope: float
    surface_azimuth: float
    rotation_angle: float
    ground_clearance: Optional[float]  # None unless bifacial modeling is on
    backtracking_correction: float
    incidence_angle: float


class OrientationEngine:
    """
    Evaluates the surface orientation of one tracker for a sun position.

    Holds the last surface orientation (fixed planes, vertical axis slope,
    azimuth of a flat tilt-and-roll surface) and the seasonal date cache,
    so every tracker simulated in parallel needs its own instance.
    """

    def __init__(self, config: TrackerConfiguration):
        self.config = config
        self.surface_slope, self.surface_azimuth = self._initial_orientation(config.params)

        # Seasonal boundaries depend on the year (leap years)
        self._season_year: Optional[int] = None
        self._summer_doy = 0
        self._winter_doy = 0

        self._handlers = {
            TrackMode.NO_TRACKING: self._fixed,
            TrackMode.SINGLE_AXIS: self._single_axis,
            TrackMode.VERTICAL_AXIS: self._vertical_axis,
            TrackMode.TWO_AXIS: self._two_axis,
            TrackMode.SEASONAL_FIXED_TILT: self._seasonal,
        }

    @classmethod
    def from_settings(cls, settings: ParameterProvider) -> "OrientationEngine":
        return cls(configure(settings))

    @staticmethod
    def _initial_orientation(params) -> Tuple[float, float]:
        if isinstance(params, FixedTilt):
            return params.slope, params.azimuth
        if isinstance(params, SeasonalTilt):
            # Runs start in the summer position until the first evaluation
            return params.summer_tilt, params.azimuth
        if isinstance(params, VerticalAxis):
            return params.slope, 0.0
        if isinstance(params, SingleAxis):
            return 0.0, params.axis_azimuth
        return 0.0, 0.0

    def evaluate(self, sun_zenith: float, sun_azimuth: float, year: int, day_of_year: int) -> OrientationResult:
        """
        Orientation for one timestep. Sun angles in radians, sun azimuth in
        the plant convention (0 = south, west positive).
        Raises GeometryError for an unknown mode or a negative ground clearance.
        """
        handler = self._handlers.get(self.config.mode)
        if handler is None:
            raise GeometryError("Tracking parameters were incorrectly defined. Please check your settings.")

        pose = handler(sun_zenith, sun_azimuth, year, day_of_year)
        self.surface_slope = pose.slope
        self.surface_azimuth = pose.azimuth

        return OrientationResult(
            surface_slope=pose.slope,
            surface_azimuth=pose.azimuth,
            rotation_angle=pose.rotation,
            ground_clearance=self._ground_clearance(pose),
            backtracking_correction=pose.correction,
            incidence_angle=incidence_angle(sun_zenith, sun_azimuth, pose.slope, pose.azimuth),
        )

    def _fixed(self, sun_zenith, sun_azimuth, year, day_of_year) -> Pose:
        return Pose(self.surface_slope, self.surface_azimuth)

    def _single_axis(self, sun_zenith, sun_azimuth, year, day_of_year) -> Pose:
        axis = self.config.params
        if kinematics.is_horizontal(axis):
            return kinematics.horizontal_axis_pose(sun_zenith, sun_azimuth, axis)
        return kinematics.tilted_axis_pose(sun_zenith, sun_azimuth, axis, self.surface_azimuth)

    def _two_axis(self, sun_zenith, sun_azimuth, year, day_of_year) -> Pose:
        return kinematics.two_axis_pose(sun_zenith, sun_azimuth, self.config.params)

    def _vertical_axis(self, sun_zenith, sun_azimuth, year, day_of_year) -> Pose:
        params = self.config.params
        return Pose(params.slope, kinematics.limited_azimuth(sun_azimuth, params.limits))

    def _seasonal(self, sun_zenith, sun_azimuth, year, day_of_year) -> Pose:
        params = self.config.params
        if year != self._season_year:
            self._summer_doy, self._winter_doy = kinematics.season_boundaries(year, params)
            self._season_year = year
            logger.debug("Seasonal tilt boundaries for %d: summer day %d, winter day %d",
                         year, self._summer_doy, self._winter_doy)

        slope = kinematics.seasonal_slope(day_of_year, self._summer_doy, self._winter_doy, params)
        return Pose(slope, params.azimuth)

    def _ground_clearance(self, pose: Pose) -> Optional[float]:
        bifacial = self.config.bifacial
        if bifacial is None:
            return None
        if self.config.mode is not TrackMode.SINGLE_AXIS:
            return bifacial.ground_clearance

        clearance = bifacial.ground_clearance - (bifacial.array_width * np.sin(pose.slope)) / 2
        if clearance < 0:
            raise GeometryError(
                "Tracker surface ground clearance cannot be negative "
                f"({clearance:.3f} m at slope {np.degrees(pose.slope):.1f} deg). "
                "Check the maximum rotation angle and ground clearance values."
            )
        return float(clearance)
