import unittest

import numpy as np

from pvtrack.core.config import (
    ArrayType,
    AzimuthLimits,
    Bifacial,
    FixedTilt,
    RowGeometry,
    SingleAxis,
    TrackerConfiguration,
    TrackMode,
    TwoAxis,
)
from pvtrack.core.errors import ConfigurationError


class TestArrayType(unittest.TestCase):
    def test_parse_display_names(self):
        for array_type in ArrayType:
            self.assertIs(ArrayType.parse(array_type.value), array_type)

    def test_parse_compact_names(self):
        self.assertIs(ArrayType.parse("FixedTiltedPlane"), ArrayType.FIXED_TILTED_PLANE)
        self.assertIs(ArrayType.parse("SingleAxisElevationTracking(E-W)"),
                      ArrayType.SINGLE_AXIS_ELEVATION_TRACKING)
        self.assertIs(ArrayType.parse("SingleAxisHorizontalTracking(N-S)"),
                      ArrayType.SINGLE_AXIS_HORIZONTAL_TRACKING)
        self.assertIs(ArrayType.parse("AzimuthVerticalAxisTracking"),
                      ArrayType.AZIMUTH_VERTICAL_AXIS_TRACKING)
        self.assertIs(ArrayType.parse("two axis tracking"), ArrayType.TWO_AXIS_TRACKING)

    def test_parse_unknown(self):
        with self.assertRaises(ConfigurationError):
            ArrayType.parse("Floating Plane")
        with self.assertRaises(ConfigurationError):
            ArrayType.parse(None)

    def test_modes(self):
        self.assertIs(ArrayType.UNLIMITED_ROWS.mode, TrackMode.NO_TRACKING)
        self.assertIs(ArrayType.FIXED_TILTED_PLANE.mode, TrackMode.NO_TRACKING)
        self.assertIs(ArrayType.TILT_AND_ROLL_TRACKING.mode, TrackMode.SINGLE_AXIS)
        self.assertIs(ArrayType.AZIMUTH_VERTICAL_AXIS_TRACKING.mode, TrackMode.VERTICAL_AXIS)
        self.assertIs(ArrayType.FIXED_TILTED_PLANE_SEASONAL_ADJUSTMENT.mode,
                      TrackMode.SEASONAL_FIXED_TILT)


class TestTrackerConfiguration(unittest.TestCase):
    def test_params_must_match_mode(self):
        with self.assertRaises(ConfigurationError):
            TrackerConfiguration(ArrayType.TWO_AXIS_TRACKING, FixedTilt(0.3, 0.0))

    def test_flags(self):
        axis = SingleAxis(axis_tilt=0.0, axis_azimuth=0.0, max_tilt=np.radians(60),
                          backtracking=RowGeometry(row_pitch=5.0, array_width=2.0))
        cfg = TrackerConfiguration(ArrayType.SINGLE_AXIS_HORIZONTAL_TRACKING, axis,
                                   Bifacial(ground_clearance=1.5, array_width=2.0))
        self.assertIs(cfg.mode, TrackMode.SINGLE_AXIS)
        self.assertTrue(cfg.use_backtracking)
        self.assertTrue(cfg.use_bifacial)

        two_axis = TwoAxis(0.0, np.pi / 2, AzimuthLimits(0.0, -np.pi, np.pi))
        cfg = TrackerConfiguration(ArrayType.TWO_AXIS_TRACKING, two_axis)
        self.assertFalse(cfg.use_backtracking)
        self.assertFalse(cfg.use_bifacial)

    def test_frozen(self):
        cfg = TrackerConfiguration(ArrayType.FIXED_TILTED_PLANE, FixedTilt(0.3, 0.0))
        with self.assertRaises(AttributeError):
            cfg.params = FixedTilt(0.5, 0.0)


if __name__ == '__main__':
    unittest.main()
