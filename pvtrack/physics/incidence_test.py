import unittest

import numpy as np

from pvtrack.physics.incidence import cos_incidence_angle, incidence_angle


class TestIncidence(unittest.TestCase):
    def test_horizontal_surface(self):
        for zenith, azimuth in ((0.2, -1.0), (0.9, 0.0), (1.4, 2.8)):
            self.assertAlmostEqual(incidence_angle(zenith, azimuth, 0.0, 0.0), zenith)

    def test_facing_the_sun(self):
        self.assertAlmostEqual(incidence_angle(0.7, -0.9, 0.7, -0.9), 0.0, places=6)
        self.assertAlmostEqual(cos_incidence_angle(0.7, -0.9, 0.7, -0.9), 1.0)

    def test_cosine(self):
        zenith, azimuth, slope, surface_azimuth = 1.0, 0.6, 0.35, -0.25
        expected = (np.cos(zenith) * np.cos(slope)
                    + np.sin(zenith) * np.sin(slope) * np.cos(azimuth - surface_azimuth))
        self.assertAlmostEqual(cos_incidence_angle(zenith, azimuth, slope, surface_azimuth), expected)

    def test_sun_behind_surface(self):
        # North-facing vertical surface, sun due south
        self.assertLess(cos_incidence_angle(0.8, 0.0, np.pi / 2, np.pi), 0.0)
        self.assertGreater(incidence_angle(0.8, 0.0, np.pi / 2, np.pi), np.pi / 2)


if __name__ == '__main__':
    unittest.main()
