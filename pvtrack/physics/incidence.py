import numpy as np
from pvlib import irradiance


def _pvlib_azimuth(azimuth):
    # Plant convention (0 = south, west positive) -> pvlib (0 = north, clockwise)
    return np.degrees(azimuth) + 180.0


def cos_incidence_angle(zenith: float, azimuth: float, slope: float, surface_azimuth: float) -> float:
    """
    Cosine of the angle between the sun ray and the surface normal.
    All inputs in radians.
    """
    projection = irradiance.aoi_projection(
        np.degrees(slope), _pvlib_azimuth(surface_azimuth),
        np.degrees(zenith), _pvlib_azimuth(azimuth),
    )
    return float(projection)


def incidence_angle(zenith: float, azimuth: float, slope: float, surface_azimuth: float) -> float:
    """Angle of incidence on the surface [radians]."""
    aoi = irradiance.aoi(
        np.degrees(slope), _pvlib_azimuth(surface_azimuth),
        np.degrees(zenith), _pvlib_azimuth(azimuth),
    )
    return float(np.radians(aoi))
