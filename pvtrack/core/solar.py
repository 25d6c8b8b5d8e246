import numpy as np
import pandas as pd
from dataclasses import dataclass
from datetime import datetime
from pvlib.location import Location

from pvtrack.core.errors import Severity
from pvtrack.core.settings import ParameterProvider


@dataclass
class SunPosition:
    zenith: float   # Radians from vertical
    azimuth: float  # Radians, 0 = South, East negative, West positive


def to_plant_azimuth(azimuth_deg):
    """pvlib azimuth (degrees, North=0, clockwise) -> plant convention in radians."""
    return np.radians(azimuth_deg - 180.0)


class SolarCalculator:
    """
    Sun position for the plant site using pvlib, expressed in the angles
    the orientation engine expects.
    """
    def __init__(self, lat: float, lon: float, tz: str = 'UTC', altitude: float = 0.0, name: str = None):
        self.loc = Location(lat, lon, tz=tz, altitude=altitude, name=name)

    @classmethod
    def from_settings(cls, settings: ParameterProvider) -> "SolarCalculator":
        return cls(
            lat=float(settings.get_scalar("Site", "Latitude")),
            lon=float(settings.get_scalar("Site", "Longitude")),
            tz=settings.get_scalar("Site", "TimeZone", Severity.WARNING, "UTC"),
            altitude=float(settings.get_scalar("Site", "Altitude", Severity.WARNING, 0.0)),
        )

    def _localize(self, ts):
        if ts.tz is None:
            return ts.tz_localize(self.loc.tz)
        return ts.tz_convert(self.loc.tz)

    def get_position(self, dt: datetime | pd.DatetimeIndex) -> SunPosition | pd.DataFrame:
        """
        Accepts scalar datetime or DatetimeIndex. Naive times are taken as site local time.
        Returns SunPosition (scalar) or DataFrame (columns: zenith, azimuth).
        """
        is_scalar = isinstance(dt, (datetime, pd.Timestamp))

        if is_scalar:
            ts = self._localize(pd.DatetimeIndex([pd.Timestamp(dt)]))
        else:
            ts = self._localize(pd.DatetimeIndex(dt))

        pos = self.loc.get_solarposition(ts)
        frame = pd.DataFrame({
            'zenith': np.radians(pos['apparent_zenith'].to_numpy()),
            'azimuth': to_plant_azimuth(pos['azimuth'].to_numpy()),
        }, index=ts)

        if is_scalar:
            return SunPosition(
                zenith=float(frame['zenith'].iloc[0]),
                azimuth=float(frame['azimuth'].iloc[0])
            )
        return frame
