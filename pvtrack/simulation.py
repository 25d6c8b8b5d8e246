import logging
import numpy as np
import pandas as pd

from pvtrack.core.errors import TrackerError
from pvtrack.core.resolver import configure
from pvtrack.core.settings import ParameterProvider
from pvtrack.core.solar import SolarCalculator
from pvtrack.physics.engine import OrientationEngine

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "sun_zenith", "sun_azimuth",
    "surface_slope", "surface_azimuth", "rotation_angle",
    "ground_clearance", "backtracking_correction", "incidence_angle",
]
ANGLE_COLUMNS = [c for c in RESULT_COLUMNS if c != "ground_clearance"]


def to_degrees(results: pd.DataFrame) -> pd.DataFrame:
    """Copy of a result table with every angle column in degrees."""
    out = results.copy()
    cols = [c for c in ANGLE_COLUMNS if c in out.columns]
    out[cols] = np.degrees(out[cols].astype(float))
    return out


class SimulationRunner:
    """
    Drives one tracker through a time series of sun positions.
    """
    def __init__(self, settings: ParameterProvider, solar: SolarCalculator = None):
        self.settings = settings
        self.config = configure(settings)
        self.engine = OrientationEngine(self.config)
        self.solar = solar

    def _get_solar(self) -> SolarCalculator:
        # Site settings are only needed when positions are computed here
        if self.solar is None:
            self.solar = SolarCalculator.from_settings(self.settings)
        return self.solar

    def evaluate_positions(self, positions: pd.DataFrame, daylight_only: bool = True) -> pd.DataFrame:
        """
        positions: DataFrame indexed by timestamp with 'zenith' and 'azimuth'
        columns (radians, plant azimuth convention).
        Rows with the sun at or below the horizon are left empty when daylight_only is set.
        """
        results = pd.DataFrame(np.nan, index=positions.index, columns=RESULT_COLUMNS)
        results["sun_zenith"] = positions["zenith"].to_numpy(dtype=float)
        results["sun_azimuth"] = positions["azimuth"].to_numpy(dtype=float)

        index = pd.DatetimeIndex(positions.index)
        years = index.year
        days = index.dayofyear

        rows = []
        for i, (zenith, azimuth) in enumerate(zip(results["sun_zenith"], results["sun_azimuth"])):
            # Night Skip
            if daylight_only and zenith >= np.pi / 2:
                rows.append(None)
                continue
            try:
                res = self.engine.evaluate(zenith, azimuth, int(years[i]), int(days[i]))
            except TrackerError as e:
                logger.error("Orientation failed at %s: %s", index[i], e)
                raise
            rows.append(res)

        for col in RESULT_COLUMNS[2:]:
            results[col] = [
                np.nan if r is None or getattr(r, col) is None else getattr(r, col)
                for r in rows
            ]

        evaluated = sum(r is not None for r in rows)
        logger.info("Evaluated %d of %d timesteps", evaluated, len(rows))
        return results

    def run(self, times: pd.DatetimeIndex, daylight_only: bool = True) -> pd.DataFrame:
        positions = self._get_solar().get_position(times)
        return self.evaluate_positions(positions, daylight_only=daylight_only)

    def run_year(self, year: int, freq: str = "1h", daylight_only: bool = True) -> pd.DataFrame:
        """
        Runs the tracker over a full calendar year in site local time.
        """
        steps = pd.date_range(
            pd.Timestamp(year, 1, 1),
            pd.Timestamp(year + 1, 1, 1),
            freq=freq,
            inclusive="left",
        )
        logger.info("Starting %s run for %d steps...", self.config.array_type.value, len(steps))
        return self.run(steps, daylight_only=daylight_only)
