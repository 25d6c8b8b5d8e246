import logging
import sys
import time

from pvtrack.core.errors import TrackerError
from pvtrack.core.settings import SiteSettings
from pvtrack.simulation import SimulationRunner, to_degrees

logger = logging.getLogger(__name__)


def main(argv=None):
    """
    Usage: python run_tracker.py [settings.json] [year] [output.csv]
    """
    argv = sys.argv[1:] if argv is None else argv
    settings_path = argv[0] if len(argv) > 0 else "sample_settings.json"
    year = int(argv[1]) if len(argv) > 1 else 2025
    output_path = argv[2] if len(argv) > 2 else "orientation.csv"

    try:
        settings = SiteSettings.load(settings_path)
        runner = SimulationRunner(settings)

        start = time.time()
        res = runner.run_year(year)
        end = time.time()
    except TrackerError as e:
        logger.error("Simulation stopped: %s", e)
        return 1

    logger.info(f"Simulation Complete in {end - start:.2f}s")
    out = to_degrees(res)
    daylight = out.dropna(subset=["surface_slope"])
    logger.info(f"Daylight steps: {len(daylight)} / {len(out)}")
    if not daylight.empty:
        logger.info(f"Mean incidence angle: {daylight['incidence_angle'].mean():.2f} deg")
        logger.info(f"Steps with backtracking: {(daylight['backtracking_correction'] > 0).sum()}")

    out.to_csv(output_path)
    logger.info(f"Results written to {output_path}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    sys.exit(main())
