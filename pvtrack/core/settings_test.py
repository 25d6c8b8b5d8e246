import json
import os
import tempfile
import unittest

from pvtrack.core.errors import ConfigurationError, Severity
from pvtrack.core.settings import CURRENT_FORMAT_VERSION, SiteSettings


class TestSiteSettings(unittest.TestCase):
    def setUp(self):
        self.data = {
            "version": "0.9.2",
            "O&S": {"ArrayType": "Fixed Tilted Plane", "PlaneTilt": 25, "Azimuth": ""},
            "Bifacial": {"UseBifacialModel": False},
        }
        self.settings = SiteSettings.from_dict(self.data)

    def test_get_scalar(self):
        self.assertEqual(self.settings.get_scalar("O&S", "PlaneTilt"), 25)
        self.assertIs(self.settings.get_scalar("Bifacial", "UseBifacialModel"), False)
        self.assertEqual(self.settings.format_version, "0.9.2")

    def test_missing_fatal(self):
        with self.assertRaises(ConfigurationError):
            self.settings.get_scalar("O&S", "PlaneTiltFix")
        with self.assertRaises(ConfigurationError):
            self.settings.get_scalar("Nowhere", "PlaneTilt")

    def test_empty_value_is_missing(self):
        with self.assertRaises(ConfigurationError):
            self.settings.get_scalar("O&S", "Azimuth")

    def test_missing_warning_uses_default(self):
        """Optional settings fall back to their default and log a warning."""
        with self.assertLogs("pvtrack.core.settings", level="WARNING") as logs:
            value = self.settings.get_scalar("O&S", "BacktrackOptSAET", Severity.WARNING, "false")
        self.assertEqual(value, "false")
        self.assertIn("BacktrackOptSAET", logs.output[0])

    def test_default_version(self):
        settings = SiteSettings.from_dict({"O&S": {}})
        self.assertEqual(settings.format_version, CURRENT_FORMAT_VERSION)


class TestSettingsPersistence(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "site.json")

    def tearDown(self):
        self.tmp.cleanup()

    def test_save_and_load(self):
        settings = SiteSettings.from_dict({
            "version": "1.0.0",
            "O&S": {"ArrayType": "Two Axis Tracking", "MinTiltTAXT": 0},
            "Site": {"Latitude": 45.0, "Longitude": 7.5},
        })
        settings.save(self.path)

        loaded = SiteSettings.load(self.path)
        self.assertEqual(loaded.format_version, "1.0.0")
        self.assertEqual(loaded.get_scalar("O&S", "ArrayType"), "Two Axis Tracking")
        self.assertEqual(loaded.get_scalar("Site", "Longitude"), 7.5)
        self.assertEqual(loaded.source, self.path)

    def test_load_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            SiteSettings.load(os.path.join(self.tmp.name, "missing.json"))

    def test_load_invalid_document(self):
        with open(self.path, "w") as f:
            f.write("{not json")
        with self.assertRaises(ConfigurationError):
            SiteSettings.load(self.path)

        with open(self.path, "w") as f:
            json.dump([1, 2, 3], f)
        with self.assertRaises(ConfigurationError):
            SiteSettings.load(self.path)


if __name__ == '__main__':
    unittest.main()
