import json
import logging
import os
from typing import Any, Dict, Optional, Protocol

from pvtrack.core.errors import ConfigurationError, Severity

logger = logging.getLogger(__name__)

CURRENT_FORMAT_VERSION = "1.0.0"


class ParameterProvider(Protocol):
    format_version: str

    def get_scalar(self, section: str, key: str,
                   severity: Severity = Severity.FATAL,
                   default: Any = None) -> Any:
        """
        Returns the raw value stored under section/key.
        """
        ...


class SiteSettings:
    """
    Site settings document, stored as JSON:

    {
      "version": "1.0.0",
      "O&S": {"ArrayType": "Fixed Tilted Plane", "PlaneTiltFix": 25, ...},
      "Bifacial": {"UseBifacialModel": false},
      "Site": {"Latitude": -25.86, "Longitude": 26.90, "TimeZone": "Africa/Johannesburg"}
    }

    Values are returned raw; typing and unit conversion happen in the resolver.
    """

    def __init__(self, sections: Dict[str, Dict[str, Any]],
                 format_version: Optional[str] = None,
                 source: str = "<memory>"):
        self.sections = sections
        self.format_version = format_version or CURRENT_FORMAT_VERSION
        self.source = source

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "<memory>") -> "SiteSettings":
        sections = {k: dict(v) for k, v in data.items() if isinstance(v, dict)}
        return cls(sections, format_version=data.get("version"), source=source)

    @classmethod
    def load(cls, path: str) -> "SiteSettings":
        if not os.path.exists(path):
            raise FileNotFoundError(f"Settings file {path} not found")

        with open(path, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"{path} is not a valid settings document: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a JSON object")
        return cls.from_dict(data, source=path)

    def save(self, path: str):
        data = {"version": self.format_version}
        data.update(self.sections)
        with open(path, "w") as f:
            json.dump(data, f, indent=4)

    def get_scalar(self, section: str, key: str,
                   severity: Severity = Severity.FATAL,
                   default: Any = None) -> Any:
        value = self.sections.get(section, {}).get(key)
        # Empty strings count as missing, like an empty XML element would
        if value is None or (isinstance(value, str) and not value.strip()):
            if severity is Severity.FATAL:
                raise ConfigurationError(f"{section}/{key} is missing from {self.source}")
            logger.warning("%s/%s is missing from %s, using default %r",
                           section, key, self.source, default)
            return default
        return value
