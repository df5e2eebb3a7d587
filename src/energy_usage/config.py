"""Settings loading from YAML config and environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from dotenv import load_dotenv

from .buckets import DEFAULT_TIMEZONE
from .collectors.base import RecordSource
from .collectors.csv_files import CsvRecordSource
from .collectors.http import HttpRecordSource
from .tariffs import CONFLICT_POLICIES

DEFAULT_CONFIG_PATH = Path("config") / "energy.yaml"

# Setting name -> environment variable
ENV_VARS = {
    "data_dir": "ENERGY_DATA_DIR",
    "data_url": "ENERGY_DATA_URL",
    "timezone": "ENERGY_TIMEZONE",
    "http_timeout": "ENERGY_HTTP_TIMEOUT",
    "http_retries": "ENERGY_HTTP_RETRIES",
    "tariff_conflicts": "ENERGY_TARIFF_CONFLICTS",
}


@dataclass
class Settings:
    data_dir: Path = Path("data")
    data_url: str | None = None
    timezone: str = DEFAULT_TIMEZONE
    http_timeout: float = 30.0
    http_retries: int = 2
    tariff_conflicts: str = "last"

    def record_source(self) -> RecordSource:
        """Get the raw record source: HTTP if a data URL is set, else local files."""
        if self.data_url:
            return HttpRecordSource(self.data_url, timeout=self.http_timeout, retries=self.http_retries)

        return CsvRecordSource(self.data_dir)


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from the YAML config file, then environment overrides.

    An explicit config_path must exist; the default path is optional.
    Raises ValueError for unusable values.
    """
    load_dotenv()

    values: dict = {}
    path = config_path or DEFAULT_CONFIG_PATH
    if config_path is not None or path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        values.update(data.get("energy") or {})

    for name, env_var in ENV_VARS.items():
        if os.environ.get(env_var):
            values[name] = os.environ[env_var]

    unknown = set(values) - set(ENV_VARS)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

    settings = Settings()
    if "data_dir" in values:
        settings.data_dir = Path(values["data_dir"])
    if values.get("data_url"):
        settings.data_url = str(values["data_url"])
    if "timezone" in values:
        settings.timezone = str(values["timezone"])
    try:
        if "http_timeout" in values:
            settings.http_timeout = float(values["http_timeout"])
        if "http_retries" in values:
            settings.http_retries = int(values["http_retries"])
    except ValueError as e:
        raise ValueError(f"Invalid HTTP setting: {e}") from e
    if "tariff_conflicts" in values:
        settings.tariff_conflicts = str(values["tariff_conflicts"])

    try:
        ZoneInfo(settings.timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {settings.timezone}") from e
    if settings.tariff_conflicts not in CONFLICT_POLICIES:
        raise ValueError(f"Unknown tariff conflict policy: {settings.tariff_conflicts}")

    return settings
