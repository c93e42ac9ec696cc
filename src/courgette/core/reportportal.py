from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
import tomllib

from courgette.core import config as config_core
from courgette.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

PROPERTIES_FILENAME = "reportportal.toml"
REQUIRED_KEYS = ("endpoint", "api_key", "project", "launch")


@dataclass(frozen=True)
class ReportPortalProperties:
    endpoint: str
    api_key: str
    project: str
    launch: str

    @property
    def launch_name(self) -> str:
        return self.launch


def candidate_paths() -> list[Path]:
    override = os.environ.get("COURGETTE_REPORTPORTAL_PATH")
    if override:
        return [Path(override).expanduser()]
    return [config_core.config_path().parent / PROPERTIES_FILENAME, Path.cwd() / PROPERTIES_FILENAME]


def find_properties_file() -> Path | None:
    for path in candidate_paths():
        if path.is_file():
            return path
    return None


def load_properties(path: Path) -> ReportPortalProperties:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Invalid {PROPERTIES_FILENAME}: {path}") from exc
    table = data.get("reportportal")
    if not isinstance(table, dict):
        raise ConfigurationError(f"{path} must contain a [reportportal] table")
    missing = [key for key in REQUIRED_KEYS if not str(table.get(key) or "").strip()]
    if missing:
        raise ConfigurationError(f"{path} is missing required keys: {', '.join(missing)}", key=missing[0])
    return ReportPortalProperties(**{key: str(table[key]).strip() for key in REQUIRED_KEYS})


class ReportPortalHandle:
    """Lazily validated report-portal properties, built at most once.

    Concurrent first calls to `get` block on the lock and all observe the same
    instance. A failed validation is not cached.
    """

    def __init__(self, enabled: bool, *, path: Path | None = None) -> None:
        self.enabled = enabled
        self._path = path
        self._lock = threading.Lock()
        self._properties: ReportPortalProperties | None = None

    def get(self) -> ReportPortalProperties:
        if self._properties is not None:
            return self._properties
        with self._lock:
            if self._properties is None:
                self._properties = self._load()
        return self._properties

    def validate(self) -> None:
        if self.enabled:
            self.get()

    def _load(self) -> ReportPortalProperties:
        path = self._path or find_properties_file()
        if path is None:
            raise ConfigurationError(
                f"The {PROPERTIES_FILENAME} file must be on the resolution path to use the reportportal plugin"
            )
        properties = load_properties(path)
        logger.info("Report portal integration enabled: project=%s launch=%s", properties.project, properties.launch)
        return properties
