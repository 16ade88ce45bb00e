"""shotlinks settings.

Settings live in a JSON file (~/.local/share/shotlinks/settings.json by
default). Every key is optional; command-line flags override file values.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, Optional

from shotlinks.errors import BootstrapError
from shotlinks.utils.debounce import DEFAULT_DEBOUNCE_SECONDS
from shotlinks.utils.paths import DEFAULT_PICTURES_DIRECTORY_NAME, SETTINGS_PATH

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    pictures_directory_name: str = DEFAULT_PICTURES_DIRECTORY_NAME
    steam_path: Optional[str] = None
    pictures_path: Optional[str] = None
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    # Re-read installed apps and shortcuts for every watch event, instead of
    # using the snapshot taken when watching started
    refresh_library_per_event: bool = True
    initial_scan: bool = True
    log_level: str = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def merged(self, **overrides) -> "Settings":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from JSON, falling back to defaults when the file is absent.

    Raises:
        BootstrapError: if the file exists but is not a valid settings object
    """
    settings_path = path or SETTINGS_PATH
    if not os.path.exists(settings_path):
        if path:
            raise BootstrapError(f"Settings file not found: {settings_path}")
        logger.debug(f"[Settings] No settings file at {settings_path}, using defaults")
        return Settings()

    try:
        with open(settings_path, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise BootstrapError(f"Error loading settings from {settings_path}: {e}") from e

    if not isinstance(data, dict):
        raise BootstrapError(f"Settings file {settings_path} must contain a JSON object")

    known = {f.name for f in fields(Settings)}
    for key in data:
        if key not in known:
            logger.warning(f"[Settings] Ignoring unknown setting {key!r}")

    settings = Settings(**{k: v for k, v in data.items() if k in known})
    try:
        settings.debounce_seconds = float(settings.debounce_seconds)
    except (TypeError, ValueError) as e:
        raise BootstrapError(f"Invalid debounce_seconds: {settings.debounce_seconds!r}") from e

    logger.debug(f"[Settings] Loaded settings from {settings_path}: {settings.to_dict()}")
    return settings
