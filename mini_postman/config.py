import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .exceptions import StoreError
from .jsonfile import write_atomic

logger = logging.getLogger(__name__)

APP_DIR_NAME = ".mini_postman"
TEMPLATES_FILE = "templates.json"
HISTORY_FILE = "history.json"
SETTINGS_FILE = "settings.json"
MAX_HISTORY_ITEMS = 50
DEFAULT_TIMEOUT = 30
DEFAULT_CONTENT_TYPE = "application/json"


class Settings(BaseModel):
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    verify_ssl: bool = True
    follow_redirects: bool = True


def default_data_dir() -> Path: return Path.home() / APP_DIR_NAME


def load_settings(data_dir=None) -> Settings:
    """Read settings.json from the data directory, falling back to defaults."""
    path = Path(data_dir or default_data_dir()) / SETTINGS_FILE
    if not path.exists():
        return Settings()
    try:
        return Settings.model_validate_json(path.read_bytes())
    except (OSError, ValidationError) as e:
        logger.warning("Failed to load settings from %s; using defaults: %s", path, e)
        return Settings()


def save_settings(settings: Settings, data_dir=None) -> Path:
    path = Path(data_dir or default_data_dir()) / SETTINGS_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_atomic(path, settings.model_dump_json(indent=2).encode("utf-8"))
    except OSError as e:
        raise StoreError(f"Failed to save settings: {e}") from e
    logger.debug("Saved settings to %s", path)
    return path
