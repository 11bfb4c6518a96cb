"""Configuration for the scan core.

Values come from environment variables, optionally seeded from a .env
file:

    PAWSCAN_CATALOG_URL=https://catalog.example.com/api/v1
    PAWSCAN_LOOKUP_TIMEOUT=8
    PAWSCAN_DEBOUNCE_WINDOW=1.5
    PAWSCAN_LOG_LEVEL=INFO
    PAWSCAN_LOG_JSON=false
"""

import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from pawscan.domain.shared.errors import ConfigurationError

DEFAULT_CATALOG_URL = "http://localhost:8080/api/v1"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ScanSettings(BaseModel):
    """Scan core settings."""

    model_config = ConfigDict(frozen=True)

    catalog_base_url: str = Field(DEFAULT_CATALOG_URL, description="Catalog base endpoint")
    lookup_timeout_seconds: float = Field(8.0, gt=0, description="Lookup timeout")
    debounce_window_seconds: float = Field(1.5, ge=0, description="Debounce window")
    log_level: str = Field("INFO", description="Logging level name")
    log_json: bool = Field(False, description="Render logs as JSON")


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def load_settings(env_file: Optional[Union[str, Path]] = None) -> ScanSettings:
    """
    Load settings from the environment.

    Variables already set in the environment win over the .env file.

    Args:
        env_file: Optional .env path (default: search from cwd)

    Returns:
        Validated settings

    Raises:
        ConfigurationError: If a value cannot be parsed or is out of range
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    timeout = _get_float("PAWSCAN_LOOKUP_TIMEOUT", 8.0)
    window = _get_float("PAWSCAN_DEBOUNCE_WINDOW", 1.5)

    if timeout <= 0:
        raise ConfigurationError(f"PAWSCAN_LOOKUP_TIMEOUT must be positive, got {timeout}")
    if window < 0:
        raise ConfigurationError(f"PAWSCAN_DEBOUNCE_WINDOW cannot be negative, got {window}")

    return ScanSettings(
        catalog_base_url=os.getenv("PAWSCAN_CATALOG_URL", DEFAULT_CATALOG_URL).strip(),
        lookup_timeout_seconds=timeout,
        debounce_window_seconds=window,
        log_level=os.getenv("PAWSCAN_LOG_LEVEL", "INFO").strip().upper(),
        log_json=_get_bool("PAWSCAN_LOG_JSON", False),
    )
