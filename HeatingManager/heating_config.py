"""Configuration loading for the heating manager."""
import json
import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from dotenv import load_dotenv

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_LAST_CHECK_FILE = "lastCheck.txt"
DEFAULT_REQUEST_TIMEOUT = 10.0

# JSON key -> environment variable overriding it
_ENV_OVERRIDES = {
    "shellyTempURL": "HEATING_SENSOR_URL",
    "shellyHeatingOnURL": "HEATING_ACTUATOR_URL",
    "temperatureThreshold": "HEATING_THRESHOLD",
    "checkInterval": "HEATING_CHECK_INTERVAL",
    "weeklyCheckInterval": "HEATING_WEEKLY_INTERVAL",
    "lastCheckFile": "HEATING_LAST_CHECK_FILE",
    "requestTimeout": "HEATING_REQUEST_TIMEOUT",
}


@dataclass(frozen=True)
class HeatingConfig:
    """Immutable daemon settings, loaded once at startup."""
    sensor_url: str
    actuator_url: str
    temperature_threshold: float  # degrees Celsius
    check_interval_minutes: int
    weekly_interval_hours: int
    last_check_file: str = DEFAULT_LAST_CHECK_FILE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @property
    def check_interval(self) -> timedelta:
        return timedelta(minutes=self.check_interval_minutes)

    @property
    def weekly_interval(self) -> timedelta:
        return timedelta(hours=self.weekly_interval_hours)


def _require_str(raw: Dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise SystemExit(f"Missing or empty '{key}' in configuration")
    return value.strip()


def _require_float(raw: Dict[str, Any], key: str) -> float:
    value = raw.get(key)
    if value is None:
        raise SystemExit(f"Missing '{key}' in configuration")
    if isinstance(value, bool):
        raise SystemExit(f"Invalid '{key}': {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise SystemExit(f"Invalid '{key}': {value!r}") from exc


def _require_interval(raw: Dict[str, Any], key: str, unit: str) -> int:
    value = raw.get(key)
    if value is None:
        raise SystemExit(f"Missing '{key}' in configuration")
    if isinstance(value, (bool, float)):
        raise SystemExit(f"Invalid '{key}': {value!r} (expected a whole number)")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise SystemExit(f"Invalid '{key}': {value!r} (expected a whole number)") from exc
    if parsed <= 0:
        raise SystemExit(f"Invalid '{key}': {parsed} (must be greater than zero)")
    # the interval must fit a thread wait and a date computed from now
    try:
        interval = timedelta(**{unit: parsed})
        datetime.now(timezone.utc) + interval
    except OverflowError as exc:
        raise SystemExit(f"Invalid '{key}': {parsed} (too large)") from exc
    if interval.total_seconds() > threading.TIMEOUT_MAX:
        raise SystemExit(f"Invalid '{key}': {parsed} (too large)")
    return parsed


def _read_timeout(raw: Dict[str, Any]) -> float:
    if raw.get("requestTimeout") is None:
        return DEFAULT_REQUEST_TIMEOUT
    timeout = _require_float(raw, "requestTimeout")
    if timeout <= 0:
        raise SystemExit(f"Invalid 'requestTimeout': {timeout} (must be greater than zero)")
    return timeout


def _read_config_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        logging.warning("Config file %s not found, using environment only", path)
        return {}
    except OSError as exc:
        raise SystemExit(f"Failed to open config file {path}: {exc}") from exc
    except ValueError as exc:
        raise SystemExit(f"Failed to parse config file {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise SystemExit(f"Config file {path} must contain a JSON object")
    return raw


def load_config(path: Optional[str] = None) -> HeatingConfig:
    """
    Load and validate the configuration.

    Values come from the JSON config file (Shelly-style camelCase keys) and
    can be overridden by environment variables, which are read from a .env
    file first. Any missing or invalid required value aborts startup.

    Args:
        path: Config file; defaults to $HEATING_CONFIG or config.json

    Raises:
        SystemExit: If the configuration is missing or invalid
    """
    load_dotenv()
    path = path or os.getenv("HEATING_CONFIG", DEFAULT_CONFIG_FILE)
    raw = _read_config_file(path)

    for key, env_name in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is not None and value.strip():
            raw[key] = value.strip()

    config = HeatingConfig(
        sensor_url=_require_str(raw, "shellyTempURL"),
        actuator_url=_require_str(raw, "shellyHeatingOnURL"),
        temperature_threshold=_require_float(raw, "temperatureThreshold"),
        check_interval_minutes=_require_interval(raw, "checkInterval", "minutes"),
        weekly_interval_hours=_require_interval(raw, "weeklyCheckInterval", "hours"),
        last_check_file=str(raw.get("lastCheckFile") or DEFAULT_LAST_CHECK_FILE),
        request_timeout=_read_timeout(raw),
    )

    logging.info(
        "Configuration loaded: threshold=%.1f°C check=%smin weekly=%sh checkpoint=%s",
        config.temperature_threshold,
        config.check_interval_minutes,
        config.weekly_interval_hours,
        config.last_check_file,
    )
    return config
