"""
Runtime settings for llogger.

Every setting is looked up in three places, first match wins:

    1. the environment (a `.env` file in the working directory is loaded too)
    2. the JSON config file, `~/.llogger/config.json` unless
       LLOGGER_CONFIG_FILE points elsewhere
    3. the built-in default in DEFAULT_CONFIG

Values are read once at import. LLOGGER_ENABLED is the exception: setting it
to "false" in the environment silences llogger even after import, see
`is_enabled()`.
"""

import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from dotenv import load_dotenv

from .console import console

load_dotenv()

DEFAULT_CONFIG = {
    "LLOGGER_ENABLED": "true",
    "LLOGGER_COLOR": "true",
    "LLOGGER_DATE": "false",
    "LLOGGER_DURATION": "false",
    "LLOGGER_PAD": "true",
    "LLOGGER_STACK": "false",
    "LLOGGER_REFRESH_INTERVAL": "0.08",
    "LLOGGER_HEARTBEAT_INTERVAL": "10",
}

LLOGGER_DIR = Path(os.getenv("LLOGGER_DIR", str(Path.home() / ".llogger")))
CONFIG_FILE = Path(os.getenv("LLOGGER_CONFIG_FILE", str(LLOGGER_DIR / "config.json")))

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")

Number = TypeVar("Number", int, float)


def ensure_llogger_dir() -> bool:
    try:
        LLOGGER_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        console.print(f"[yellow]Warning: Could not create directory {LLOGGER_DIR}: {e}[/yellow]")
        return False
    return True


def load_config() -> dict[str, Any]:
    """Read the config file. A missing file is an empty config; a broken one warns."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE) as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        console.print(f"[yellow]Warning: Could not load config file {CONFIG_FILE}: {e}[/yellow]")
        return {}
    if not isinstance(data, dict):
        console.print(f"[yellow]Warning: {CONFIG_FILE} must contain a JSON object, ignoring it[/yellow]")
        return {}
    return data


def save_config(config: dict[str, Any]) -> bool:
    if not ensure_llogger_dir():
        return False
    try:
        with open(CONFIG_FILE, "w") as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        console.print(f"[red]Error saving config file: {e}[/red]")
        return False
    return True


def get_setting(key: str, default: str) -> str:
    """Get setting with priority: Env Var > Config File > Default"""
    env_val = os.getenv(key)
    if env_val:
        return env_val.strip()

    config = load_config()
    if key in config:
        return str(config[key])

    return default


def _get_number(key: str, default: Number, cast: Callable[[str], Number], kind: str) -> Number:
    value = get_setting(key, str(default))
    try:
        return cast(value)
    except ValueError:
        console.print(
            f"[yellow]Warning: Invalid {kind} value for {key}: {value}, using default {default}[/yellow]"
        )
        return default


def get_int_setting(key: str, default: int) -> int:
    return _get_number(key, default, int, "integer")


def get_float_setting(key: str, default: float) -> float:
    return _get_number(key, default, float, "float")


def get_bool_setting(key: str, default: bool) -> bool:
    """Accepts true/1/yes/on and false/0/no/off in any case; anything else warns."""
    value = get_setting(key, str(default)).lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    console.print(
        f"[yellow]Warning: Invalid boolean value for {key}: {value}, using default {default}[/yellow]"
    )
    return default


def _default_bool(key: str) -> bool:
    return get_bool_setting(key, DEFAULT_CONFIG[key] in TRUE_VALUES)


def _default_float(key: str) -> float:
    return get_float_setting(key, float(DEFAULT_CONFIG[key]))


ENABLED = _default_bool("LLOGGER_ENABLED")
COLOR = _default_bool("LLOGGER_COLOR")
# Defaults for loggers created without explicit date/duration/pad/stack options
DATE = _default_bool("LLOGGER_DATE")
DURATION = _default_bool("LLOGGER_DURATION")
PAD = _default_bool("LLOGGER_PAD")
STACK = _default_bool("LLOGGER_STACK")

# Seconds between animation/redraw ticks, and between non-interactive heartbeats
REFRESH_INTERVAL = _default_float("LLOGGER_REFRESH_INTERVAL")
HEARTBEAT_INTERVAL = _default_float("LLOGGER_HEARTBEAT_INTERVAL")


def is_enabled() -> bool:
    """Global kill switch. The env var is re-read so it can be flipped at runtime."""
    return ENABLED and os.getenv("LLOGGER_ENABLED", "").strip().lower() not in FALSE_VALUES
