"""Runtime settings from environment variables and env files."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_STORE_PATH = Path.home() / ".config" / "dreamwizard" / "store.yaml"
DEFAULT_SUBMISSION_DELAY = 2.0
DEFAULT_NAME = "Dreamer"
DEFAULT_LOG_LEVEL = "WARNING"


def load_env_files() -> None:
    # Precedence: explicit path > ~/.config/dreamwizard.env > project .env
    explicit = os.getenv("DREAMWIZARD_ENV_FILE", "").strip()
    candidates = []
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(Path.home() / ".config" / "dreamwizard.env")
    candidates.append(Path.cwd() / ".env")

    for path in candidates:
        if path.is_file():
            load_dotenv(path, override=False)


@dataclass(frozen=True)
class Settings:
    store_path: Path
    submission_delay: float
    default_user_name: str
    log_level: str

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def _non_negative_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: expected a number of seconds.") from exc
    if value < 0:
        raise ValueError(f"Invalid {name}: must not be negative.")
    return value


def _log_level(name: str, default: str) -> str:
    if os.getenv("DREAMWIZARD_VERBOSE", "").strip():
        return "DEBUG"
    level = os.getenv(name, "").strip().upper() or default
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Invalid {name}: unknown log level '{level}'.")
    return level


def load_settings(env_files: bool = True) -> Settings:
    """Build Settings from the environment.

    Args:
        env_files: Load env files first (variables already set win)

    Raises:
        ValueError: If a variable holds an invalid value
    """
    if env_files:
        load_env_files()

    store: Optional[str] = os.getenv("DREAMWIZARD_STORE", "").strip() or None

    return Settings(
        store_path=Path(store).expanduser() if store else DEFAULT_STORE_PATH,
        submission_delay=_non_negative_float("DREAMWIZARD_SUBMISSION_DELAY", DEFAULT_SUBMISSION_DELAY),
        default_user_name=os.getenv("DREAMWIZARD_DEFAULT_NAME", "").strip() or DEFAULT_NAME,
        log_level=_log_level("DREAMWIZARD_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )
