"""
AUTIHD Configuration

Settings come from environment variables, optionally seeded from a .env
file found from the current working directory upward (or an explicit path).

Variables:
- AUTIHD_REPEAT_POLICY: "fanout" (bounded run of one-shots) or "native"
  (single request repeating forever)
- AUTIHD_REPEAT_INTERVAL_SECONDS: spacing between repeats
- AUTIHD_REPEAT_OCCURRENCES: total alerts per repeating reminder (fanout)
- AUTIHD_DEFAULT_CATEGORIES: comma-separated initial categories
- AUTIHD_FALLBACK_BODY: notification body for reminders without description
- AUTIHD_VOICE_ALERTS: speak fired notifications aloud
- AUTIHD_LOG_LEVEL: logging level name
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from autihd.memory.reminder_store import DEFAULT_CATEGORIES
from autihd.notifications.scheduler import (
    DEFAULT_FALLBACK_BODY,
    DEFAULT_OCCURRENCES,
    REPEAT_INTERVAL_SECONDS,
    RepeatPolicy,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "AUTIHD_"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """Raised when a setting has an invalid value"""
    pass


def load_env_file(env_path: Optional[Path] = None) -> bool:
    """
    Load environment variables from a .env file if it exists.

    Without an explicit path, the nearest .env in the current working
    directory or one of its parents is used. Variables already set in the
    environment win over the file.

    Returns:
        True if a file was loaded
    """
    if env_path is None:
        found = find_dotenv(usecwd=True)
        if not found:
            return False
        env_path = Path(found)
    elif not env_path.exists():
        return False

    load_dotenv(env_path, override=False)
    logger.debug(f"Loaded environment from {env_path}")
    return True


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(f"{name} must be at least 1, got {value}")
    return value


def _parse_policy(name: str, raw: str) -> RepeatPolicy:
    try:
        return RepeatPolicy(raw.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in RepeatPolicy)
        raise ConfigError(f"{name} must be one of: {choices}; got {raw!r}") from None


def _parse_categories(name: str, raw: str) -> Tuple[str, ...]:
    names = tuple(part.strip() for part in raw.split(",") if part.strip())
    if not names:
        raise ConfigError(f"{name} must name at least one category")
    if len(set(names)) != len(names):
        raise ConfigError(f"{name} contains duplicate categories: {raw!r}")
    return names


def _parse_log_level(name: str, raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"{name} is not a logging level: {raw!r}")
    return level


@dataclass(frozen=True)
class ReminderSettings:
    """Resolved application settings"""
    repeat_policy: RepeatPolicy = RepeatPolicy.FANOUT
    repeat_interval_seconds: int = REPEAT_INTERVAL_SECONDS
    repeat_occurrences: int = DEFAULT_OCCURRENCES
    default_categories: Tuple[str, ...] = DEFAULT_CATEGORIES
    fallback_body: str = DEFAULT_FALLBACK_BODY
    voice_alerts: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_path: Optional[Path] = None
    ) -> 'ReminderSettings':
        """
        Build settings from the environment.

        Args:
            environ: Mapping to read instead of os.environ (no .env
                file is loaded when given)
            env_path: Explicit .env file to load first (default: nearest
                .env from the working directory upward)

        Raises:
            ConfigError: If any variable has an invalid value
        """
        if environ is None:
            load_env_file(env_path)
            environ = os.environ

        def get(key: str) -> Optional[str]:
            return environ.get(ENV_PREFIX + key)

        values = {}
        parsers = {
            'repeat_policy': ("REPEAT_POLICY", _parse_policy),
            'repeat_interval_seconds': ("REPEAT_INTERVAL_SECONDS", _parse_positive_int),
            'repeat_occurrences': ("REPEAT_OCCURRENCES", _parse_positive_int),
            'default_categories': ("DEFAULT_CATEGORIES", _parse_categories),
            'voice_alerts': ("VOICE_ALERTS", _parse_bool),
            'log_level': ("LOG_LEVEL", _parse_log_level),
        }
        for field_name, (key, parser) in parsers.items():
            raw = get(key)
            if raw is not None:
                values[field_name] = parser(ENV_PREFIX + key, raw)

        fallback_body = get("FALLBACK_BODY")
        if fallback_body is not None and fallback_body.strip():
            values['fallback_body'] = fallback_body.strip()

        settings = cls(**values)
        logger.debug(f"Settings resolved: {settings}")
        return settings


def configure_logging(level: str = "INFO"):
    """Configure root logging the same way for every entry point"""
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)
