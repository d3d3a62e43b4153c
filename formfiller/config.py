"""
Configuration management for formfiller.

Timing and strategy settings come from environment variables, optionally
loaded from a .env file. Literal field values never live here; they belong
to an ApplicantProfile.

.env resolution order:
  1. CWD/.env
  2. ~/.formfiller/.env   (user-specific)
  3. repo root .env       (developer mode)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from loguru import logger

from formfiller.components.bridges.handler_bridge import bridge_names

_USER_CONFIG_DIR = Path.home() / ".formfiller"
_USER_ENV_FILE = _USER_CONFIG_DIR / ".env"

# Repo root = two levels up from this file (formfiller/config.py -> formfiller/ -> repo root)
_REPO_ROOT = Path(__file__).resolve().parent.parent
_REPO_ENV = _REPO_ROOT / ".env"

ENV_PREFIX = "FORMFILLER_"


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class SequencePolicy:
    """Retry and pacing rules applied by the step sequencer."""
    max_attempts: int = 3
    retry_backoff_ms: int = 500
    inter_step_delay_ms: int = 300
    locate_timeout_ms: int = 3000

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigError("max_attempts must be at least 1")


@dataclass(frozen=True)
class FillerConfig:
    """Immutable settings handed to the sequencer at construction."""
    handler_bridge: str = "react"
    poll_interval_ms: int = 100
    focus_delay_ms: int = 100
    handler_settle_ms: int = 50
    blur_delay_ms: int = 300
    click_settle_ms: int = 200
    option_settle_ms: int = 800
    option_click_settle_ms: int = 500
    listbox_timeout_ms: int = 3000
    log_level: str = "INFO"
    policy: SequencePolicy = field(default_factory=SequencePolicy)


def _find_env_file() -> Optional[Path]:
    candidates = [
        Path(os.getcwd()) / ".env",
        _USER_ENV_FILE,
        _REPO_ENV,
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def ensure_env_loaded() -> Optional[Path]:
    """Load environment variables from .env if one exists. Real env vars win."""
    env_file = _find_env_file()
    if env_file:
        load_dotenv(env_file, override=False)
    return env_file


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer, got '{raw}'") from None
    if value < 0:
        raise ConfigError(f"{ENV_PREFIX}{name} must not be negative, got {value}")
    return value


def load_config(env: Optional[Mapping[str, str]] = None) -> FillerConfig:
    """
    Build a FillerConfig from environment variables.

    Args:
        env: mapping to read instead of os.environ (the .env file is only
            consulted when reading the real environment).
    """
    if env is None:
        ensure_env_loaded()
        env = os.environ

    defaults = FillerConfig()
    policy_defaults = defaults.policy
    policy = SequencePolicy(
        max_attempts=_int_setting(env, "MAX_ATTEMPTS", policy_defaults.max_attempts),
        retry_backoff_ms=_int_setting(env, "RETRY_BACKOFF_MS", policy_defaults.retry_backoff_ms),
        inter_step_delay_ms=_int_setting(env, "STEP_DELAY_MS", policy_defaults.inter_step_delay_ms),
        locate_timeout_ms=_int_setting(env, "LOCATE_TIMEOUT_MS", policy_defaults.locate_timeout_ms),
    )

    poll_interval_ms = _int_setting(env, "POLL_INTERVAL_MS", defaults.poll_interval_ms)
    if poll_interval_ms == 0:
        raise ConfigError(f"{ENV_PREFIX}POLL_INTERVAL_MS must be positive")

    handler_bridge = env.get(ENV_PREFIX + "HANDLER_BRIDGE", defaults.handler_bridge).strip().lower()
    if handler_bridge not in bridge_names():
        raise ConfigError(
            f"{ENV_PREFIX}HANDLER_BRIDGE must be one of {', '.join(bridge_names())}, got '{handler_bridge}'"
        )

    log_level = env.get(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).strip().upper()
    try:
        logger.level(log_level)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}LOG_LEVEL is not a known log level: '{log_level}'") from None

    return FillerConfig(
        handler_bridge=handler_bridge,
        poll_interval_ms=poll_interval_ms,
        focus_delay_ms=_int_setting(env, "FOCUS_DELAY_MS", defaults.focus_delay_ms),
        handler_settle_ms=_int_setting(env, "HANDLER_SETTLE_MS", defaults.handler_settle_ms),
        blur_delay_ms=_int_setting(env, "BLUR_DELAY_MS", defaults.blur_delay_ms),
        click_settle_ms=_int_setting(env, "CLICK_SETTLE_MS", defaults.click_settle_ms),
        option_settle_ms=_int_setting(env, "OPTION_SETTLE_MS", defaults.option_settle_ms),
        option_click_settle_ms=_int_setting(env, "OPTION_CLICK_SETTLE_MS", defaults.option_click_settle_ms),
        listbox_timeout_ms=_int_setting(env, "LISTBOX_TIMEOUT_MS", defaults.listbox_timeout_ms),
        log_level=log_level,
        policy=policy,
    )


def get_config(config: Optional[FillerConfig] = None) -> Dict[str, Any]:
    """Return a snapshot of the active configuration (safe to log)."""
    config = config or load_config()
    return {
        "handler_bridge": config.handler_bridge,
        "poll_interval_ms": config.poll_interval_ms,
        "option_settle_ms": config.option_settle_ms,
        "max_attempts": config.policy.max_attempts,
        "inter_step_delay_ms": config.policy.inter_step_delay_ms,
        "locate_timeout_ms": config.policy.locate_timeout_ms,
        "log_level": config.log_level,
    }
