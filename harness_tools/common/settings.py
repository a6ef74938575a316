"""
================================================================================
Harness Settings
================================================================================

Typed view over the global configuration.

Every setting is declared once in SETTINGS_FIELDS (field name -> config key
and default). Nothing is mapped by reflection: a setting that is not in the
table does not exist, and a config key that no field names is ignored.

Values arriving as strings (environment overrides) are converted to the
type of the field's default.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from loguru import logger

from .global_config import get_config


# field name -> (config key, default)
SETTINGS_FIELDS: Dict[str, Tuple[str, Any]] = {
    "app_url": ("ui.app_url", "http://localhost:3000"),
    "browser": ("ui.browser", "chromium"),
    "headless": ("ui.headless", True),
    "page_load_timeout": ("ui.page_load_timeout", 30.0),
    "explicit_wait": ("ui.explicit_wait", 20.0),
    "poll_interval": ("ui.poll_interval", 0.5),
    "action_timeout": ("ui.action_timeout", 5.0),
    "max_attempts": ("retry.max_attempts", 3),
    "base_delay": ("retry.base_delay", 0.5),
    "use_exponential_backoff": ("retry.use_exponential_backoff", True),
    "use_jitter": ("retry.use_jitter", True),
    "stale_retry_delay": ("retry.stale_retry_delay", 0.2),
    "screenshots_dir": ("report.screenshots_dir", "screenshots"),
    "lazy_scroll_pause": ("ui.lazy_scroll_pause", 0.5),
}


class SettingsError(Exception):
    """Raised when a configured value cannot be converted."""
    pass


@dataclass(frozen=True)
class HarnessSettings:
    """
    Resolved harness settings.

    Durations are in seconds.
    """
    app_url: str
    browser: str
    headless: bool
    page_load_timeout: float
    explicit_wait: float
    poll_interval: float
    action_timeout: float
    max_attempts: int
    base_delay: float
    use_exponential_backoff: bool
    use_jitter: bool
    stale_retry_delay: float
    screenshots_dir: str
    lazy_scroll_pause: float

    @property
    def action_timeout_ms(self) -> float:
        """Playwright action timeout (milliseconds)."""
        return self.action_timeout * 1000

    @property
    def page_load_timeout_ms(self) -> float:
        return self.page_load_timeout * 1000


def _convert(name: str, value: Any, reference: Any) -> Any:
    """Convert a raw config value to the type of the default."""
    if isinstance(reference, bool):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("true", "1", "yes", "on")
    try:
        if isinstance(reference, int):
            return int(value)
        if isinstance(reference, float):
            return float(value)
    except (TypeError, ValueError) as e:
        raise SettingsError(f"Setting '{name}' has invalid value {value!r}: {e}") from e
    return str(value)


def load_settings(**overrides: Any) -> HarnessSettings:
    """
    Build HarnessSettings from the global configuration.

    Args:
        **overrides: Field values that take precedence over configuration

    Returns:
        HarnessSettings instance

    Raises:
        SettingsError: A value cannot be converted, or an override names an
            unknown field
    """
    unknown = set(overrides) - set(SETTINGS_FIELDS)
    if unknown:
        raise SettingsError(f"Unknown settings: {', '.join(sorted(unknown))}")

    values = {}
    for name, (key, default) in SETTINGS_FIELDS.items():
        raw = overrides[name] if name in overrides else get_config(key, default)
        values[name] = _convert(name, raw, default)

    settings = HarnessSettings(**values)
    logger.debug(
        f"Settings loaded: app_url={settings.app_url}, browser={settings.browser}, "
        f"headless={settings.headless}, explicit_wait={settings.explicit_wait}s, "
        f"max_attempts={settings.max_attempts}"
    )
    return settings


__all__ = [
    "HarnessSettings",
    "SETTINGS_FIELDS",
    "SettingsError",
    "load_settings",
]
