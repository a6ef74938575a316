"""
================================================================================
Harness Common Utilities
================================================================================

Shared configuration management and logging setup.

Exports:
    - get_config / set_config / reload_config: dot-path configuration access
    - config_sources: which layers the configuration came from
    - init_logger: loguru setup with standard settings
    - HarnessSettings / load_settings: typed settings for the UI harness

Usage:
    from harness_tools.common import init_logger, load_settings

    init_logger()
    settings = load_settings()

================================================================================
"""

from .global_config import config_sources, get_config, init_logger, reload_config, set_config
from .settings import SETTINGS_FIELDS, HarnessSettings, SettingsError, load_settings

__all__ = [
    "get_config",
    "set_config",
    "reload_config",
    "init_logger",
    "config_sources",
    "HarnessSettings",
    "SETTINGS_FIELDS",
    "SettingsError",
    "load_settings",
]
