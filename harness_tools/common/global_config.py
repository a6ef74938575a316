"""
================================================================================
Global Configuration for the UI Harness
================================================================================

Configuration is assembled from layers, later layers winning key by key:

    1. Built-in defaults (below)
    2. config/config.yaml
    3. config/{ENV}.yaml        (ENV or ENVIRONMENT, default "dev")
    4. SECTION__KEY environment variables, e.g. UI__EXPLICIT_WAIT=5

Only environment variables whose first part names a known section
(logging, ui, retry, report, or any section found in the YAML files) are
taken, so unrelated variables such as PYTHON__X never leak in. Values
coming from the environment stay strings; `settings.py` converts them.

The module also owns the Loguru setup shared by the runner and pytest.

Author: Automation Team
License: MIT
================================================================================
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[scenario]} | "
    "{name}:{function}:{line} | {message}"
)

DEFAULTS: Dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "format": DEFAULT_LOG_FORMAT,
    },
    "ui": {
        "app_url": "http://localhost:3000",
        "browser": "chromium",
        "headless": True,
    },
    "retry": {},
    "report": {},
}

# Global configuration storage
_config: Dict[str, Any] = {}
_sources: List[str] = []
_config_dir: Optional[Path] = None
_logger_initialized: bool = False


# ================================================================================
# Logging
# ================================================================================

def init_logger(level: str = None, format_str: str = None) -> None:
    """
    Configure Loguru once per process.

    Every record carries a `scenario` extra ("-" outside a test), filled in
    by `logger.contextualize(scenario=...)` around each UI test.

    Args:
        level: Log level. Defaults to `logging.level`.
        format_str: Log format. Defaults to `logging.format`.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    log_level = (level or get_config("logging.level", "INFO")).upper()
    log_format = format_str or get_config("logging.format", DEFAULT_LOG_FORMAT)

    logger.configure(extra={"scenario": "-"})
    logger.remove()
    logger.add(sys.stderr, level=log_level, format=log_format, colorize=True, backtrace=True, diagnose=True)

    log_file = get_config("logging.file")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=log_level,
            format=log_format.replace("{level: <8}", "{level}"),
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
            compression="zip",
            enqueue=True,
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized: level={log_level}, file={log_file or '-'}")


# ================================================================================
# Loading
# ================================================================================

def _search_dirs() -> List[Path]:
    if _config_dir is not None:
        return [_config_dir]
    return [Path("config"), Path(__file__).resolve().parent.parent.parent / "config"]


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must hold a mapping: {path}")
    return data


def _file_layers() -> List[Path]:
    config_dir = next((d for d in _search_dirs() if d.is_dir()), None)
    if config_dir is None:
        logger.warning("No configuration directory found. Using defaults.")
        return []

    env = os.getenv("ENVIRONMENT", os.getenv("ENV", "dev"))
    candidates = [config_dir / "config.yaml", config_dir / f"{env}.yaml"]
    return [path for path in candidates if path.exists()]


def _env_layer(sections) -> Dict[str, Any]:
    """Collect SECTION__KEY[__SUBKEY] variables for the given sections."""
    layer: Dict[str, Any] = {}
    for name, value in os.environ.items():
        parts = [p.lower() for p in name.split("__")]
        if len(parts) < 2 or parts[0] not in sections or not all(parts):
            continue
        _set_nested(layer, parts, value)
    return layer


def _deep_merge(base: Dict, override: Dict) -> Dict:
    result = dict(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _set_nested(d: Dict, keys: list, value: Any) -> None:
    for key in keys[:-1]:
        child = d.get(key)
        if not isinstance(child, dict):
            child = d[key] = {}
        d = child
    d[keys[-1]] = value


def _load_config() -> None:
    global _config, _sources

    merged = _deep_merge({}, DEFAULTS)
    sources = ["defaults"]
    for path in _file_layers():
        merged = _deep_merge(merged, _read_yaml(path))
        sources.append(str(path))

    env_layer = _env_layer(set(merged))
    if env_layer:
        merged = _deep_merge(merged, env_layer)
        sources.append("environment")

    _config, _sources = merged, sources
    logger.debug(f"Configuration loaded from: {', '.join(sources)}")


def _ensure_config_loaded() -> None:
    if not _config:
        _load_config()


# ================================================================================
# Access
# ================================================================================

def get_config(key: str, default: Any = None) -> Any:
    """
    Retrieves a configuration value using a dot-separated key path.

    Examples:
        >>> get_config("ui.explicit_wait", 20)
        10
        >>> get_config("logging.file")
        None
    """
    _ensure_config_loaded()

    value = _config
    for k in key.split("."):
        if not isinstance(value, dict) or k not in value:
            return default
        value = value[k]
    return value


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value at runtime (e.g. from a fixture)."""
    _ensure_config_loaded()
    _set_nested(_config, key.split("."), value)


def config_sources() -> List[str]:
    """Layers the current configuration was built from, lowest first."""
    _ensure_config_loaded()
    return list(_sources)


def reload_config(config_dir: Union[str, Path, None] = None) -> None:
    """
    Rebuild the configuration, e.g. after changing environment variables.

    Args:
        config_dir: Directory holding config.yaml; None restores the
            default search locations.
    """
    global _config, _config_dir
    _config = {}
    _config_dir = Path(config_dir) if config_dir is not None else None
    _load_config()
    logger.info(f"Configuration reloaded ({len(_sources)} layers)")
