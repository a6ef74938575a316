"""
================================================================================
Harness Tools
================================================================================

Infrastructure utilities shared by the UI harness and its test suites.

Modules:
    - common: Configuration, settings and logging utilities
    - report_tools: Allure attachment helpers

Example:
    from harness_tools.common import init_logger, load_settings
    from harness_tools.report_tools import attach_json

    init_logger()
    settings = load_settings()
    attach_json({"explicit_wait": settings.explicit_wait}, name="Settings")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
