"""
================================================================================
Allure Report Utilities
================================================================================

Attachment helpers used by the UI harness.

The harness only attaches data to the running Allure test; generating and
rendering reports is left to the Allure CLI.

Features:
- JSON / text / PNG attachment helpers
- Retry outcome attachment for failed element actions
- Page screenshot attachment

================================================================================
"""

import json
from typing import Any, Optional

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_png(png: bytes, name: str = "Screenshot"):
    """
    Attach PNG bytes to Allure report.

    Args:
        png: Image bytes
        name: Attachment name
    """
    allure.attach(
        png,
        name=name,
        attachment_type=allure.attachment_type.PNG
    )


def attach_page_screenshot(page, name: str = "Screenshot", full_page: bool = False) -> Optional[bytes]:
    """
    Capture and attach a screenshot of a Playwright page.

    Screenshot failures are logged and reported as None so that a broken
    page never masks the original test failure.

    Args:
        page: Playwright Page
        name: Attachment name
        full_page: Capture the full scrollable page

    Returns:
        Screenshot bytes, or None if capture failed
    """
    try:
        png = page.screenshot(full_page=full_page)
    except Exception as e:
        logger.warning(f"Screenshot capture failed for '{name}': {e}")
        return None
    attach_png(png, name=name)
    return png


def attach_outcome(outcome, name: Optional[str] = None):
    """
    Attach a retry Outcome summary.

    Args:
        outcome: retry_engine.Outcome
        name: Attachment name (defaults to the action and locator)
    """
    status = "✅" if outcome.succeeded else "❌"
    attach_json(
        outcome.to_dict(),
        name=name or f"{status} {outcome.action_kind.name} {outcome.locator}",
    )


__all__ = [
    "attach_json",
    "attach_text",
    "attach_png",
    "attach_page_screenshot",
    "attach_outcome",
]
