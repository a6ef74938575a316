"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI harness with a retry/condition-polling engine.

Components:
    - retry_engine: Poll, act, validate and retry loop with fallback
    - conditions: Readiness conditions per action kind, text match modes
    - backoff / polling / fallback: Engine building blocks
    - element_actions: Everyday interactions built on the engine
    - page_base: Base page object
    - browser_manager: Browser lifecycle management
    - test_context: Per-scenario state and page object cache

Author: Automation Team
License: MIT
================================================================================
"""

from .backoff import BackoffPolicy
from .browser_manager import BrowserManager
from .conditions import ConditionEvaluator, matches_expected_text
from .element_actions import ElementActions, ScrollActions
from .errors import (
    ConditionTimeoutError,
    ElementActionFailedError,
    ElementInteractionError,
    ElementNotInteractableError,
    FailureKind,
    StaleElementError,
    classify_failure,
)
from .fallback import FallbackStrategy
from .page_base import BasePage
from .polling import ConditionPoller
from .retry_engine import Outcome, RetryEngine
from .retry_options import ActionKind, RetryOptions, RetryOptionsBuilder
from .test_context import ScenarioContext

__all__ = [
    "ActionKind",
    "BackoffPolicy",
    "BasePage",
    "BrowserManager",
    "ConditionEvaluator",
    "ConditionPoller",
    "ConditionTimeoutError",
    "ElementActionFailedError",
    "ElementActions",
    "ElementInteractionError",
    "ElementNotInteractableError",
    "FailureKind",
    "FallbackStrategy",
    "Outcome",
    "RetryEngine",
    "RetryOptions",
    "RetryOptionsBuilder",
    "ScenarioContext",
    "ScrollActions",
    "StaleElementError",
    "classify_failure",
    "matches_expected_text",
]
