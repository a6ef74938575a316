"""
Repository-level pytest configuration (showcase-safe).

Why this exists:
  - Provide safe defaults for demo environments (no secrets embedded)
  - Initialize logging once per worker
  - Keep behavior explicit and discoverable

Important:
  Values below are placeholders for the public demo storefront.
  Real projects should load secrets from a secure secret manager in CI/CD.
"""

from __future__ import annotations

import os
from typing import Generator

import pytest

from harness_tools.common.global_config import init_logger


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """
    Set demo-safe environment defaults if not already provided by the user/CI.

    This prevents accidental leakage and keeps local runs predictable.
    """
    defaults = {
        "UI_USERNAME": "standard_user",
        "UI_PASSWORD": "secret_sauce",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield


@pytest.fixture(scope="session", autouse=True)
def _logging() -> None:
    init_logger()
