"""
UI harness suites package.

Keeps `uisuites` importable for:
  - page objects and framework imports from tests
  - programmatic runners (e.g., `run_tests.py`)

All content is demo-safe and does not include production secrets.
"""
