from .allure_utils import (
    attach_json,
    attach_outcome,
    attach_page_screenshot,
    attach_png,
    attach_text,
)

__all__ = [
    "attach_json",
    "attach_text",
    "attach_png",
    "attach_page_screenshot",
    "attach_outcome",
]
