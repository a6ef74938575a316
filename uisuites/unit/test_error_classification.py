import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from uisuites.ui_testing.framework.errors import (
    ConditionTimeoutError,
    ElementActionFailedError,
    ElementNotInteractableError,
    FailureKind,
    StaleElementError,
    classify_failure,
    is_stale,
)
from uisuites.ui_testing.framework.retry_options import ActionKind


@pytest.mark.parametrize(
    "error, kind",
    [
        (ElementNotInteractableError("covered"), FailureKind.NOT_INTERACTABLE),
        (StaleElementError("gone"), FailureKind.STALE),
        (ConditionTimeoutError("slow"), FailureKind.TIMED_OUT),
        (PlaywrightError("Element is not attached to the DOM"), FailureKind.STALE),
        (PlaywrightError("JSHandle is disposed"), FailureKind.STALE),
        (PlaywrightError("Element is not visible"), FailureKind.NOT_INTERACTABLE),
        (
            PlaywrightTimeoutError(
                "Timeout 5000ms exceeded.\nCall log:\n  - <div id=\"cover\"></div> intercepts pointer events"
            ),
            FailureKind.NOT_INTERACTABLE,
        ),
        (PlaywrightTimeoutError("Timeout 5000ms exceeded."), FailureKind.TIMED_OUT),
        (PlaywrightError("net::ERR_CONNECTION_REFUSED"), FailureKind.UNEXPECTED),
        (ValueError("boom"), FailureKind.UNEXPECTED),
    ],
)
def test_classify_failure(error, kind):
    assert classify_failure(error) is kind


def test_only_unexpected_is_not_retryable():
    assert [k for k in FailureKind if not k.retryable] == [FailureKind.UNEXPECTED]


def test_is_stale():
    assert is_stale(PlaywrightError("Element is detached from document"))
    assert not is_stale(PlaywrightError("Element is not enabled"))


def test_final_failure_message():
    error = ElementActionFailedError(
        ActionKind.CLICK, "#submit", 3, FailureKind.TIMED_OUT, ConditionTimeoutError("Timed out")
    )
    assert str(error) == "Failed to perform CLICK on element: #submit after 3 attempts (timed_out): Timed out"
    assert error.attempts == 3


def test_unexpected_failure_message():
    error = ElementActionFailedError(ActionKind.READ, "#x", 1, FailureKind.UNEXPECTED, ValueError("boom"))
    assert str(error).startswith("Unexpected error during READ on element: #x (attempt 1)")
