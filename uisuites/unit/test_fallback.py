import pytest

from uisuites.ui_testing.framework import scripts
from uisuites.ui_testing.framework.errors import ElementNotInteractableError
from uisuites.ui_testing.framework.fallback import FallbackStrategy
from uisuites.ui_testing.framework.retry_options import ActionKind, RetryOptions
from uisuites.unit.fakes import FakeElement, FakePage


@pytest.fixture
def fallback():
    return FallbackStrategy()


@pytest.mark.parametrize(
    "kind, options, applies",
    [
        (ActionKind.CLICK, RetryOptions.none(), True),
        (ActionKind.PROGRAMMATIC_CLICK, RetryOptions.none(), True),
        (ActionKind.INPUT, RetryOptions.by_expected_text("x"), True),
        (ActionKind.INPUT, RetryOptions.none(), False),
        (ActionKind.READ, RetryOptions.none(), False),
        (ActionKind.TEXT_MATCH, RetryOptions.by_expected_text("x"), False),
    ],
)
def test_applies_to(fallback, kind, options, applies):
    assert fallback.applies_to(kind, options) is applies


def test_click_fallback_centres_then_clicks(fallback):
    element = FakeElement()
    page = FakePage().add("#buy", element)

    assert fallback.execute(page, "#buy", ActionKind.CLICK, RetryOptions.none())
    assert element.scripts_run == [scripts.SCROLL_INTO_VIEW_CENTER, scripts.PROGRAMMATIC_CLICK]
    assert element.script_clicks == 1


def test_input_fallback_sets_value(fallback):
    element = FakeElement(value="")
    page = FakePage().add("#name", element)

    assert fallback.execute(page, "#name", ActionKind.INPUT, RetryOptions.by_expected_text("Jane"))
    assert element.attrs["value"] == "Jane"
    assert scripts.SET_VALUE_AND_NOTIFY in element.scripts_run


def test_inapplicable_kind_is_a_no_op(fallback):
    element = FakeElement()
    page = FakePage().add("#label", element)

    assert fallback.execute(page, "#label", ActionKind.READ, RetryOptions.none()) is False
    assert element.scripts_run == []


def test_unresolvable_element_raises(fallback):
    with pytest.raises(ElementNotInteractableError):
        fallback.execute(FakePage(), "#gone", ActionKind.CLICK, RetryOptions.none())
