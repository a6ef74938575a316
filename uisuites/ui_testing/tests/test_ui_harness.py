"""
================================================================================
UI Harness Browser Tests
================================================================================

Drives the retry engine against small pages whose content renders late,
gets covered or replaced, the way real single-page applications do.

Pages are served with `page.set_content` / `page.route`, so no network
access is needed.

================================================================================
"""

import allure
import pytest

from uisuites.ui_testing.framework.element_actions import ElementActions, ScrollActions
from uisuites.ui_testing.framework.errors import ElementActionFailedError, FailureKind
from uisuites.ui_testing.framework.retry_engine import RetryEngine
from uisuites.ui_testing.framework.retry_options import ActionKind, RetryOptions
from uisuites.ui_testing.pages.login_page import LoginPage


DELAYED_BUTTON = """
<button id="go" disabled onclick="document.getElementById('status').textContent='clicked'">Go</button>
<div id="status"></div>
<script>setTimeout(() => document.getElementById('go').disabled = false, 300);</script>
"""

LATE_INPUT = """
<div id="form"></div>
<script>
setTimeout(() => {
    const input = document.createElement('input');
    input.id = 'name';
    document.getElementById('form').appendChild(input);
}, 300);
</script>
"""

LATE_MESSAGE = """
<div id="msg"></div>
<span id="badge"></span>
<script>
setTimeout(() => document.getElementById('msg').textContent = 'Order 42 is READY', 300);
setTimeout(() => document.getElementById('badge').setAttribute('data-count', '7'), 300);
</script>
"""

OVERLAY = """
<div id="overlay" style="position:fixed;inset:0;background:#0008">Loading...</div>
<button id="after" onclick="this.textContent='done'">Continue</button>
<script>setTimeout(() => document.getElementById('overlay').remove(), 400);</script>
"""

REPLACED = """
<div id="slot"><p id="old">Old</p></div>
<script>
setTimeout(() => {
    document.getElementById('slot').innerHTML = '<p id="new">New</p>';
}, 300);
</script>
"""

COVERED_BUTTON = """
<button id="covered" onclick="this.setAttribute('data-clicked', 'yes')">Covered</button>
<div id="cover" style="position:fixed;inset:0;background:transparent"></div>
"""

LAZY_LIST = """
<div id="list"></div>
<script>
const list = document.getElementById('list');
function addItems(n) {
    for (let i = 0; i < n; i++) {
        const item = document.createElement('div');
        item.className = 'item';
        item.style.height = '200px';
        item.textContent = 'Item ' + list.children.length;
        list.appendChild(item);
    }
}
addItems(10);
window.addEventListener('scroll', () => {
    if (list.children.length < 40) {
        addItems(5);
    }
});
</script>
"""

LOGIN_FORM = """
<html><body>
<input id="user-name" />
<input id="password" type="password" />
<input id="login-button" type="submit" value="Login"
       onclick="document.body.setAttribute('data-user', document.getElementById('user-name').value)" />
<h3 data-test="error"></h3>
</body></html>
"""


@pytest.fixture
def actions(scenario) -> ElementActions:
    return scenario.actions


@allure.feature("Retry Engine")
@pytest.mark.P0
@pytest.mark.smoke
class TestDelayedRendering:

    @allure.title("Click waits for a disabled button to become enabled")
    def test_click_waits_for_enabled(self, scenario, actions):
        scenario.page.set_content(DELAYED_BUTTON)
        outcome = actions.click_element("#go")
        assert outcome.succeeded
        assert actions.wait_for_text("#status", "equals:clicked") == "clicked"

    @allure.title("Input text waits for a late input and verifies its value")
    def test_input_text_on_late_input(self, scenario, actions):
        scenario.page.set_content(LATE_INPUT)
        outcome = actions.input_text("#name", "Jane Doe")
        assert outcome.succeeded
        assert actions.get_element_attribute("#name", "value") == "Jane Doe"

    @allure.title("Text and attribute waits accept match prefixes")
    def test_text_and_attribute_waits(self, scenario, actions):
        scenario.page.set_content(LATE_MESSAGE)
        assert "READY" in actions.wait_for_text("#msg", "icontains:ready")
        assert actions.wait_for_text("#msg", r"regex:Order \d+ is READY") == "Order 42 is READY"
        assert actions.wait_for_attribute_populated("#badge", "data-count") == "7"

    @allure.title("Missing element fails with a single timed out error")
    def test_missing_element_fails(self, scenario, settings):
        scenario.page.set_content("<div></div>")
        engine = RetryEngine.from_settings(scenario.page, settings, explicit_wait=0.3, base_delay=0.05)
        with pytest.raises(ElementActionFailedError) as exc_info:
            engine.retry_action(
                "#absent",
                lambda el: el.click(),
                ActionKind.CLICK,
                RetryOptions.builder().max_attempts(2).build(),
            )
        assert exc_info.value.failure_kind is FailureKind.TIMED_OUT
        assert exc_info.value.attempts == 2


@allure.feature("Element Actions")
@pytest.mark.P1
class TestPageDynamics:

    @allure.title("Overlay wait returns once the overlay is gone")
    def test_overlay_disappears(self, scenario, actions):
        scenario.page.set_content(OVERLAY)
        actions.wait_for_overlay_to_disappear("#overlay")
        assert scenario.page.query_selector("#overlay") is None
        actions.click_element("#after")
        assert actions.get_text("#after") == "done"

    @allure.title("Element replacement waits for detach and the new element")
    def test_element_replacement(self, scenario, actions):
        scenario.page.set_content(REPLACED)
        outcome = actions.wait_for_element_replacement("#old", "#new")
        assert outcome.succeeded
        assert actions.get_text("#new") == "New"

    @allure.title("Covered button is clicked through the script fallback")
    def test_covered_button_uses_fallback(self, scenario, settings):
        scenario.page.set_content(COVERED_BUTTON)
        engine = RetryEngine.from_settings(scenario.page, settings, explicit_wait=2)
        actions = ElementActions(engine, action_timeout_ms=1000)

        outcome = actions.click_element("#covered")

        assert outcome.used_fallback
        assert outcome.backoff_delays == ()
        assert actions.get_element_attribute("#covered", "data-clicked") == "yes"

    @allure.title("Lazy loading scroll loads more items")
    def test_lazy_loading_scroll(self, scenario):
        scenario.page.set_viewport_size({"width": 800, "height": 600})
        scenario.page.set_content(LAZY_LIST)
        scroll = ScrollActions(scenario.page, pause=0.1)

        scroll.scroll_through_page_to_trigger_lazy_loading()

        assert len(scenario.page.query_selector_all(".item")) > 10
        assert scenario.page.evaluate("() => window.scrollY") == 0


@allure.feature("Page Objects")
@pytest.mark.P1
@pytest.mark.e2e
class TestLoginPage:

    @allure.title("Login page fills and submits the form")
    def test_login_submits_credentials(self, scenario, login_page: LoginPage):
        scenario.page.route(
            "**/*",
            lambda route: route.fulfill(status=200, content_type="text/html", body=LOGIN_FORM),
        )
        login_page.open()
        assert login_page.verify_form_displayed()

        login_page.login("standard_user", "secret_sauce")

        assert scenario.page.get_attribute("body", "data-user") == "standard_user"
        assert scenario.get_page(LoginPage) is login_page
