"""
In-memory stand-ins for a Playwright page, its element handles and the clock.

Scripts are recognised by identity against the constants in
`framework.scripts`, so the fakes answer exactly the evaluations the harness
performs and fail loudly on anything else.
"""

from typing import Callable, Dict, List, Optional

from playwright.sync_api import Error as PlaywrightError

from uisuites.ui_testing.framework import scripts
from uisuites.ui_testing.framework.retry_engine import RetryEngine

STALE_MESSAGE = "Element is not attached to the DOM"


class FakeClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []
        self.on_sleep: Optional[Callable[[], None]] = None

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        if self.on_sleep is not None:
            self.on_sleep()


class FakeElement:

    def __init__(
        self,
        text: str = "",
        visible: bool = True,
        enabled: bool = True,
        rendered: bool = True,
        **attrs: str,
    ):
        self.text = text
        self.visible = visible
        self.enabled = enabled
        self.rendered = rendered
        self.connected = True
        self.stale = False
        self.attrs: Dict[str, str] = dict(attrs)

        # Errors raised by successive click()/fill()/select_option() calls before they succeed
        self.click_errors: List[Exception] = []
        self.fill_errors: List[Exception] = []
        self.select_errors: List[Exception] = []
        # Number of non-empty fills the page silently ignores
        self.rejected_fills = 0

        self.clicks = 0
        self.script_clicks = 0
        self.fills: List[str] = []
        self.presses: List[str] = []
        self.selected: Optional[dict] = None
        self.files: Optional[str] = None
        self.scripts_run: List[str] = []

    def _check_attached(self) -> None:
        if self.stale:
            raise PlaywrightError(STALE_MESSAGE)

    # -- state ---------------------------------------------------------------

    def is_visible(self) -> bool:
        self._check_attached()
        return self.visible

    def is_enabled(self) -> bool:
        self._check_attached()
        return self.enabled

    def inner_text(self) -> str:
        self._check_attached()
        return self.text

    # -- input ---------------------------------------------------------------

    def click(self, timeout: Optional[float] = None, **kwargs) -> None:
        self._check_attached()
        if self.click_errors:
            raise self.click_errors.pop(0)
        self.clicks += 1

    def fill(self, value: str, timeout: Optional[float] = None) -> None:
        self._check_attached()
        if self.fill_errors:
            raise self.fill_errors.pop(0)
        self.fills.append(value)
        if value and self.rejected_fills > 0:
            self.rejected_fills -= 1
            return
        self.attrs["value"] = value

    def press(self, key: str, timeout: Optional[float] = None) -> None:
        self._check_attached()
        self.presses.append(key)

    def select_option(self, timeout: Optional[float] = None, **kwargs) -> None:
        self._check_attached()
        if self.select_errors:
            raise self.select_errors.pop(0)
        self.selected = kwargs

    def set_input_files(self, files: str, timeout: Optional[float] = None) -> None:
        self._check_attached()
        self.files = files

    # -- scripts -------------------------------------------------------------

    def evaluate(self, script: str, arg=None):
        if script is scripts.IS_CONNECTED:
            return self.connected
        self._check_attached()
        self.scripts_run.append(script)
        if script is scripts.SCROLL_INTO_VIEW or script is scripts.SCROLL_INTO_VIEW_CENTER:
            return None
        if script is scripts.IS_RENDERED_VISIBLE:
            return self.rendered
        if script is scripts.READ_ATTRIBUTE:
            return self.attrs.get(arg)
        if script is scripts.PROGRAMMATIC_CLICK:
            self.script_clicks += 1
            return None
        if script is scripts.SET_VALUE_AND_NOTIFY:
            self.attrs["value"] = arg
            return None
        raise AssertionError(f"Unexpected element script: {script}")


class FakePage:

    def __init__(self, elements: Optional[Dict[str, List[FakeElement]]] = None):
        self.elements: Dict[str, List[FakeElement]] = elements or {}
        self.url = "http://localhost:3000/"
        self.ready_state = "complete"
        self.jquery_active = 0
        self.scroll_height = 1000
        self.viewport_height = 600
        self.scroll_positions: List[int] = []
        self.on_scroll: Optional[Callable[[int], None]] = None
        self.screenshots = 0
        self.queries = 0

    def add(self, selector: str, *elements: FakeElement) -> "FakePage":
        self.elements.setdefault(selector, []).extend(elements)
        return self

    def query_selector_all(self, selector: str) -> List[FakeElement]:
        self.queries += 1
        return list(self.elements.get(selector, []))

    def query_selector(self, selector: str) -> Optional[FakeElement]:
        found = self.query_selector_all(selector)
        return found[0] if found else None

    def evaluate(self, script: str, arg=None):
        if script is scripts.DOCUMENT_READY_STATE:
            return self.ready_state
        if script is scripts.JQUERY_ACTIVE_REQUESTS:
            return self.jquery_active
        if script is scripts.SCROLL_HEIGHT:
            return self.scroll_height
        if script is scripts.VIEWPORT_HEIGHT:
            return self.viewport_height
        if script is scripts.SCROLL_TO_Y:
            self.scroll_positions.append(arg)
            if self.on_scroll is not None:
                self.on_scroll(arg)
            return None
        raise AssertionError(f"Unexpected page script: {script}")

    def screenshot(self, full_page: bool = False, **kwargs) -> bytes:
        self.screenshots += 1
        return b"\x89PNG"


def make_engine(page: FakePage, clock: FakeClock, **overrides) -> RetryEngine:
    """Engine on fake time: 1s explicit wait, 0.5s polls, no jitter."""
    params = dict(
        explicit_wait=1.0,
        poll_interval=0.5,
        max_attempts=3,
        base_delay=0.5,
        use_jitter=False,
        sleep=clock.sleep,
        clock=clock.monotonic,
    )
    params.update(overrides)
    return RetryEngine(page, **params)
