"""
Fake Playwright objects for browser detector and worker tests.

FakeBrowser stands in for BrowserManager: it is built from settings,
used as an async context manager and hands out one FakeContext per
identity_context() call. Each page's behavior is looked up by the
user agent of its context.

FakePlaywright goes one level lower: it replaces ``async_playwright``
so the real BrowserManager can be driven without a browser binary.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Callable


class FakeResponse:
    def __init__(self, status: int = 200) -> None:
        self.status = status

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299


class FakePage:
    def __init__(self, user_agent: str, behavior: Callable[[str], tuple[int, str]]) -> None:
        self.user_agent = user_agent
        self._behavior = behavior
        self._html = ""
        self.url = "about:blank"
        self.goto_calls: list[dict] = []

    async def goto(self, url: str, wait_until: str = "load", timeout: float | None = None):
        self.goto_calls.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        status, html = self._behavior(self.user_agent)
        self.url = url
        self._html = html
        return FakeResponse(status)

    async def content(self) -> str:
        return self._html

    async def close(self) -> None:
        pass


class FakeContext:
    def __init__(self, user_agent: str, behavior: Callable[[str], tuple[int, str]]) -> None:
        self.user_agent = user_agent
        self._behavior = behavior
        self.pages: list[FakePage] = []
        self.closed = False

    async def new_page(self) -> FakePage:
        page = FakePage(self.user_agent, self._behavior)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    """Records every context it opens and whether it was closed."""

    def __init__(self, behavior: Callable[[str], tuple[int, str]]) -> None:
        self._behavior = behavior
        self.contexts: list[FakeContext] = []
        self.started = False
        self.closed = False

    async def __aenter__(self) -> "FakeBrowser":
        self.started = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.closed = True

    @asynccontextmanager
    async def identity_context(self, user_agent: str):
        context = FakeContext(user_agent, self._behavior)
        self.contexts.append(context)
        try:
            yield context
        finally:
            await context.close()

    @property
    def user_agents(self) -> list[str]:
        return [context.user_agent for context in self.contexts]


def browser_factory(behavior: Callable[[str], tuple[int, str]]):
    """
    Build a BrowserDetector browser_factory serving behavior.

    Returns:
        (factory, instances) where instances collects every FakeBrowser built
    """
    instances: list[FakeBrowser] = []

    def factory(settings) -> FakeBrowser:
        browser = FakeBrowser(behavior)
        instances.append(browser)
        return browser

    return factory, instances


class FakeLaunchedBrowser:
    """Playwright Browser stand-in handed out by FakeBrowserType.launch."""

    def __init__(self, behavior: Callable[[str], tuple[int, str]], goto_delay: float = 0.0) -> None:
        self._behavior = behavior
        self._goto_delay = goto_delay
        self.contexts: list["FakeManagedContext"] = []
        self.closed = False

    async def new_context(self, **options) -> "FakeManagedContext":
        context = FakeManagedContext(options.get("user_agent", ""), self._behavior, self._goto_delay)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True


class FakeManagedContext(FakeContext):
    """FakeContext with the timeout setters BrowserManager calls."""

    def __init__(self, user_agent: str, behavior, goto_delay: float = 0.0) -> None:
        super().__init__(user_agent, behavior)
        self._goto_delay = goto_delay
        self.default_timeout: float | None = None

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    def set_default_navigation_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    async def new_page(self) -> FakePage:
        page = await super().new_page()
        if self._goto_delay:
            goto = page.goto

            async def slow_goto(*args, **kwargs):
                await asyncio.sleep(self._goto_delay)
                return await goto(*args, **kwargs)

            page.goto = slow_goto
        return page


class FakeBrowserType:
    def __init__(self, browser: FakeLaunchedBrowser, launch_delay: float = 0.0,
                 launch_error: Exception | None = None) -> None:
        self._browser = browser
        self._launch_delay = launch_delay
        self._launch_error = launch_error

    async def launch(self, headless: bool = True) -> FakeLaunchedBrowser:
        if self._launch_delay:
            await asyncio.sleep(self._launch_delay)
        if self._launch_error is not None:
            raise self._launch_error
        return self._browser


class FakePlaywright:
    """
    Stand-in for the object returned by ``async_playwright()``.

    ``start()`` returns itself; ``stopped`` records whether the driver
    was shut down.
    """

    def __init__(
        self,
        behavior: Callable[[str], tuple[int, str]] = lambda ua: (200, "<p>ok</p>"),
        launch_delay: float = 0.0,
        launch_error: Exception | None = None,
        goto_delay: float = 0.0,
    ) -> None:
        self.browser = FakeLaunchedBrowser(behavior, goto_delay=goto_delay)
        self.chromium = FakeBrowserType(self.browser, launch_delay, launch_error)
        self.stopped = False

    async def start(self) -> "FakePlaywright":
        return self

    async def stop(self) -> None:
        self.stopped = True
