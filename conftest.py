"""
pytest configuration and shared fixtures.

The export code only talks to Playwright through a handful of page/element/
browser methods, so the fakes below record those calls and return canned
results instead of driving a real Chromium.
"""

import asyncio
import io
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from PIL import Image

import render_utils.browser as browser_module
from render_utils.config import Settings


def make_png(width: int, height: int, color=(255, 255, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


class FakeElement:
    def __init__(self, box: Optional[dict], png: bytes):
        self.box = box
        self.png = png
        self.measured = 0
        self.shots = 0

    async def bounding_box(self):
        self.measured += 1
        return self.box

    async def screenshot(self, type="png"):
        self.shots += 1
        return self.png


class FakePage:
    """Records every call in `calls` as (method, payload)."""

    def __init__(self, elements: Dict[str, List[FakeElement]] = None,
                 responses: dict = None, pdf_bytes: bytes = b"%PDF-1.7 fake",
                 screenshot_bytes: bytes = b""):
        self.elements = elements or {}
        self.responses = responses or {}
        self.pdf_bytes = pdf_bytes
        self.screenshot_bytes = screenshot_bytes
        self.calls = []
        self.closed = False
        self.viewport = None
        self.device_scale_factor = None

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def payloads(self, name: str) -> list:
        return [payload for n, payload in self.calls if n == name]

    async def goto(self, url, wait_until=None):
        self.calls.append(("goto", url))

    def set_default_navigation_timeout(self, ms):
        self.calls.append(("nav_timeout", ms))

    async def emulate_media(self, media=None):
        self.calls.append(("emulate_media", media))

    async def add_style_tag(self, content=None):
        self.calls.append(("add_style_tag", content))

    async def evaluate(self, expression, arg=None):
        self.calls.append(("evaluate", (expression, arg)))
        result = self.responses.get(expression)
        return result(arg) if callable(result) else result

    async def wait_for_function(self, expression, arg=None, timeout=None):
        self.calls.append(("wait_for_function", arg))

    async def query_selector_all(self, selector):
        self.calls.append(("query_selector_all", selector))
        return list(self.elements.get(selector, []))

    async def screenshot(self, type="png", clip=None):
        self.calls.append(("screenshot", clip))
        return self.screenshot_bytes

    async def set_content(self, html, wait_until=None):
        self.calls.append(("set_content", html))

    async def pdf(self, **kwargs):
        self.calls.append(("pdf", kwargs))
        return self.pdf_bytes

    async def close(self):
        self.closed = True


class FakeBrowser:
    """Hands out the given pages in order, then fresh FakePages."""

    def __init__(self, pages: List[FakePage] = None):
        self.queue = list(pages or [])
        self.opened: List[FakePage] = []

    async def new_page(self, viewport=None, device_scale_factor=None):
        page = self.queue.pop(0) if self.queue else FakePage()
        page.viewport = viewport
        page.device_scale_factor = device_scale_factor
        self.opened.append(page)
        return page


class RecordingBrowser:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, executable_path: str):
        self.executable_path = executable_path
        self.launches = []
        self.browser = RecordingBrowser()

    async def launch(self, **kwargs):
        self.launches.append(kwargs)
        return self.browser


class FakePlaywright:
    def __init__(self, chromium: FakeChromium):
        self.chromium = chromium

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def chromium(tmp_path, monkeypatch):
    """Replace the Playwright entry point; no bundled or system browser is found."""
    fake = FakeChromium(str(tmp_path / "no-bundled-chrome"))
    monkeypatch.setattr(browser_module, "async_playwright", lambda: FakePlaywright(fake))
    monkeypatch.setattr(browser_module, "from_well_known", lambda: None)
    return fake


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted at an empty temporary project directory."""
    return Settings(project_dir=tmp_path, raster=False, settle_timeout_s=5.0)


@pytest.fixture
def png_factory():
    return make_png
