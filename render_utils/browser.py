"""
Headless Chromium session helpers shared by every export job.

Handles:
- Browser executable discovery (ordered strategies, first hit wins)
- One browser per run, always closed on exit
- Readiness settling (web fonts + <img> load/decode)
- Print-style override injection from a DocumentProfile
- SVG logo inlining (data: URI substitution and inline <svg> markup)
"""

import asyncio
import base64
import logging
import re
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from render_utils.config import Settings
from render_utils.print_profiles import DocumentProfile

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

WELL_KNOWN_EXECUTABLES = {
    "darwin": [
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        "/Applications/Chromium.app/Contents/MacOS/Chromium",
        "/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge",
    ],
    "win32": [
        "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe",
        "C:\\Program Files (x86)\\Google\\Chrome\\Application\\chrome.exe",
    ],
    "linux": [
        "/usr/bin/google-chrome",
        "/usr/bin/google-chrome-stable",
        "/usr/bin/chromium",
        "/usr/bin/chromium-browser",
    ],
}

# Resolves once fonts are ready and every <img> has loaded or failed.
SETTLE_JS = """
async () => {
  if (document.fonts && document.fonts.ready) await document.fonts.ready;
  const imgs = Array.from(document.images || []);
  await Promise.all(imgs.map(async (img) => {
    try {
      if (!img.complete) {
        await new Promise((resolve) => {
          img.addEventListener("load", resolve, { once: true });
          img.addEventListener("error", resolve, { once: true });
        });
      }
      if (img.decode) await img.decode().catch(() => {});
    } catch (_) {}
  }));
}
"""

FONTS_READY_JS = """
async () => {
  if (document.fonts && document.fonts.ready) await document.fonts.ready;
}
"""

REPLACE_IMG_SRC_JS = """
({ uri, filename, exact }) => {
  let replaced = 0;
  for (const img of document.querySelectorAll("img")) {
    const src = img.getAttribute("src");
    if (!src) continue;
    const hit = exact
      ? (src === filename || src.endsWith("/" + filename))
      : src.includes(filename);
    if (hit) { img.setAttribute("src", uri); replaced++; }
  }
  return replaced;
}
"""

INLINE_SVG_MARKUP_JS = """
({ wrapSelector, markup }) => {
  const wrap = document.querySelector(wrapSelector);
  if (!wrap) return false;
  wrap.querySelectorAll("img").forEach((n) => n.remove());
  wrap.insertAdjacentHTML("beforeend", markup);
  const svg = wrap.querySelector("svg");
  if (svg) {
    svg.removeAttribute("width");
    svg.removeAttribute("height");
    svg.style.width = "100%";
    svg.style.height = "100%";
    svg.style.display = "block";
    if (!svg.getAttribute("preserveAspectRatio")) {
      svg.setAttribute("preserveAspectRatio", "xMidYMid meet");
    }
  }
  return true;
}
"""

_XML_PROLOG_RE = re.compile(r"<\?xml[^>]*\?>", re.IGNORECASE)
_DOCTYPE_RE = re.compile(r"<!doctype[^>]*>", re.IGNORECASE)


# ─── Executable discovery ───────────────────────────────────────────────────

@dataclass(frozen=True)
class ChromeResolution:
    """Outcome of executable discovery.  executable is None when unresolved."""
    executable: Optional[Path]
    strategy: str

    @property
    def resolved(self) -> bool:
        return self.executable is not None


def _existing(path) -> Optional[Path]:
    if not path:
        return None
    p = Path(path)
    return p if p.exists() else None


def from_settings(settings: Settings) -> Optional[Path]:
    configured = settings.chrome_executable
    found = _existing(configured)
    if configured and not found:
        logger.warning(f"Configured browser executable not found: {configured}")
    return found


def from_bundled(bundled_path: Optional[str]) -> Optional[Path]:
    return _existing(bundled_path)


def from_well_known(platform: str = sys.platform) -> Optional[Path]:
    key = "linux" if platform.startswith("linux") else platform
    for candidate in WELL_KNOWN_EXECUTABLES.get(key, []):
        hit = _existing(candidate)
        if hit:
            return hit
    return None


def resolve_chrome_executable(strategies: List[tuple]) -> ChromeResolution:
    """
    Try (name, callable) strategies in order; the first returning a path wins.

    Returns ChromeResolution(None, "unresolved") when every strategy misses.
    """
    for name, strategy in strategies:
        try:
            found = strategy()
        except Exception as e:
            logger.debug(f"Executable strategy {name} failed: {e}")
            continue
        if found:
            return ChromeResolution(executable=found, strategy=name)
    return ChromeResolution(executable=None, strategy="unresolved")


def default_strategies(settings: Settings, pw) -> List[tuple]:
    return [
        ("settings", lambda: from_settings(settings)),
        ("bundled", lambda: from_bundled(pw.chromium.executable_path)),
        ("well-known", from_well_known),
    ]


@asynccontextmanager
async def browser_session(settings: Settings):
    """One headless browser for the whole run; closed on every exit path."""
    async with async_playwright() as pw:
        resolution = resolve_chrome_executable(default_strategies(settings, pw))
        launch_kwargs = {"headless": settings.headless, "args": LAUNCH_ARGS}
        if resolution.resolved:
            launch_kwargs["executable_path"] = str(resolution.executable)
            logger.info(f"Using browser ({resolution.strategy}): {resolution.executable}")
        else:
            logger.warning("No browser executable found; falling back to "
                           "Playwright's default resolution (may fail if none is installed)")

        browser = await pw.chromium.launch(**launch_kwargs)
        try:
            yield browser
        finally:
            await browser.close()
            logger.info("Browser closed")


@asynccontextmanager
async def open_tab(browser, viewport: tuple, device_scale_factor: float,
                   navigation_timeout_ms: Optional[int] = None):
    """A fresh tab (own context) sized to viewport; closed when the block exits."""
    width, height = viewport
    page = await browser.new_page(
        viewport={"width": width, "height": height},
        device_scale_factor=device_scale_factor,
    )
    if navigation_timeout_ms:
        page.set_default_navigation_timeout(navigation_timeout_ms)
    try:
        yield page
    finally:
        await page.close()


# ─── Readiness ──────────────────────────────────────────────────────────────

async def settle_page(page, timeout_s: float = 30.0) -> bool:
    """
    Wait for fonts and images.  Each image resolves on load or error, so the
    wait ends on its own; the timeout only bounds pathological pages.

    Returns False when the bound was hit.
    """
    try:
        await asyncio.wait_for(page.evaluate(SETTLE_JS), timeout=timeout_s)
        return True
    except asyncio.TimeoutError:
        logger.warning(f"Page did not settle within {timeout_s:.0f}s; continuing")
        return False


async def wait_for_fonts(page) -> None:
    await page.evaluate(FONTS_READY_JS)


async def apply_print_overrides(page, profile: DocumentProfile,
                                settle_timeout_s: float = 30.0) -> None:
    """Emulate media, inject the profile stylesheet, then let the page settle."""
    await page.emulate_media(media=profile.media)
    await wait_for_fonts(page)
    if profile.override_css:
        await page.add_style_tag(content=profile.override_css)
    await settle_page(page, settle_timeout_s)


async def set_page_size(page, width_px: int, height_px: int) -> None:
    await page.add_style_tag(content=(
        f"@page {{ size: {width_px}px {height_px}px; margin: 0 !important; }}\n"
        f"html, body {{ width: {width_px}px !important; height: {height_px}px !important; }}"
    ))


# ─── SVG inlining ───────────────────────────────────────────────────────────

def svg_data_uri(svg_text: str) -> str:
    encoded = base64.b64encode(svg_text.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def strip_svg_prolog(svg_text: str) -> str:
    """Drop the XML declaration and doctype so the markup can sit inside HTML."""
    return _DOCTYPE_RE.sub("", _XML_PROLOG_RE.sub("", svg_text))


async def inline_svg_logos(page, logo_dir: Path, filenames: List[str],
                           exact: bool = False) -> int:
    """
    Replace <img src> references to each SVG with a data: URI.

    A missing or unreadable file is logged and its references are left as-is.
    Returns the number of <img> elements rewritten.
    """
    total = 0
    for filename in filenames:
        path = logo_dir / filename
        if not path.exists():
            logger.debug(f"Logo {filename} not found in {logo_dir}")
            continue
        try:
            uri = svg_data_uri(path.read_text(encoding="utf-8"))
            total += await page.evaluate(
                REPLACE_IMG_SRC_JS,
                {"uri": uri, "filename": filename, "exact": exact},
            )
        except (OSError, UnicodeDecodeError, PlaywrightError) as e:
            logger.error(f"✗ Failed to inline SVG logo {filename}: {e}")
    return total


async def inline_svg_markup(page, wrap_selector: str, svg_path: Path) -> bool:
    """Swap the <img> inside wrap_selector for the SVG file's own markup."""
    if not svg_path.exists():
        logger.warning(f"SVG logo not found: {svg_path}; keeping <img> reference")
        return False
    try:
        markup = strip_svg_prolog(svg_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"✗ Failed to read SVG logo {svg_path}: {e}")
        return False
    return await page.evaluate(
        INLINE_SVG_MARKUP_JS, {"wrapSelector": wrap_selector, "markup": markup},
    )
