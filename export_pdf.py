#!/usr/bin/env python3
"""
export_pdf.py — Export a styled HTML document to PDF or PNG via headless Chromium.

Uses Playwright to open the document in a tab, apply the profile's print
overrides, and produce one of three outputs:

Vector
------
Native browser printing, zero margins, background painting on.  The page
size comes from the document's own @page rule, from a fixed profile size,
or from the measured bounding box of a single element (banner variants).

Raster
------
1. Find every element matching the profile's page selector (DOM order).
2. Measure the first one; round to whole pixels → PageBox for all pages.
3. Screenshot each element (opaque PNG, profile device scale).
4. Load the captures into a container document (see render_html.py).
5. Print that document at PageBox size, one capture per page.

A single matched element follows the same five steps.

PNG
---
Clipped screenshot of a fixed region at device scale 1.

All functions return bytes; writing files is left to the caller so a failed
job never leaves a partial output behind.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from render_html import build_raster_container_html
from logo_stamp import LogoPrep, prepare_logo_slot
from render_utils.browser import (
    apply_print_overrides,
    inline_svg_logos,
    open_tab,
    set_page_size,
)
from render_utils.config import Settings
from render_utils.errors import MeasurementError, NoElementsFoundError, PrintExportError
from render_utils.geometry import PageBox
from render_utils.models import CapturedPage
from render_utils.print_profiles import DocumentProfile

logger = logging.getLogger(__name__)

ZERO_MARGIN = {"top": "0px", "right": "0px", "bottom": "0px", "left": "0px"}

LOGO_LOADED_JS = """
(selector) => {
  const img = document.querySelector(selector);
  return !img || (img.complete && img.naturalWidth > 0);
}
"""

MEASURE_ELEMENT_JS = """
(selector) => {
  const el = document.querySelector(selector);
  if (!el) return null;
  const r = el.getBoundingClientRect();
  return { width: r.width, height: r.height };
}
"""


@dataclass
class RenderedDocument:
    """Export output plus the logo slot state captured before printing."""
    data: bytes
    logo: Optional[LogoPrep] = None


# ─── Document preparation ───────────────────────────────────────────────────

def logo_dir_for(profile: DocumentProfile, settings: Settings) -> Path:
    if profile.logo_subdir is None:
        return settings.logo_dir
    return (settings.project_dir / profile.logo_subdir).resolve()


async def load_document(page, html_path: Path, profile: DocumentProfile,
                        settings: Settings, wait_for_logo: bool = False) -> None:
    """Navigate, inline SVG logos, then apply print overrides."""
    await page.goto(html_path.resolve().as_uri(), wait_until="networkidle")

    if profile.logo_filenames:
        n = await inline_svg_logos(
            page, logo_dir_for(profile, settings), profile.logo_filenames,
            exact=profile.logo_match == "exact",
        )
        logger.debug(f"Inlined {n} SVG logo reference(s)")

    if wait_for_logo and profile.wait_for_logo_selector:
        await wait_for_logo_image(page, profile.wait_for_logo_selector, settings.logo_timeout_ms)

    await apply_print_overrides(page, profile, settings.settle_timeout_s)


async def wait_for_logo_image(page, selector: str, timeout_ms: int) -> bool:
    """
    Wait until the logo <img> has decoded.  A missing logo file leaves a broken
    image that never loads, so the wait is bounded and export carries on.
    """
    try:
        await page.wait_for_function(LOGO_LOADED_JS, arg=selector, timeout=timeout_ms)
        return True
    except PlaywrightTimeoutError:
        logger.warning(f"  Logo {selector} did not load within {timeout_ms} ms; continuing")
        return False


async def measure_element(page, selector: str) -> PageBox:
    """Bounding box of the first match, rounded up to whole pixels."""
    box = await page.evaluate(MEASURE_ELEMENT_JS, selector)
    if not box:
        raise MeasurementError(selector)
    return PageBox.covering(box["width"], box["height"])


# ─── Vector ─────────────────────────────────────────────────────────────────

async def print_vector_pdf(page, profile: DocumentProfile) -> bytes:
    """Print the prepared page as-is."""
    if profile.fixed_page_size:
        width, height = profile.fixed_page_size
        return await page.pdf(
            print_background=True,
            width=f"{width}px",
            height=f"{height}px",
            margin=ZERO_MARGIN,
            page_ranges="1",
        )

    if profile.fit_selector:
        box = await measure_element(page, profile.fit_selector)
        await set_page_size(page, box.width_px, box.height_px)
        logger.info(f"  Page fitted to {profile.fit_selector}: "
                    f"{box.width_px}×{box.height_px} px")
        return await page.pdf(
            print_background=True,
            prefer_css_page_size=True,
            margin=ZERO_MARGIN,
            page_ranges="1",
        )

    return await page.pdf(
        print_background=True,
        prefer_css_page_size=True,
        margin=ZERO_MARGIN,
    )


async def export_vector(browser, html_path: Path, profile: DocumentProfile,
                        settings: Settings) -> RenderedDocument:
    async with open_tab(browser, profile.viewport, profile.vector_scale,
                        settings.navigation_timeout_ms) as page:
        await load_document(page, html_path, profile, settings, wait_for_logo=True)
        logo = None
        if profile.logo_slot:
            logo = await prepare_logo_slot(page, profile.logo_slot, html_path)
        data = await print_vector_pdf(page, profile)
    logger.info(f"  ✓ Vector PDF ({len(data) / 1024:.1f} KB)")
    return RenderedDocument(data=data, logo=logo)


# ─── Raster ─────────────────────────────────────────────────────────────────

async def capture_pages(page, selector: str) -> Tuple[PageBox, List[CapturedPage]]:
    """
    Screenshot every element matching selector, in DOM order.

    Only the first element is measured; its rounded box is the PageBox for
    every capture.
    """
    handles = await page.query_selector_all(selector)
    if not handles:
        raise NoElementsFoundError(selector)

    first_box = await handles[0].bounding_box()
    if not first_box:
        raise MeasurementError(selector)
    page_box = PageBox.from_bounding_box(first_box)

    captures = []
    for i, handle in enumerate(handles):
        png = await handle.screenshot(type="png")
        captures.append(CapturedPage(index=i, image_bytes=png, page_box=page_box))
        logger.info(f"  Captured {selector} #{i + 1}")
    return page_box, captures


async def capture_clip(page, page_box: PageBox) -> CapturedPage:
    """Screenshot the top-left page_box region as a single capture."""
    png = await page.screenshot(
        type="png",
        clip={"x": 0, "y": 0, "width": page_box.width_px, "height": page_box.height_px},
    )
    return CapturedPage(index=0, image_bytes=png, page_box=page_box)


async def print_raster_pdf(browser, captures: List[CapturedPage], page_box: PageBox) -> bytes:
    """Print the captures as a flattened PDF, one PageBox-sized page each."""
    html = build_raster_container_html(captures, page_box)
    width, height = page_box.css_size
    async with open_tab(browser, (page_box.width_px, page_box.height_px), 1) as page:
        await page.set_content(html, wait_until="networkidle")
        return await page.pdf(
            print_background=True,
            width=width,
            height=height,
            margin=ZERO_MARGIN,
        )


async def export_raster(browser, html_path: Path, profile: DocumentProfile,
                        settings: Settings) -> RenderedDocument:
    if not (profile.page_selector or profile.fixed_page_size):
        raise PrintExportError(f"Profile {profile.name} defines no page for raster export")

    async with open_tab(browser, profile.render_viewport, profile.raster_scale,
                        settings.navigation_timeout_ms) as page:
        await load_document(page, html_path, profile, settings)
        logo = None
        if profile.logo_slot:
            logo = await prepare_logo_slot(page, profile.logo_slot, html_path)
        if profile.fixed_page_size:
            page_box = PageBox(*profile.fixed_page_size)
            captures = [await capture_clip(page, page_box)]
        else:
            page_box, captures = await capture_pages(page, profile.page_selector)

    w, h = captures[0].pixel_size
    logger.info(f"  {len(captures)} page(s) at {page_box.width_px}×{page_box.height_px} px "
                f"(captured {w}×{h} device px)")
    data = await print_raster_pdf(browser, captures, page_box)
    logger.info(f"  ✓ Raster PDF ({len(data) / 1024:.1f} KB)")
    return RenderedDocument(data=data, logo=logo)


# ─── PNG ────────────────────────────────────────────────────────────────────

async def export_png(browser, html_path: Path, profile: DocumentProfile,
                     settings: Settings) -> RenderedDocument:
    if not profile.clip:
        raise PrintExportError(f"Profile {profile.name} defines no clip for PNG export")

    async with open_tab(browser, profile.viewport, 1,
                        settings.navigation_timeout_ms) as page:
        await load_document(page, html_path, profile, settings)
        capture = await capture_clip(page, PageBox(*profile.clip))
    logger.info(f"  ✓ PNG {capture.page_box.width_px}×{capture.page_box.height_px}")
    return RenderedDocument(data=capture.image_bytes)
