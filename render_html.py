#!/usr/bin/env python3
"""
render_html.py — Build the container document for flattened (raster) PDFs.

Architecture
============
The browser's PDF printer and its screenshot capture are separate
subsystems.  A screenshot cannot become a PDF page directly, so the raster
path loads a small synthetic HTML document that shows each captured PNG as
one full-bleed page, and prints *that* document.

1. EXACT PAGE SIZE
   Every page wrapper (.p) and every <img> is sized to the PageBox measured
   from the first source element, in CSS pixels.  The PDF is printed with
   the same width/height, so one wrapper fills exactly one sheet.

2. ZERO MARGIN
   @page margin, html/body margin and padding are all 0.  Images are
   display:block so no inline baseline gap appears under them.

3. PAGE BREAKS
   page-break-after / break-after: always on every wrapper, auto on the
   last one, so N captures give N pages and no trailing blank page.

4. NATIVE RESOLUTION
   Captures are taken at a device scale > 1; the <img> is drawn at CSS size
   so the extra pixels become print resolution rather than a larger page.
"""

import base64
from typing import Sequence

from render_utils.geometry import PageBox
from render_utils.models import CapturedPage


# ─── HTML Template ──────────────────────────────────────────────────────────

CONTAINER_HEAD = """\
<!doctype html>
<html>
<head>
<meta charset="utf-8" />
<style>
@page {{ margin: 0; }}
html, body {{ margin: 0; padding: 0; background: #fff; }}
.p {{
  width: {width}px;
  height: {height}px;
  page-break-after: always;
  break-after: page;
}}
.p:last-child {{
  page-break-after: auto;
  break-after: auto;
}}
img {{ display: block; width: {width}px; height: {height}px; }}
</style>
</head>
<body>"""

CONTAINER_TAIL = """</body>
</html>
"""


# ─── Helpers ────────────────────────────────────────────────────────────────

def png_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def render_capture(capture: CapturedPage) -> str:
    """One page wrapper holding one captured image."""
    return f'<div class="p"><img src="{png_data_url(capture.image_bytes)}" alt="" /></div>'


def build_raster_container_html(captures: Sequence[CapturedPage], page_box: PageBox) -> str:
    """
    Container document for the given captures, one page per capture, in order.

    All pages use page_box, even if a later capture was taken from an element
    of a different size.
    """
    if not captures:
        raise ValueError("cannot build a container document without captures")
    ordered = sorted(captures, key=lambda c: c.index)
    head = CONTAINER_HEAD.format(width=page_box.width_px, height=page_box.height_px)
    body = "".join(render_capture(c) for c in ordered)
    return head + body + CONTAINER_TAIL
