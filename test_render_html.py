"""
Tests for the raster container document.

Run: pytest test_render_html.py -v
"""

import re

import pytest

from conftest import make_png
from render_html import build_raster_container_html, png_data_url, render_capture
from render_utils.geometry import PageBox
from render_utils.models import CapturedPage

BOX = PageBox(336, 192)


def captures(n: int):
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (0, 0, 0)]
    return [CapturedPage(index=i, image_bytes=make_png(4, 4, colors[i]), page_box=BOX)
            for i in range(n)]


class TestContainerDocument:

    def test_one_wrapper_per_capture(self):
        html = build_raster_container_html(captures(3), BOX)
        assert html.count('<div class="p">') == 3
        assert html.count("<img ") == 3

    def test_pages_sized_to_page_box(self):
        html = build_raster_container_html(captures(2), BOX)
        assert re.search(r"\.p \{\s*width: 336px;\s*height: 192px;", html)
        assert "img { display: block; width: 336px; height: 192px; }" in html

    def test_zero_margin_and_breaks(self):
        html = build_raster_container_html(captures(3), BOX)
        assert "@page { margin: 0; }" in html
        assert "html, body { margin: 0; padding: 0; background: #fff; }" in html
        assert re.search(r"\.p \{[^}]*page-break-after: always;[^}]*break-after: page;", html)
        assert re.search(r"\.p:last-child \{\s*page-break-after: auto;\s*break-after: auto;", html)

    def test_dom_order_preserved(self):
        caps = captures(3)
        html = build_raster_container_html(list(reversed(caps)), BOX)
        positions = [html.index(png_data_url(c.image_bytes)) for c in caps]
        assert positions == sorted(positions)

    def test_single_capture_uses_same_construction(self):
        caps = captures(3)
        single = build_raster_container_html(caps[:1], BOX)
        multi = build_raster_container_html(caps, BOX)
        assert single.count('<div class="p">') == 1
        assert render_capture(caps[0]) in single
        assert render_capture(caps[0]) in multi
        # same head in both
        assert single.split("<body>")[0] == multi.split("<body>")[0]

    def test_no_captures(self):
        with pytest.raises(ValueError):
            build_raster_container_html([], BOX)

    def test_png_data_url(self):
        assert png_data_url(b"\x89PNG").startswith("data:image/png;base64,")
