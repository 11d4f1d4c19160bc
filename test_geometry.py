"""
Unit tests for px/pt conversion, axis flip and contain-fit placement.

Run: pytest test_geometry.py -v
"""

import pytest

from render_utils.geometry import (
    DrawPlacement,
    LogoPlacementBox,
    PageBox,
    box_to_pdf_space,
    contain_fit,
    contain_scale,
    place_logo,
    pt_to_px,
    px_to_pt,
    round_half_up,
    to_top_left,
)


@pytest.fixture
def placeholder() -> LogoPlacementBox:
    return LogoPlacementBox(x_px=20, y_px=30, width_px=100, height_px=50,
                            container_height_px=200)


class TestUnits:

    def test_px_to_pt(self):
        assert px_to_pt(96) == 72
        assert px_to_pt(100) == 75

    @pytest.mark.parametrize("px", [0.0, 1.0, 33.333, 336.5, 1080.0, 2000.25])
    def test_round_trip(self, px):
        assert pt_to_px(px_to_pt(px)) == pytest.approx(px, abs=1e-9)

    @pytest.mark.parametrize("value, expected", [
        (336.4, 336), (336.5, 337), (191.49, 191), (0.5, 1), (12.0, 12),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestPageBox:

    def test_from_bounding_box_rounds_to_nearest(self):
        box = PageBox.from_bounding_box({"x": 8, "y": 8, "width": 336.5, "height": 191.49})
        assert box == PageBox(337, 191)

    def test_covering_rounds_up(self):
        assert PageBox.covering(500.2, 120.0) == PageBox(501, 120)

    def test_css_size(self):
        assert PageBox(850, 2000).css_size == ("850px", "2000px")


class TestAxisFlip:

    def test_box_to_pdf_space(self, placeholder):
        x, y, w, h = box_to_pdf_space(placeholder)
        assert x == 15
        # flip in px first: 200 - (30 + 50) = 120 px → 90 pt
        assert y == 90
        assert w == 75
        assert h == 37.5

    def test_from_measurement(self):
        box = LogoPlacementBox.from_measurement(
            {"x": 20, "y": 30, "w": 100, "h": 50, "pageW": 336, "pageH": 200})
        assert box.container_height_px == 200
        assert box.container_width_px == 336
        assert box_to_pdf_space(box) == (15, 90, 75, 37.5)

    def test_to_top_left(self):
        placement = DrawPlacement(x=15, y=90, width=75, height=37.5, scale=0.375)
        assert to_top_left(placement, 150) == (15, 22.5, 90, 60)


class TestContainFit:

    def test_exact_fit(self, placeholder):
        placement = place_logo(placeholder, 200, 100)
        assert placement.scale == 0.375
        assert (placement.width, placement.height) == (75, 37.5)
        assert (placement.x, placement.y) == (15, 90)

    def test_horizontal_slack_is_split(self):
        placement = contain_fit(100, 100, 0, 0, 75, 37.5)
        assert placement.scale == 0.375
        assert placement.width == placement.height == 37.5
        assert placement.x == 18.75
        assert placement.y == 0

    def test_vertical_slack_is_split(self):
        placement = contain_fit(100, 20, 10, 10, 50, 50)
        assert placement.scale == 0.5
        assert (placement.width, placement.height) == (50, 10)
        assert placement.x == 10
        assert placement.y == 30

    def test_already_contained_scale_is_one(self):
        assert contain_scale(75, 37.5, 75, 37.5) == 1.0
        first = contain_fit(200, 100, 0, 0, 75, 37.5)
        again = contain_fit(first.width, first.height, 0, 0, 75, 37.5)
        assert again.scale == 1.0

    def test_deterministic(self, placeholder):
        results = {place_logo(placeholder, 123.4, 56.7) for _ in range(5)}
        assert len(results) == 1

    def test_zero_area_asset(self):
        with pytest.raises(ValueError):
            contain_scale(0, 10, 75, 37.5)
