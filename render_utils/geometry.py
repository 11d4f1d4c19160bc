"""
Unit conversion and placement math for print exports.

Coordinate systems
==================
Browser (CSS) space:  origin top-left, y grows downward, 96 px per inch.
PDF space:            origin bottom-left, y grows upward, 72 pt per inch.

Every length crosses from one space to the other exactly once through
px_to_pt().  The vertical flip happens in CSS pixel space, before the
conversion, so no intermediate value is rounded or converted twice.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

CSS_PX_PER_INCH = 96
PDF_PT_PER_INCH = 72
PX_TO_PT = PDF_PT_PER_INCH / CSS_PX_PER_INCH   # 0.75
PT_TO_PX = CSS_PX_PER_INCH / PDF_PT_PER_INCH


def px_to_pt(px: float) -> float:
    """CSS pixels (96 dpi) → PDF points (72 dpi)."""
    return px * PX_TO_PT


def pt_to_px(pt: float) -> float:
    """PDF points (72 dpi) → CSS pixels (96 dpi)."""
    return pt * PT_TO_PX


def round_half_up(value: float) -> int:
    """Nearest integer with .5 rounding away from zero for positive lengths."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class PageBox:
    """Pixel footprint of one printable unit (card face, sheet, banner)."""
    width_px: int
    height_px: int

    @classmethod
    def from_bounding_box(cls, box: dict) -> "PageBox":
        return cls(round_half_up(box["width"]), round_half_up(box["height"]))

    @classmethod
    def covering(cls, width: float, height: float) -> "PageBox":
        """Smallest whole-pixel box that contains width × height."""
        return cls(math.ceil(width), math.ceil(height))

    @property
    def css_size(self) -> tuple:
        return f"{self.width_px}px", f"{self.height_px}px"


@dataclass(frozen=True)
class LogoPlacementBox:
    """Logo placeholder measured relative to its page, in CSS pixels."""
    x_px: float
    y_px: float
    width_px: float
    height_px: float
    container_height_px: float
    container_width_px: float = 0.0

    @classmethod
    def from_measurement(cls, m: dict) -> "LogoPlacementBox":
        return cls(
            x_px=m["x"],
            y_px=m["y"],
            width_px=m["w"],
            height_px=m["h"],
            container_height_px=m["pageH"],
            container_width_px=m.get("pageW", 0.0),
        )


@dataclass(frozen=True)
class DrawPlacement:
    """Where to draw an asset on a PDF page (bottom-left origin, points)."""
    x: float
    y: float
    width: float
    height: float
    scale: float


def contain_scale(asset_w: float, asset_h: float,
                  box_w: float, box_h: float) -> float:
    """Scale factor that fits asset_w × asset_h inside box_w × box_h."""
    if asset_w <= 0 or asset_h <= 0:
        raise ValueError(f"asset has no area: {asset_w}×{asset_h}")
    return min(box_w / asset_w, box_h / asset_h)


def contain_fit(asset_w: float, asset_h: float,
                box_x: float, box_y: float,
                box_w: float, box_h: float) -> DrawPlacement:
    """Fit the asset into the box, keeping its aspect ratio, centred on the slack axis."""
    scale = contain_scale(asset_w, asset_h, box_w, box_h)
    draw_w = asset_w * scale
    draw_h = asset_h * scale
    return DrawPlacement(
        x=box_x + (box_w - draw_w) / 2,
        y=box_y + (box_h - draw_h) / 2,
        width=draw_w,
        height=draw_h,
        scale=scale,
    )


def box_to_pdf_space(box: LogoPlacementBox) -> tuple:
    """
    Convert a measured placeholder to (x, y, w, h) in PDF points.

    The flip uses the container height in pixels:
        y_px = container_height - (box_y + box_height)
    and only then converts to points.
    """
    flipped_y_px = box.container_height_px - (box.y_px + box.height_px)
    return (
        px_to_pt(box.x_px),
        px_to_pt(flipped_y_px),
        px_to_pt(box.width_px),
        px_to_pt(box.height_px),
    )


def place_logo(box: LogoPlacementBox, asset_w: float, asset_h: float) -> DrawPlacement:
    """Measured CSS-pixel placeholder + intrinsic asset size → PDF draw placement."""
    x, y, w, h = box_to_pdf_space(box)
    return contain_fit(asset_w, asset_h, x, y, w, h)


def to_top_left(placement: DrawPlacement, page_height: float) -> tuple:
    """(x0, y0, x1, y1) of a bottom-left placement in a top-left page space."""
    top = page_height - (placement.y + placement.height)
    return (placement.x, top, placement.x + placement.width, top + placement.height)
