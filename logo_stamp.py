#!/usr/bin/env python3
"""
logo_stamp.py — Place a vector logo from a one-page PDF onto an exported PDF.

Chromium cannot render a PDF inside an <img>, so business cards whose logo
placeholder points at a .pdf are handled in two halves:

Before printing (in the browser)
    - read the placeholder's src and classify it (svg / pdf / other)
    - measure the placeholder box relative to its page, after the print
      overrides are in place
    - svg  → replace the <img> with the SVG's own markup
    - pdf  → remove the <img> so the page prints without a broken image

After printing (PyMuPDF)
    - CSS px → PDF pt, top-left → bottom-left (render_utils.geometry)
    - contain-fit the logo page into the box, centred
    - draw it on the first page as a Form XObject

If the asset is not a PDF, is missing, or the box could not be measured,
the exported PDF is returned unchanged.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF

from render_utils.browser import inline_svg_markup
from render_utils.errors import LogoStampError
from render_utils.geometry import DrawPlacement, LogoPlacementBox, place_logo, to_top_left
from render_utils.models import AssetKind, EmbeddableAsset
from render_utils.print_profiles import LogoSlot

logger = logging.getLogger(__name__)

LOGO_SRC_JS = """
(selector) => {
  const img = document.querySelector(selector);
  return img ? img.getAttribute("src") || "" : "";
}
"""

# Placeholder box relative to its page, in CSS px.
MEASURE_LOGO_JS = """
({ pageSelector, wrapSelector }) => {
  const page = document.querySelector(pageSelector);
  const wrap = document.querySelector(wrapSelector);
  if (!page || !wrap) return null;
  const p = page.getBoundingClientRect();
  const l = wrap.getBoundingClientRect();
  return {
    x: l.left - p.left,
    y: l.top - p.top,
    w: l.width,
    h: l.height,
    pageW: p.width,
    pageH: p.height,
  };
}
"""

REMOVE_IMG_JS = """
(selector) => { document.querySelectorAll(selector).forEach((n) => n.remove()); }
"""


@dataclass
class LogoPrep:
    """Logo asset and placeholder box captured before the page was printed."""
    asset: EmbeddableAsset
    box: Optional[LogoPlacementBox]

    @property
    def stampable(self) -> bool:
        return (self.asset.kind == AssetKind.PDF
                and self.asset.available
                and self.box is not None)


# ─── Browser side ───────────────────────────────────────────────────────────

async def resolve_logo_asset(page, slot: LogoSlot, html_path: Path) -> EmbeddableAsset:
    src = await page.evaluate(LOGO_SRC_JS, slot.img_selector)
    return EmbeddableAsset.from_src(src, html_path)


async def measure_logo_box(page, slot: LogoSlot) -> Optional[LogoPlacementBox]:
    m = await page.evaluate(
        MEASURE_LOGO_JS,
        {"pageSelector": slot.page_selector, "wrapSelector": slot.wrap_selector},
    )
    return LogoPlacementBox.from_measurement(m) if m else None


async def prepare_logo_slot(page, slot: LogoSlot, html_path: Path) -> LogoPrep:
    """
    Classify and measure the logo placeholder, then make the page printable.

    Must run after the print overrides so the box matches the printed layout.
    """
    asset = await resolve_logo_asset(page, slot, html_path)
    box = await measure_logo_box(page, slot)

    if asset.kind == AssetKind.SVG:
        await inline_svg_markup(page, slot.wrap_selector, asset.source_path)
    elif asset.kind == AssetKind.PDF:
        await page.evaluate(REMOVE_IMG_JS, slot.img_selector)

    logger.info(f"  Logo: {asset.kind.value}"
                + (f" ({asset.source_path.name})" if asset.source_path else ""))
    return LogoPrep(asset=asset, box=box)


# ─── PDF side ───────────────────────────────────────────────────────────────

def stamp_logo(pdf_bytes: bytes, logo_doc: fitz.Document,
               box: LogoPlacementBox) -> tuple:
    """
    Draw page 0 of logo_doc onto page 0 of pdf_bytes inside box.

    Returns (new_pdf_bytes, DrawPlacement) with the placement in PDF
    bottom-left coordinates.
    """
    if logo_doc.page_count < 1:
        raise LogoStampError("Logo PDF has no pages")

    base = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        if base.page_count < 1:
            raise LogoStampError("Exported PDF has no pages to stamp")
        logo_rect = logo_doc[0].rect
        placement = place_logo(box, logo_rect.width, logo_rect.height)

        page = base[0]
        # PyMuPDF page space is top-left based; flip back using the page height.
        target = fitz.Rect(*to_top_left(placement, page.rect.height))
        page.show_pdf_page(target, logo_doc, 0, keep_proportion=False)
        return base.tobytes(garbage=3, deflate=True), placement
    finally:
        base.close()


def apply_logo(pdf_bytes: bytes, prep: Optional[LogoPrep]) -> bytes:
    """Stamp when possible; otherwise return the exported PDF unchanged."""
    if prep is None:
        return pdf_bytes
    if prep.asset.kind != AssetKind.PDF:
        return pdf_bytes
    if not prep.asset.available:
        logger.warning(f"  Logo PDF not found: {prep.asset.source_path}; skipping stamp")
        return pdf_bytes
    if prep.box is None:
        logger.warning("  Logo placeholder could not be measured; skipping stamp")
        return pdf_bytes

    try:
        logo_doc = fitz.open(str(prep.asset.source_path))
    except (RuntimeError, ValueError) as e:
        logger.error(f"  ✗ Cannot read logo PDF {prep.asset.source_path}: {e}; skipping stamp")
        return pdf_bytes

    with logo_doc:
        if logo_doc.page_count < 1:
            logger.warning(f"  Logo PDF {prep.asset.source_path} has no pages; skipping stamp")
            return pdf_bytes
        stamped, placement = stamp_logo(pdf_bytes, logo_doc, prep.box)
    logger.info(f"  ✓ Logo stamped at ({placement.x:.2f}, {placement.y:.2f}) pt, "
                f"{placement.width:.2f}×{placement.height:.2f} pt (scale {placement.scale:.4f})")
    return stamped


# ─── Main ───────────────────────────────────────────────────────────────────

def main():
    """Re-stamp an existing PDF from a saved placeholder measurement (JSON)."""
    parser = argparse.ArgumentParser(description="Stamp a PDF logo onto page 1 of a PDF.")
    parser.add_argument("pdf", type=Path)
    parser.add_argument("logo", type=Path)
    parser.add_argument("--box", required=True,
                        help='JSON: {"x":..,"y":..,"w":..,"h":..,"pageH":..} in CSS px')
    parser.add_argument("--output", "-o", type=Path, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    for p in (args.pdf, args.logo):
        if not p.exists():
            print(f"Error: {p} not found.", file=sys.stderr)
            sys.exit(1)

    box = LogoPlacementBox.from_measurement(json.loads(args.box))
    prep = LogoPrep(asset=EmbeddableAsset(AssetKind.PDF, args.logo), box=box)
    out = args.output or args.pdf
    out.write_bytes(apply_logo(args.pdf.read_bytes(), prep))
    print(f"Wrote {out}")


if __name__ == "__main__":
    main()
