#!/usr/bin/env python3
"""
export_documents.py — Render the project's HTML documents to PDF / PNG.

One browser is launched per run and every target is exported in sequence,
each in its own tab.  Outputs are written only after a target has been
fully exported (and stamped, for business cards).

Groups
------
    kartvizit     kartvizit.html            → kartvizit.pdf
    rollup        src/turkce.html, src/ingilizce.html → dist/*.pdf
    brochure      src/brochure_{tr,en}.html → dist/brochure_*.pdf   (optional)
    kurumsal      src/kurumsal.html         → dist/kurumsal.pdf
    businesscard  src/businesscard_{en,tr}.html → dist/businesscard_*.pdf
                  (logo stamped from PDF asset; optional)
    kare          instagram-kare.html       → instagram-kare.png
    kapak         src/kapak.html            → dist/kapak.png

Raster mode (--raster or RASTER=1) flattens every PDF target and adds a
"-raster" suffix to its file name.  PNG targets are unaffected.

Usage
-----
    python export_documents.py
    python export_documents.py brochure kurumsal
    python export_documents.py kartvizit --raster
    RASTER=1 python export_documents.py rollup
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from export_pdf import export_png, export_raster, export_vector
from logo_stamp import apply_logo
from render_utils.browser import browser_session
from render_utils.config import Settings, get_settings
from render_utils.errors import MissingSourceDocumentError, PrintExportError
from render_utils.models import ExportMode, ExportTarget
from render_utils.print_profiles import get_profile

logger = logging.getLogger(__name__)

EXPORTERS = {
    ExportMode.VECTOR: export_vector,
    ExportMode.RASTER: export_raster,
    ExportMode.PNG: export_png,
}

# group → profile, flags and (source, output) pairs.  Sources are relative to the
# project dir; outputs go to the dist dir when "dist" is set, else the project dir.
TARGET_GROUPS: Dict[str, dict] = {
    "kartvizit": {
        "profile": "kartvizit",
        "documents": [("kartvizit.html", "kartvizit.pdf")],
    },
    "rollup": {
        "profile": "rollup",
        "dist": True,
        "documents": [
            ("src/turkce.html", "turkce.pdf"),
            ("src/ingilizce.html", "ingilizce.pdf"),
        ],
    },
    "brochure": {
        "profile": "brochure",
        "dist": True,
        "optional": True,
        "documents": [
            ("src/brochure_tr.html", "brochure_tr.pdf"),
            ("src/brochure_en.html", "brochure_en.pdf"),
        ],
    },
    "kurumsal": {
        "profile": "kurumsal",
        "dist": True,
        "documents": [("src/kurumsal.html", "kurumsal.pdf")],
    },
    "businesscard": {
        "profile": "businesscard",
        "dist": True,
        "optional": True,
        "stamp_logo": True,
        "documents": [
            ("src/businesscard_en.html", "businesscard_en.pdf"),
            ("src/businesscard_tr.html", "businesscard_tr.pdf"),
        ],
    },
    "kare": {
        "profile": "kare",
        "png": True,
        "documents": [("instagram-kare.html", "instagram-kare.png")],
    },
    "kapak": {
        "profile": "kapak",
        "dist": True,
        "png": True,
        "documents": [("src/kapak.html", "kapak.png")],
    },
}


def raster_name(path: Path) -> Path:
    return path.with_name(f"{path.stem}-raster{path.suffix}")


def build_targets(settings: Settings, groups: Iterable[str], raster: bool) -> List[ExportTarget]:
    """Expand group names into export targets, in group then document order."""
    targets = []
    for group in groups:
        entry = TARGET_GROUPS[group]
        out_dir = settings.dist_dir if entry.get("dist") else settings.project_dir
        if entry.get("png"):
            mode = ExportMode.PNG
        else:
            mode = ExportMode.RASTER if raster else ExportMode.VECTOR
        for src, out in entry["documents"]:
            output = out_dir / out
            if mode == ExportMode.RASTER:
                output = raster_name(output)
            targets.append(ExportTarget(
                source_path=settings.project_dir / src,
                output_path=output,
                mode=mode,
                profile=entry["profile"],
                optional=entry.get("optional", False),
                stamp_logo=entry.get("stamp_logo", False),
            ))
    return targets


async def run_target(browser, target: ExportTarget, settings: Settings) -> Optional[Path]:
    """Export one target and write it.  Returns None when an optional source is absent."""
    if not target.source_path.exists():
        if target.optional:
            logger.warning(f"Skipping {target.source_path.name}: not found")
            return None
        raise MissingSourceDocumentError(target.source_path)

    logger.info(f"{target.source_path.name} → {target.output_path.name} ({target.mode.value})")
    profile = get_profile(target.profile)
    rendered = await EXPORTERS[target.mode](browser, target.source_path, profile, settings)

    data = rendered.data
    if target.stamp_logo:
        data = apply_logo(data, rendered.logo)

    target.output_path.parent.mkdir(parents=True, exist_ok=True)
    target.output_path.write_bytes(data)
    logger.info(f"✓ Wrote {target.output_path}")
    return target.output_path


async def run(targets: List[ExportTarget], settings: Settings) -> List[Path]:
    """Export targets sequentially inside one browser session."""
    written = []
    async with browser_session(settings) as browser:
        for target in targets:
            out = await run_target(browser, target, settings)
            if out:
                written.append(out)
    return written


# ─── Main ───────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="Export HTML documents to PDF/PNG via Playwright.")
    parser.add_argument("groups", nargs="*", metavar="GROUP",
                        help=f"document groups to export (default: all): {', '.join(TARGET_GROUPS)}")
    parser.add_argument("--raster", action="store_true",
                        help="flatten PDFs to page images (same as RASTER=1)")
    args = parser.parse_args(argv)

    unknown = [g for g in args.groups if g not in TARGET_GROUPS]
    if unknown:
        parser.error(f"unknown group(s): {', '.join(unknown)}")

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    raster = args.raster or settings.raster
    groups = args.groups or list(TARGET_GROUPS)
    targets = build_targets(settings, groups, raster)
    logger.info(f"Exporting {len(targets)} document(s)"
                + (" in raster mode" if raster else ""))

    try:
        written = asyncio.run(run(targets, settings))
    except PrintExportError as e:
        logger.error(f"✗ {e}")
        sys.exit(1)

    logger.info(f"✓ Done: {len(written)} file(s) written")


if __name__ == "__main__":
    main()
