"""
Style-override table keyed by document variant.

Each DocumentProfile describes how one family of HTML documents is prepared
for export: which media type to emulate, the viewport and pixel density of
the render tab, the stylesheet that strips preview-only chrome, and which
element is the repeating "page" for raster capture.

Profiles are looked up once per job and passed explicitly to the exporters.
"""

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field


# ─── Shared CSS fragments ───────────────────────────────────────────────────

EXACT_COLOR_CSS = """
  html {
    -webkit-print-color-adjust: exact !important;
    print-color-adjust: exact !important;
  }
"""

# ─── Per-variant override stylesheets ───────────────────────────────────────

KARTVIZIT_CSS = """
  @page { margin: 0 !important; }
""" + EXACT_COLOR_CSS + """
  body {
    margin: 0 !important;
    padding: 0 !important;
    background: #fff !important;
    gap: 0 !important;
    display: block !important;
  }
  .card-page {
    box-shadow: none !important;
    border-radius: 0 !important;
    page-break-after: always;
    break-after: page;
  }
  .card-page:last-child {
    page-break-after: auto;
    break-after: auto;
  }
"""

BUSINESSCARD_CSS = EXACT_COLOR_CSS + """
  body {
    background: #fff !important;
    margin: 0 !important;
    padding: 0 !important;
    display: block !important;
    gap: 0 !important;
  }
  .card-page {
    box-shadow: none !important;
    border-radius: 0 !important;
    page-break-after: always;
    break-after: page;
  }
  .card-page:last-child {
    page-break-after: auto;
    break-after: auto;
  }
  /* inline <svg> logo keeps the box the <img> used to occupy */
  .logo-wrap svg {
    width: 100% !important;
    height: 100% !important;
    display: block !important;
    transform: translateY(var(--logo-y)) !important;
  }
"""

BROCHURE_CSS = """
  @page { margin: 0 !important; }
""" + EXACT_COLOR_CSS + """
  body {
    margin: 0 !important;
    padding: 0 !important;
    background: #fff !important;
    display: block !important;
    gap: 0 !important;
  }
  .sheet {
    box-shadow: none !important;
    page-break-after: always;
    break-after: page;
  }
  .sheet:last-child {
    page-break-after: auto;
    break-after: auto;
  }
  .fold-line { display: none !important; }
"""

KURUMSAL_CSS = EXACT_COLOR_CSS + """
  body {
    background: #fff !important;
    margin: 0 !important;
    padding: 0 !important;
    display: block !important;
    min-height: auto !important;
  }
  .banner-card {
    margin: 0 !important;
    box-shadow: none !important;
    position: absolute !important;
    left: 0 !important;
    top: 0 !important;
    width: 500px !important;
    max-width: 500px !important;
    overflow: hidden !important;
  }
"""

ROLLUP_WIDTH_PX = 850
ROLLUP_HEIGHT_PX = 2000

ROLLUP_CSS = """
  @page { margin: 0 !important; }
""" + EXACT_COLOR_CSS + f"""
  html, body {{ width: {ROLLUP_WIDTH_PX}px !important; height: {ROLLUP_HEIGHT_PX}px !important; }}
  body {{
    zoom: 1 !important;
    background-color: #ffffff !important;
    margin: 0 !important;
    padding: 0 !important;
    display: block !important;
  }}
  .rollup-container {{ margin: 0 !important; }}
"""

LOGO_FILENAMES = [
    "logo-vector-yazisiz.svg",
    "logo-vector-ingilizce.svg",
    "logo-vector-turkce.svg",
]


# ─── Models ─────────────────────────────────────────────────────────────────

class LogoSlot(BaseModel):
    """Placeholder that receives a stamped or inlined logo."""
    page_selector: str = Field(..., description="page the logo box is measured against")
    wrap_selector: str = Field(..., description="box the logo must fill")

    @property
    def img_selector(self) -> str:
        return f"{self.wrap_selector} img"


class DocumentProfile(BaseModel):
    """How one document variant is prepared and exported."""
    name: str
    media: Literal["print", "screen"] = "print"
    viewport: Tuple[int, int] = (1200, 800)
    vector_scale: float = 1.0
    raster_viewport: Optional[Tuple[int, int]] = None
    raster_scale: float = 2.0
    override_css: str = ""
    page_selector: Optional[str] = None
    fixed_page_size: Optional[Tuple[int, int]] = None
    fit_selector: Optional[str] = None
    clip: Optional[Tuple[int, int]] = None
    logo_filenames: List[str] = Field(default_factory=list)
    logo_subdir: Optional[str] = None
    logo_match: Literal["exact", "contains"] = "contains"
    logo_slot: Optional[LogoSlot] = None
    wait_for_logo_selector: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def render_viewport(self) -> Tuple[int, int]:
        return self.raster_viewport or self.viewport


PROFILES: Dict[str, DocumentProfile] = {
    "kartvizit": DocumentProfile(
        name="kartvizit",
        media="print",
        viewport=(1200, 800),
        raster_viewport=(1400, 900),
        raster_scale=3.0,
        override_css=KARTVIZIT_CSS,
        page_selector=".card-page",
        logo_filenames=["logo-vector-yazisiz.svg"],
        logo_subdir=".",
        logo_match="exact",
        wait_for_logo_selector=".logo-wrap img",
    ),
    "businesscard": DocumentProfile(
        name="businesscard",
        media="print",
        viewport=(1200, 800),
        raster_viewport=(1400, 900),
        raster_scale=3.0,
        override_css=BUSINESSCARD_CSS,
        page_selector=".card-page",
        logo_slot=LogoSlot(
            page_selector=".card-page.front",
            wrap_selector=".card-page.front .logo-wrap",
        ),
    ),
    "brochure": DocumentProfile(
        name="brochure",
        media="print",
        viewport=(1400, 900),
        raster_viewport=(1800, 1200),
        raster_scale=2.0,
        override_css=BROCHURE_CSS,
        page_selector=".sheet",
    ),
    "kurumsal": DocumentProfile(
        name="kurumsal",
        media="screen",
        viewport=(900, 1200),
        raster_scale=2.0,
        override_css=KURUMSAL_CSS,
        page_selector=".banner-card",
        fit_selector=".banner-card",
        logo_filenames=LOGO_FILENAMES,
    ),
    "rollup": DocumentProfile(
        name="rollup",
        media="screen",
        viewport=(ROLLUP_WIDTH_PX, ROLLUP_HEIGHT_PX),
        raster_scale=3.0,
        override_css=ROLLUP_CSS,
        fixed_page_size=(ROLLUP_WIDTH_PX, ROLLUP_HEIGHT_PX),
    ),
    "kare": DocumentProfile(
        name="kare",
        media="screen",
        viewport=(1080, 1080),
        clip=(1080, 1080),
        logo_filenames=["logo-vector-yazisiz.svg"],
        logo_subdir=".",
        logo_match="exact",
    ),
    "kapak": DocumentProfile(
        name="kapak",
        media="screen",
        viewport=(1200, 200),
        clip=(1200, 200),
        logo_filenames=LOGO_FILENAMES,
    ),
}


def get_profile(name: str) -> DocumentProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise KeyError(f"Unknown document profile: {name!r} "
                       f"(known: {', '.join(sorted(PROFILES))})") from None
