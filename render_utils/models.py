"""
Models for export jobs and the intermediate artefacts they produce.
"""

import io
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from PIL import Image
from pydantic import BaseModel, Field

from render_utils.geometry import PageBox


class ExportMode(str, Enum):
    VECTOR = "vector"
    RASTER = "raster"
    PNG = "png"


class AssetKind(str, Enum):
    SVG = "svg"
    PDF = "pdf"
    RASTER = "raster"
    NONE = "none"


class ExportTarget(BaseModel):
    """One document-to-file conversion job."""
    source_path: Path = Field(..., description="HTML document to render")
    output_path: Path = Field(..., description="file written on success")
    mode: ExportMode = ExportMode.VECTOR
    profile: str = Field(..., description="key into the style-override table")
    optional: bool = Field(False, description="skip instead of fail when the source is missing")
    stamp_logo: bool = False

    model_config = {"frozen": True}


@dataclass(frozen=True)
class CapturedPage:
    """One rasterized page, in DOM order."""
    index: int
    image_bytes: bytes
    page_box: PageBox

    @property
    def pixel_size(self) -> tuple:
        """Actual PNG dimensions (device pixels, so page_box × device scale)."""
        with Image.open(io.BytesIO(self.image_bytes)) as img:
            return img.size


@dataclass(frozen=True)
class EmbeddableAsset:
    """Logo referenced by a placeholder, classified by how it can be embedded."""
    kind: AssetKind
    source_path: Optional[Path] = None

    @classmethod
    def from_src(cls, src: str, html_path: Path) -> "EmbeddableAsset":
        if not src:
            return cls(AssetKind.NONE)
        path = (html_path.parent / src).resolve()
        lower = src.lower()
        if lower.endswith(".pdf"):
            return cls(AssetKind.PDF, path)
        if lower.endswith(".svg"):
            return cls(AssetKind.SVG, path)
        return cls(AssetKind.RASTER, path)

    @property
    def available(self) -> bool:
        return self.source_path is not None and self.source_path.exists()
