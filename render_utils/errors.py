"""
Exceptions raised by the export pipeline.

Every failure that aborts a run derives from PrintExportError so the CLI can
turn it into a non-zero exit without a traceback.
"""

from pathlib import Path


class PrintExportError(Exception):
    """Base class for export failures."""


class MissingSourceDocumentError(PrintExportError):
    """A required HTML document does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Missing source document {path.name} at {path}")


class NoElementsFoundError(PrintExportError):
    """The page selector matched nothing in the rendered document."""

    def __init__(self, selector: str):
        self.selector = selector
        super().__init__(f"No elements found for selector: {selector}")


class MeasurementError(PrintExportError):
    """An element exists but the browser returned no bounding box for it."""

    def __init__(self, selector: str):
        self.selector = selector
        super().__init__(f"Failed to measure first element: {selector}")


class LogoStampError(PrintExportError):
    """The logo asset could not be drawn onto the base PDF."""
