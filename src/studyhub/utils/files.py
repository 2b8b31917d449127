"""Utility helpers for working with file names and sizes."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from studyhub.models import MaterialKind

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "svg", "webp", "bmp"})
PDF_EXTENSIONS = frozenset({"pdf"})
VIDEO_EXTENSIONS = frozenset({"mp4", "webm", "ogg", "mov"})
DOCUMENT_EXTENSIONS = frozenset({"doc", "docx", "ppt", "pptx", "xls", "xlsx", "txt", "md"})

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def file_extension(name: str) -> str:
    """Return the lowercased text after the last dot, or an empty string."""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def classify_file(name: str) -> MaterialKind:
    """Map a file name to its material kind by extension."""
    ext = file_extension(name)
    if ext in IMAGE_EXTENSIONS:
        return MaterialKind.IMAGE
    if ext in PDF_EXTENSIONS:
        return MaterialKind.PDF
    if ext in VIDEO_EXTENSIONS:
        return MaterialKind.VIDEO
    if ext in DOCUMENT_EXTENSIONS:
        return MaterialKind.DOCUMENT
    return MaterialKind.OTHER


def format_bytes(size: int | float | None, decimals: int = 1) -> str:
    """Render a byte count using binary units, e.g. ``1536`` -> ``1.5 KB``."""
    if not size:
        return "0 B"
    digits = max(decimals, 0)
    value = float(size)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    # halves round up, 1280 bytes is 1.3 KB
    rounded = Decimal(value).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    text = f"{rounded:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[index]}"


def preview_mode(kind: MaterialKind) -> str:
    """How a material can be previewed inline; everything else gets a link."""
    if kind in (MaterialKind.IMAGE, MaterialKind.PDF, MaterialKind.VIDEO):
        return kind.value
    return "link"
