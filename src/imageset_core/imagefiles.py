# src/imageset_core/imagefiles.py
"""
Image file helpers for catalog folders.

Raster formats are whatever Pillow can open; DICOM files are read with
pydicom (metadata only, stop_before_pixels=True).
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import pydicom
from PIL import Image

DICOM_EXTENSIONS = frozenset({'.dcm', '.dicom'})


def image_extensions() -> frozenset:
    """All file extensions (lowercase, with dot) that count as images."""
    return frozenset(Image.registered_extensions()) | DICOM_EXTENSIONS


def is_image_filename(name: str) -> bool:
    return Path(name).suffix.lower() in image_extensions()


def detect_extension(folder: Path, views: Sequence[str], default: str) -> str:
    """
    Detect the image extension used in a standard set folder.

    Checks views in order and uses the first `<view>.<ext>` image file
    found. Falls back to `default` if the folder is missing or has none.
    """
    try:
        names = sorted(p.name for p in Path(folder).iterdir() if p.is_file())
    except OSError:
        return default

    for view in views:
        for name in names:
            if name.startswith(view + '.') and is_image_filename(name):
                return name.rsplit('.', 1)[1]
    return default


def check_image_file(path: Path) -> Optional[str]:
    """
    Try to open an image file.

    Returns:
        None if the file reads as an image, else a short reason string
    """
    path = Path(path)
    if path.suffix.lower() in DICOM_EXTENSIONS:
        try:
            pydicom.dcmread(str(path), stop_before_pixels=True)
        except Exception as e:  # noqa: BLE001 - any read failure makes the file unusable
            return f"unreadable DICOM ({e.__class__.__name__})"
        return None

    try:
        with Image.open(path) as img:
            img.verify()
    except Exception as e:  # noqa: BLE001 - any read failure makes the file unusable
        return f"unreadable image ({e.__class__.__name__})"
    return None
