"""
Image I/O Utilities
===================

This module is the image source boundary of the application. It turns a
user-selected file into the in-memory RGB raster the inference pipeline
works on, and produces scaled copies for on-screen preview.

Functions
---------
load_source_image
    Load and decode an image file as an 8-bit RGB raster
to_display_image
    Aspect-preserving preview copy for the GUI

Notes
-----
DICOM handling:
- Extracts pixel_array and min-max normalizes it to 0-255
- Converts to an RGB PIL Image so every source looks the same downstream

Standard formats (PNG, JPEG, BMP, ...) are opened with PIL.Image.open() and
fully decoded before returning, so truncated or corrupt files fail here and
not later inside preprocessing.

High bit depth rasters (16-bit grayscale PNG/TIFF, modes ``I;16``, ``I``,
``F``) get the same min-max rescale to 0-255 as DICOM; a plain RGB
conversion would clip every value above 255 to white.

See Also
--------
pneumo_ui.core.preprocessing : Consumes the loaded raster
pneumo_ui.core.pipeline : Holds the current source image
"""

import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import ImageDecodeError

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Image Files (*.png *.jpg *.jpeg *.bmp *.tif *.tiff *.dcm);;All Files (*)"


def _rescale_to_rgb(arr) -> Image.Image:
    arr = np.asarray(arr, dtype=np.float32)
    arr -= arr.min()
    if arr.max() > 0:
        arr /= arr.max()
    arr = (arr * 255).astype(np.uint8)
    return Image.fromarray(arr).convert("RGB")


def _load_dicom(p: str) -> Image.Image:
    import pydicom

    ds = pydicom.dcmread(p)
    return _rescale_to_rgb(ds.pixel_array)


def _is_high_bit_depth(mode: str) -> bool:
    return mode in ("I", "F") or mode.startswith("I;16")


def load_source_image(path: str | Path) -> Image.Image:
    """
    Load an image file and return it as an 8-bit, 3-channel RGB raster.

    Parameters
    ----------
    path : str or Path
        Path to image file. Supported formats:
        - DICOM (.dcm)
        - Standard images (.png, .jpg, .jpeg, .bmp, etc.)

    Returns
    -------
    PIL.Image
        Fully decoded RGB image

    Raises
    ------
    ImageDecodeError
        If the file is missing, cannot be decoded, or has zero width/height.
        The message carries the underlying cause.

    Notes
    -----
    Alpha channels are dropped by the RGB conversion; grayscale sources are
    expanded to three equal channels.

    Examples
    --------
    >>> from pneumo_ui.core.image_io import load_source_image
    >>> img = load_source_image("xray.png")
    >>> print(img.mode)
    RGB
    """
    p = str(path)
    try:
        if p.lower().endswith(".dcm"):
            img = _load_dicom(p)
        else:
            with Image.open(p) as src:
                src.load()
                if _is_high_bit_depth(src.mode):
                    img = _rescale_to_rgb(np.array(src))
                else:
                    img = src.convert("RGB")
    except (OSError, ValueError, UnidentifiedImageError) as e:
        logger.error("Could not decode image %s: %s", p, e)
        raise ImageDecodeError(str(e) or type(e).__name__) from e
    except Exception as e:
        # pydicom raises its own exception types for malformed files
        logger.error("Could not decode DICOM %s: %s", p, e)
        raise ImageDecodeError(str(e) or type(e).__name__) from e

    if img.width == 0 or img.height == 0:
        raise ImageDecodeError(f"Image has zero size: {p}")
    return img


def to_display_image(image: Image.Image, size: int = 512) -> Image.Image:
    """
    Return a preview copy that fits into a ``size`` x ``size`` box.

    Parameters
    ----------
    image : PIL.Image
        Source raster (any mode)
    size : int, default=512
        Maximum edge length of the preview

    Returns
    -------
    PIL.Image
        RGB copy, aspect ratio preserved; the source image is not modified
    """
    preview = image.convert("RGB")
    preview.thumbnail((size, size), Image.Resampling.BILINEAR)
    return preview
