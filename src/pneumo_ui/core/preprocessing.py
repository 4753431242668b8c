"""
Image Preprocessing
===================

Turns a source raster into the normalized tensor the pneumonia classifier
was trained on.

Pipeline
--------
1. Convert to RGB and resize to 224x224 with bilinear interpolation
2. Luminance per pixel: ``R*0.30 + G*0.59 + B*0.11``, truncated to an
   integer in [0, 255]
3. Row-major packing (y outer, x inner) into float32, divided by 255.0

The output has shape ``(224, 224, 1)``; :func:`to_model_input` adds the
batch axis expected by the classifier, ``(1, 224, 224, 1)``.

Notes
-----
**Truncation, not rounding**: the luminance value is computed in double
precision and cast to an integer the same way the model's training pipeline
did.

An equal-channel RGB version of the grayscale image is only produced for
display (:func:`grayscale_preview`); the tensor is built from the single
luminance channel directly, which yields identical values.

See Also
--------
pneumo_ui.core.classifier : Consumes the tensor
"""

import numpy as np
from PIL import Image

from .errors import ImageDecodeError

INPUT_SIZE = 224
LUMA_WEIGHTS = (0.30, 0.59, 0.11)
RESAMPLE = Image.Resampling.BILINEAR


def _check_image(image) -> None:
    if image is None:
        raise ImageDecodeError("No source image")
    if not isinstance(image, Image.Image):
        raise ImageDecodeError(f"Expected a PIL image, got {type(image).__name__}")
    if image.width == 0 or image.height == 0:
        raise ImageDecodeError("Source image has zero size")


def resize_for_model(image: Image.Image) -> Image.Image:
    """Resize to ``INPUT_SIZE`` x ``INPUT_SIZE`` RGB with bilinear filtering."""
    _check_image(image)
    return image.convert("RGB").resize((INPUT_SIZE, INPUT_SIZE), RESAMPLE)


def grayscale_luminance(rgb: np.ndarray) -> np.ndarray:
    """
    Convert an ``(H, W, 3)`` uint8 array to truncated integer luminance.

    Parameters
    ----------
    rgb : np.ndarray
        RGB pixel data, shape (H, W, 3)

    Returns
    -------
    np.ndarray
        uint8 array of shape (H, W), values in [0, 255]

    Examples
    --------
    >>> import numpy as np
    >>> px = np.array([[[100, 150, 200]]], dtype=np.uint8)
    >>> grayscale_luminance(px)  # 30.0 + 88.5 + 22.0 = 140.5 -> 140
    array([[140]], dtype=uint8)
    """
    arr = np.asarray(rgb, dtype=np.float64)
    r, g, b = arr[..., 0], arr[..., 1], arr[..., 2]
    wr, wg, wb = LUMA_WEIGHTS
    gray = wr * r + wg * g + wb * b
    return np.clip(np.trunc(gray), 0, 255).astype(np.uint8)


def preprocess(image: Image.Image) -> np.ndarray:
    """
    Normalize a source image into the classifier's input tensor.

    Parameters
    ----------
    image : PIL.Image
        Source raster of any size; converted to RGB if needed

    Returns
    -------
    np.ndarray
        float32 array of shape (224, 224, 1), every value in [0, 1]

    Raises
    ------
    ImageDecodeError
        If ``image`` is None, not a PIL image, or has zero size

    Examples
    --------
    >>> from PIL import Image
    >>> t = preprocess(Image.new("RGB", (640, 480), (0, 255, 0)))
    >>> t.shape, t.dtype
    ((224, 224, 1), dtype('float32'))
    """
    resized = resize_for_model(image)
    gray = grayscale_luminance(np.asarray(resized, dtype=np.uint8))
    tensor = gray.astype(np.float32) / np.float32(255.0)
    return np.ascontiguousarray(tensor.reshape(INPUT_SIZE, INPUT_SIZE, 1))


def to_model_input(tensor: np.ndarray) -> np.ndarray:
    """Add the batch axis: ``(224, 224, 1)`` -> ``(1, 224, 224, 1)``."""
    return np.ascontiguousarray(tensor, dtype=np.float32)[np.newaxis, ...]


def grayscale_preview(image: Image.Image) -> Image.Image:
    """
    Return the resized luminance image re-expanded to three equal channels.

    Shown next to the source image in the GUI so the user sees what the
    classifier receives.
    """
    gray = grayscale_luminance(np.asarray(resize_for_model(image), dtype=np.uint8))
    return Image.fromarray(np.repeat(gray[..., np.newaxis], 3, axis=2))
