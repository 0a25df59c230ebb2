"""Image helpers for detection models: letterboxing and box rescaling."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from PIL import Image

_F32 = np.float32


@dataclass(frozen=True)
class Rect:
    """An axis-aligned box given by its top-left corner and its size."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


@dataclass
class Detection:
    """One detected object: its box, its confidence and its class."""

    box: Rect = field(default_factory=Rect)
    conf: float = 0.0
    class_id: int = -1


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(float(value)) + 0.5), value))


def _resize(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize an (H, W) or (H, W, C) array with bilinear interpolation."""
    bilinear = Image.Resampling.BILINEAR
    if image.dtype == np.uint8 and (
        image.ndim == 2 or (image.ndim == 3 and image.shape[2] in (3, 4))
    ):
        return np.asarray(Image.fromarray(image).resize((width, height), bilinear))

    planes = image[..., np.newaxis] if image.ndim == 2 else image
    resized = [
        np.asarray(
            Image.fromarray(np.ascontiguousarray(planes[..., c], dtype=np.float32)).resize(
                (width, height), bilinear
            )
        )
        for c in range(planes.shape[2])
    ]
    result = np.stack(resized, axis=-1)
    if np.issubdtype(image.dtype, np.integer):
        info = np.iinfo(image.dtype)
        result = np.clip(np.rint(result), info.min, info.max)
    result = result.astype(image.dtype)
    return result[..., 0] if image.ndim == 2 else result


def _border_fill(color: Sequence[float], channels: int | None) -> np.ndarray | float:
    values = list(color)
    if channels is None:
        return values[0] if values else 0
    values = (values + [0] * channels)[:channels]
    return np.asarray(values)


def letterbox(
    image: np.ndarray,
    new_shape: tuple[int, int] = (640, 640),
    stride: int = 32,
    color: Sequence[float] = (114, 114, 114),
    fixed_shape: bool = False,
    scale_up: bool = False,
) -> tuple[np.ndarray, float]:
    """Resize ``image`` keeping its aspect ratio and pad it with ``color``.

    ``image`` is an (H, W) or (H, W, C) array and ``new_shape`` is
    ``(width, height)``. Unless ``fixed_shape`` is set, the padding is
    reduced to the remainder modulo ``stride``. Returns the padded image
    and the inverse of the scale that was applied.
    """
    image = np.asarray(image)
    if image.ndim not in (2, 3) or image.size == 0:
        raise ValueError("image must be a non-empty (H, W) or (H, W, C) array")
    if not fixed_shape and stride <= 0:
        raise ValueError("stride must be greater than zero")

    new_w, new_h = (int(v) for v in new_shape)
    height, width = image.shape[:2]
    ratio = min(_F32(new_h) / _F32(height), _F32(new_w) / _F32(width))
    if not scale_up:
        ratio = min(ratio, _F32(1.0))

    unpad_w = _round_half_away(_F32(width) * ratio)
    unpad_h = _round_half_away(_F32(height) * ratio)

    if (width, height) != (unpad_w, unpad_h):
        resized = _resize(image, unpad_w, unpad_h)
    else:
        resized = image.copy()

    dw = _F32(new_w - unpad_w)
    dh = _F32(new_h - unpad_h)
    if not fixed_shape:
        dw = _F32(math.fmod(int(dw), stride))
        dh = _F32(math.fmod(int(dh), stride))
    dw /= _F32(2.0)
    dh /= _F32(2.0)

    top = _round_half_away(dh - _F32(0.1))
    bottom = _round_half_away(dh + _F32(0.1))
    left = _round_half_away(dw - _F32(0.1))
    right = _round_half_away(dw + _F32(0.1))

    channels = resized.shape[2] if resized.ndim == 3 else None
    out_shape = (unpad_h + top + bottom, unpad_w + left + right) + (
        (channels,) if channels is not None else ()
    )
    out = np.empty(out_shape, dtype=resized.dtype)
    out[...] = _border_fill(color, channels)
    out[top:top + unpad_h, left:left + unpad_w] = resized
    return out, float(_F32(1.0) / ratio)


def _clip(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def scale_coords(
    img_shape: tuple[int, int], coords: Rect, img_origin_shape: tuple[int, int]
) -> Rect:
    """Map a box from a letterboxed image back onto the original image.

    Both shapes are ``(width, height)``. The result is clipped to the
    original image's size.
    """
    shape_w, shape_h = (int(v) for v in img_shape)
    origin_w, origin_h = (int(v) for v in img_origin_shape)
    if origin_w <= 0 or origin_h <= 0:
        raise ValueError("original image size must be positive")

    gain = min(_F32(shape_h) / _F32(origin_h), _F32(shape_w) / _F32(origin_w))
    pad_x = int((_F32(shape_w) - _F32(origin_w) * gain) / _F32(2.0))
    pad_y = int((_F32(shape_h) - _F32(origin_h) * gain) / _F32(2.0))

    x = _round_half_away(_F32(coords.x - pad_x) / gain)
    y = _round_half_away(_F32(coords.y - pad_y) / gain)
    width = _round_half_away(_F32(coords.width) / gain)
    height = _round_half_away(_F32(coords.height) / gain)

    return Rect(
        x=_clip(x, 0, origin_w),
        y=_clip(y, 0, origin_h),
        width=_clip(width, 0, origin_w),
        height=_clip(height, 0, origin_h),
    )