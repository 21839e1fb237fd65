"""Pixel buffer adapters over numpy arrays.

Every adapter exposes the same small capability set used by the counting and
annotation code: ``width``, ``height``, ``get_intensity(x, y)`` and
``set_color(x, y, color)``. Arrays are indexed ``[y, x]``.
"""

from __future__ import annotations

from typing import Any, Sequence, Union

import numpy as np
from skimage.color import gray2rgb, rgb2gray
from skimage.util import img_as_ubyte

Color = Sequence[int]


def _as_uint8(arr: np.ndarray) -> np.ndarray:
    if arr.dtype == np.uint8:
        return arr
    if arr.dtype == bool:
        return arr.astype(np.uint8) * 255
    if np.issubdtype(arr.dtype, np.signedinteger):
        # signed intensities are clipped, never rescaled
        return np.clip(arr, 0, 255).astype(np.uint8)
    return img_as_ubyte(arr)


def _squeeze_singleton(arr: np.ndarray) -> np.ndarray:
    if arr.ndim == 4 and arr.shape[0] == 1:
        arr = arr[0]
    if arr.ndim == 3 and arr.shape[-1] == 1:
        return arr[..., 0]
    # (1, W, 3) and (1, W, 4) are single-row colour images, not stacks
    if arr.ndim == 3 and arr.shape[0] == 1 and arr.shape[-1] not in (3, 4):
        return arr[0]
    return arr


class _ArrayImage:
    channels: int = 1

    def __init__(self, array: np.ndarray) -> None:
        self.array = array

    @property
    def height(self) -> int:
        return int(self.array.shape[0])

    @property
    def width(self) -> int:
        return int(self.array.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return self.height, self.width

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def duplicate(self):
        return type(self)(self.array.copy())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.width}x{self.height})"


class GreyImage(_ArrayImage):
    """8-bit single channel image."""

    def __init__(self, array: np.ndarray) -> None:
        arr = _squeeze_singleton(np.asarray(array))
        if arr.ndim != 2:
            raise ValueError(f"Greyscale image must be 2D; received shape {arr.shape}.")
        super().__init__(_as_uint8(arr))

    def get_intensity(self, x: int, y: int) -> int:
        return int(self.array[y, x])

    def set_color(self, x: int, y: int, color: Union[int, Color]) -> None:
        if not isinstance(color, (int, np.integer)):
            color = int(round(float(np.mean(np.asarray(color)[:3]))))
        self.array[y, x] = color

    def to_rgb(self) -> "RGBImage":
        return RGBImage(gray2rgb(self.array))


class RGBImage(_ArrayImage):
    """8-bit three channel image. Intensity is the luminance of the pixel."""

    channels = 3

    def __init__(self, array: np.ndarray) -> None:
        arr = np.asarray(array)
        if arr.ndim != 3 or arr.shape[-1] != self.channels:
            raise ValueError(
                f"{type(self).__name__} expects shape (H, W, {self.channels}); received {arr.shape}."
            )
        super().__init__(_as_uint8(arr))
        self._grey = None

    def get_intensity(self, x: int, y: int) -> int:
        if self._grey is None:
            self._grey = img_as_ubyte(rgb2gray(self.array[..., :3]))
        return int(self._grey[y, x])

    def set_color(self, x: int, y: int, color: Color) -> None:
        self.array[y, x, :3] = np.asarray(color, dtype=np.uint8)[:3]
        self._grey = None

    def to_rgb(self) -> "RGBImage":
        return RGBImage(self.array[..., :3].copy())


class RGBAImage(RGBImage):
    """8-bit four channel image; annotation leaves alpha untouched."""

    channels = 4


PixelBuffer = Union[GreyImage, RGBImage, RGBAImage]


def as_pixel_buffer(image: Any) -> PixelBuffer:
    """Wrap an array (or pass through an adapter) in the matching pixel buffer."""
    if isinstance(image, _ArrayImage):
        return image
    arr = _squeeze_singleton(np.asarray(image))
    if arr.ndim == 2:
        return GreyImage(arr)
    if arr.ndim == 3 and arr.shape[-1] == 3:
        return RGBImage(arr)
    if arr.ndim == 3 and arr.shape[-1] == 4:
        return RGBAImage(arr)
    raise ValueError(f"Unsupported image shape {arr.shape}; expected (H, W), (H, W, 3) or (H, W, 4).")


def duplicate_as_rgb(image: Any) -> RGBImage:
    """Return an RGB copy of ``image``; the source buffer is never modified."""
    buffer = as_pixel_buffer(image)
    rgb = buffer.to_rgb()
    if rgb.array is buffer.array:
        rgb = rgb.duplicate()
    return rgb
