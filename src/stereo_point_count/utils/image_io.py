from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
import tifffile
from skimage import io as skio

from ..errors import PerImageIOError
from ..grid import GridSpec
from ..pixels import PixelBuffer, as_pixel_buffer

logger = logging.getLogger(__name__)

_TIFF_SUFFIXES = (".tif", ".tiff")


def _is_tiff(path: Path) -> bool:
    return path.suffix.lower() in _TIFF_SUFFIXES


def read_image(path: Union[str, Path]) -> PixelBuffer:
    """Read ``path`` into a pixel buffer; any decode failure becomes PerImageIOError."""
    path = Path(path)
    try:
        if _is_tiff(path):
            arr = tifffile.imread(path)
        else:
            arr = skio.imread(path)
    except Exception as exc:
        raise PerImageIOError(path, f"cannot read image ({exc})") from exc

    arr = np.asarray(arr)
    if arr.dtype != np.uint8:
        logger.debug("%s has dtype %s; converting to 8-bit.", path, arr.dtype)
    try:
        buffer = as_pixel_buffer(arr)
    except ValueError as exc:
        raise PerImageIOError(path, str(exc)) from exc
    if buffer.width == 0 or buffer.height == 0:
        raise PerImageIOError(path, f"image has no pixels (shape {arr.shape})")
    return buffer


def annotated_file_name(source_path: Union[str, Path], grid: GridSpec, threshold: int) -> str:
    """``grid<gx>x<gy>_pixel<sx>x<sy>_thresh<t>.<original file name>``"""
    return (
        f"grid{grid.count_x}x{grid.count_y}"
        f"_pixel{grid.spacing_x}x{grid.spacing_y}"
        f"_thresh{threshold}.{Path(source_path).name}"
    )


def write_image(path: Union[str, Path], image: np.ndarray) -> Path:
    path = Path(path)
    try:
        if _is_tiff(path):
            tifffile.imwrite(path, image)
        else:
            skio.imsave(path, image, check_contrast=False)
    except Exception as exc:
        raise PerImageIOError(path, f"cannot write image ({exc})") from exc
    return path


def write_annotated_image(
    image: np.ndarray,
    save_dir: Union[str, Path],
    source_path: Union[str, Path],
    grid: GridSpec,
    threshold: int,
) -> Path:
    out_path = Path(save_dir) / annotated_file_name(source_path, grid, threshold)
    write_image(out_path, image)
    logger.info("Saved annotated image %s", out_path)
    return out_path
