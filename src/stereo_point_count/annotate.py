from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence, Tuple

import numpy as np

from .grid import IntersectionPoint
from .pixels import GreyImage, RGBImage, as_pixel_buffer, duplicate_as_rgb

DEFAULT_GRID_COLOR: Tuple[int, int, int] = (255, 0, 0)  # red
DEFAULT_MARKER_COLOR: Tuple[int, int, int] = (0, 255, 0)  # green
DEFAULT_MARKER_RADIUS: float = 5.0

# Markers are dotted rings: a fixed angular step, whatever the radius.
MARKER_ANGLE_STEP: float = 0.1


def _marker_angles() -> np.ndarray:
    angles = []
    angle = 0.0
    while angle < 2.0 * math.pi:
        angles.append(angle)
        angle += MARKER_ANGLE_STEP
    return np.asarray(angles, dtype=np.float64)


_MARKER_ANGLES = _marker_angles()


@dataclass(frozen=True)
class AnnotationRequest:
    """Everything needed to annotate one image."""

    spacing_x: int
    spacing_y: int
    positive_points: Tuple[IntersectionPoint, ...] = ()
    marker_radius: float = DEFAULT_MARKER_RADIUS

    def __post_init__(self) -> None:
        if self.spacing_x <= 0 or self.spacing_y <= 0:
            raise ValueError(f"Grid spacing must be positive, got {self.spacing_x}x{self.spacing_y}.")
        if self.marker_radius < 0:
            raise ValueError("marker_radius must be non-negative.")
        object.__setattr__(
            self,
            "positive_points",
            tuple(IntersectionPoint(int(x), int(y)) for x, y in self.positive_points),
        )

    @classmethod
    def from_result(cls, result: Any, marker_radius: float = DEFAULT_MARKER_RADIUS) -> "AnnotationRequest":
        return cls(
            spacing_x=result.spacing_x,
            spacing_y=result.spacing_y,
            positive_points=tuple(result.positive_points),
            marker_radius=marker_radius,
        )


def _off_intersection(positions: np.ndarray, spacing: int) -> np.ndarray:
    """True where a position is more than one pixel away from every grid line."""
    return (
        (positions % spacing != 0)
        & ((positions - 1) % spacing != 0)
        & ((positions + 1) % spacing != 0)
    )


def grid_line_pixels(width: int, height: int, spacing_x: int, spacing_y: int) -> np.ndarray:
    """Pixels of the grid lines as an ``(N, 2)`` array of ``(x, y)``.

    Lines are broken for one pixel either side of each crossing so the markers
    drawn afterwards stay readable.
    """
    if spacing_x <= 0 or spacing_y <= 0:
        raise ValueError(f"Grid spacing must be positive, got {spacing_x}x{spacing_y}.")

    line_xs = np.arange(spacing_x, width, spacing_x, dtype=np.intp)
    line_ys = np.arange(spacing_y, height, spacing_y, dtype=np.intp)

    all_ys = np.arange(height, dtype=np.intp)
    all_xs = np.arange(width, dtype=np.intp)
    vertical_ys = all_ys[_off_intersection(all_ys, spacing_y)]
    horizontal_xs = all_xs[_off_intersection(all_xs, spacing_x)]

    vx, vy = np.meshgrid(line_xs, vertical_ys, indexing="ij")
    hy, hx = np.meshgrid(line_ys, horizontal_xs, indexing="ij")

    vertical = np.column_stack([vx.ravel(), vy.ravel()])
    horizontal = np.column_stack([hx.ravel(), hy.ravel()])
    return np.concatenate([vertical, horizontal]).astype(np.intp, copy=False)


def marker_pixels(x: int, y: int, radius: float) -> np.ndarray:
    """Centre pixel followed by the dotted ring around ``(x, y)``."""
    ring_x = x + np.floor(radius * np.cos(_MARKER_ANGLES)).astype(np.intp)
    ring_y = y + np.floor(radius * np.sin(_MARKER_ANGLES)).astype(np.intp)
    centre = np.array([[x, y]], dtype=np.intp)
    return np.concatenate([centre, np.column_stack([ring_x, ring_y])])


def markers_pixels(points: Iterable[Sequence[int]], radius: float) -> np.ndarray:
    parts = [marker_pixels(int(x), int(y), radius) for x, y in points]
    if not parts:
        return np.empty((0, 2), dtype=np.intp)
    return np.concatenate(parts)


def _paint(buffer: RGBImage, pixels: np.ndarray, color: Sequence[int]) -> int:
    if pixels.size == 0:
        return 0
    inside = (
        (pixels[:, 0] >= 0)
        & (pixels[:, 0] < buffer.width)
        & (pixels[:, 1] >= 0)
        & (pixels[:, 1] < buffer.height)
    )
    kept = pixels[inside]
    buffer.array[kept[:, 1], kept[:, 0], :3] = np.asarray(color, dtype=np.uint8)[:3]
    return int(kept.shape[0])


def prepare_annotation_buffer(image: Any) -> RGBImage:
    """RGB duplicate of ``image`` ready to be drawn on."""
    return duplicate_as_rgb(image)


def annotate(
    color_buffer: Any,
    request: AnnotationRequest,
    *,
    grid_color: Sequence[int] = DEFAULT_GRID_COLOR,
    marker_color: Sequence[int] = DEFAULT_MARKER_COLOR,
) -> RGBImage:
    """Draw the grid and the positive-point markers onto ``color_buffer`` in place.

    Parameters
    ----------
    color_buffer:
        ``(H, W, 3)`` or ``(H, W, 4)`` uint8 array, or an RGB/RGBA pixel buffer.
        It is modified; pass a duplicate to keep the source intact.
    request:
        Grid spacing, the positive crossings and the marker radius.
    grid_color, marker_color:
        RGB triplets for the grid lines and the markers.

    Returns
    -------
    RGBImage
        The buffer that was drawn on.
    """
    buffer = as_pixel_buffer(color_buffer)
    if isinstance(buffer, GreyImage):
        raise ValueError("annotate expects a colour buffer; use prepare_annotation_buffer() first.")
    if len(grid_color) < 3 or len(marker_color) < 3:
        raise ValueError("Colours must be RGB triplets.")

    grid = grid_line_pixels(buffer.width, buffer.height, request.spacing_x, request.spacing_y)
    _paint(buffer, grid, grid_color)

    markers = markers_pixels(request.positive_points, request.marker_radius)
    _paint(buffer, markers, marker_color)
    return buffer


def render_annotation(
    image: Any,
    request: AnnotationRequest,
    *,
    grid_color: Sequence[int] = DEFAULT_GRID_COLOR,
    marker_color: Sequence[int] = DEFAULT_MARKER_COLOR,
) -> np.ndarray:
    """Annotate an RGB copy of ``image`` and return the ``(H, W, 3)`` uint8 array."""
    buffer = prepare_annotation_buffer(image)
    annotate(buffer, request, grid_color=grid_color, marker_color=marker_color)
    return buffer.array
