"""
Grid spacing and intersection enumeration.

A grid of ``count_x`` vertical and ``count_y`` horizontal lines is laid over an
image. Lines sit at whole multiples of the pixel spacing, starting one spacing
in from the top-left corner, so only interior crossings are ever sampled.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, NamedTuple

import numpy as np

from .errors import ConfigurationError, SamplingDegeneracyError

logger = logging.getLogger(__name__)

SPACING_POLICY_RAISE = "raise"
SPACING_POLICY_CLAMP = "clamp"
SPACING_POLICIES: tuple[str, ...] = (SPACING_POLICY_RAISE, SPACING_POLICY_CLAMP)


class IntersectionPoint(NamedTuple):
    x: int
    y: int


def compute_spacing(dimension: int, requested_count: int) -> int:
    """Return ``floor(dimension / requested_count)``.

    The division is real valued before flooring. The result is 0 when
    ``requested_count`` exceeds ``dimension``; callers decide how to treat that
    (see :meth:`GridSpec.from_dimensions`).
    """
    if requested_count <= 0:
        raise ConfigurationError(f"Grid count must be a positive integer, got {requested_count}.")
    if dimension < 0:
        raise ValueError(f"Image dimension must be non-negative, got {dimension}.")
    return int(math.floor(float(dimension) / float(requested_count)))


@dataclass(frozen=True)
class GridSpec:
    """Requested grid counts and the derived pixel spacing for one image."""

    count_x: int
    count_y: int
    spacing_x: int
    spacing_y: int

    def __post_init__(self) -> None:
        if self.spacing_x <= 0 or self.spacing_y <= 0:
            raise SamplingDegeneracyError(
                f"Grid spacing must be at least one pixel, got {self.spacing_x}x{self.spacing_y}."
            )

    @classmethod
    def from_dimensions(
        cls,
        width: int,
        height: int,
        count_x: int,
        count_y: int,
        *,
        spacing_policy: str = SPACING_POLICY_RAISE,
    ) -> "GridSpec":
        """Build the grid for a ``width`` x ``height`` image.

        With the ``"raise"`` policy a grid count larger than the matching image
        dimension raises :class:`SamplingDegeneracyError`. With ``"clamp"`` the
        collapsed spacing is clamped to a single pixel.
        """
        if spacing_policy not in SPACING_POLICIES:
            raise ConfigurationError(
                f"Unknown spacing policy '{spacing_policy}', expected one of {SPACING_POLICIES}."
            )
        spacing_x = compute_spacing(width, count_x)
        spacing_y = compute_spacing(height, count_y)

        if spacing_x < 1 or spacing_y < 1:
            if spacing_policy == SPACING_POLICY_RAISE:
                raise SamplingDegeneracyError(
                    f"Grid {count_x}x{count_y} is finer than the {width}x{height} image "
                    f"(spacing {spacing_x}x{spacing_y})."
                )
            logger.warning(
                "Grid %dx%d exceeds image size %dx%d; clamping spacing %dx%d to at least 1 pixel.",
                count_x,
                count_y,
                width,
                height,
                spacing_x,
                spacing_y,
            )
            spacing_x = max(spacing_x, 1)
            spacing_y = max(spacing_y, 1)

        return cls(count_x=count_x, count_y=count_y, spacing_x=spacing_x, spacing_y=spacing_y)

    @property
    def grid_size_label(self) -> str:
        return f"{self.count_x}x{self.count_y}"

    @property
    def spacing_label(self) -> str:
        return f"{self.spacing_x}x{self.spacing_y}"


def _line_positions(bound: int, spacing: int) -> np.ndarray:
    if spacing <= 0:
        raise SamplingDegeneracyError(f"Grid spacing must be positive, got {spacing}.")
    return np.arange(spacing, bound, spacing, dtype=np.intp)


@dataclass(frozen=True)
class GridSampler:
    """Restartable sequence of the interior grid crossings of an image.

    Iteration is x-major: every ``y`` for the first vertical line, then the
    next line, and so on.
    """

    width: int
    height: int
    spacing_x: int
    spacing_y: int

    def __post_init__(self) -> None:
        if self.spacing_x <= 0 or self.spacing_y <= 0:
            raise SamplingDegeneracyError(
                f"Grid spacing must be positive, got {self.spacing_x}x{self.spacing_y}."
            )

    @classmethod
    def for_grid(cls, width: int, height: int, grid: GridSpec) -> "GridSampler":
        return cls(width, height, grid.spacing_x, grid.spacing_y)

    @property
    def xs(self) -> np.ndarray:
        """x positions of the vertical grid lines."""
        return _line_positions(self.width, self.spacing_x)

    @property
    def ys(self) -> np.ndarray:
        """y positions of the horizontal grid lines."""
        return _line_positions(self.height, self.spacing_y)

    def __iter__(self) -> Iterator[IntersectionPoint]:
        ys = self.ys.tolist()
        for x in self.xs.tolist():
            for y in ys:
                yield IntersectionPoint(x, y)

    def __len__(self) -> int:
        return len(self.xs) * len(self.ys)

    def as_array(self) -> np.ndarray:
        """Return the crossings as an ``(N, 2)`` array of ``(x, y)`` in iteration order."""
        xx, yy = np.meshgrid(self.xs, self.ys, indexing="ij")
        return np.column_stack([xx.ravel(), yy.ravel()])


def sample_intersections(width: int, height: int, spacing_x: int, spacing_y: int) -> GridSampler:
    return GridSampler(width, height, spacing_x, spacing_y)
