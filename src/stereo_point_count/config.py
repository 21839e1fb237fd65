"""Run configuration for a point counting batch."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .annotate import DEFAULT_GRID_COLOR, DEFAULT_MARKER_COLOR, DEFAULT_MARKER_RADIUS
from .classify import validate_threshold
from .errors import ConfigurationError
from .grid import SPACING_POLICIES, SPACING_POLICY_CLAMP, SPACING_POLICY_RAISE


def _validate_color(name: str, color: Tuple[int, ...]) -> Tuple[int, int, int]:
    if len(color) != 3 or any(not 0 <= int(c) <= 255 for c in color):
        raise ConfigurationError(f"{name} must be three integers between 0 and 255, got {color!r}.")
    return tuple(int(c) for c in color)


@dataclass(frozen=True)
class PointCountConfig:
    """Grid, threshold and output settings shared by every image of a run."""

    grid_x: int
    grid_y: int
    threshold: int
    save_dir: Optional[Path] = None
    marker_radius: float = DEFAULT_MARKER_RADIUS
    grid_color: Tuple[int, int, int] = DEFAULT_GRID_COLOR
    marker_color: Tuple[int, int, int] = DEFAULT_MARKER_COLOR
    spacing_policy: str = SPACING_POLICY_RAISE

    def __post_init__(self) -> None:
        for name, value in (("gridx", self.grid_x), ("gridy", self.grid_y)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"--{name} must be a positive integer, got {value!r}.")
        validate_threshold(self.threshold)
        if self.marker_radius < 0:
            raise ConfigurationError(f"Marker radius must be non-negative, got {self.marker_radius}.")
        if self.spacing_policy not in SPACING_POLICIES:
            raise ConfigurationError(
                f"Unknown spacing policy '{self.spacing_policy}', expected one of {SPACING_POLICIES}."
            )
        object.__setattr__(self, "grid_color", _validate_color("grid_color", self.grid_color))
        object.__setattr__(self, "marker_color", _validate_color("marker_color", self.marker_color))
        if self.save_dir is not None:
            object.__setattr__(self, "save_dir", Path(self.save_dir))

    @property
    def save_images(self) -> bool:
        return self.save_dir is not None


def config_from_args(args: argparse.Namespace) -> PointCountConfig:
    """Build a :class:`PointCountConfig` from parsed command line arguments."""
    return PointCountConfig(
        grid_x=args.gridx,
        grid_y=args.gridy,
        threshold=args.threshold,
        save_dir=Path(args.saveimages) if args.saveimages else None,
        marker_radius=args.radius,
        spacing_policy=SPACING_POLICY_CLAMP if args.clamp_spacing else SPACING_POLICY_RAISE,
    )
