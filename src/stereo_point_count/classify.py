"""Threshold classification of sampled grid crossings."""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Callable, Iterable, List, NamedTuple, Tuple, Union

from .errors import ConfigurationError
from .grid import IntersectionPoint

MIN_THRESHOLD = 0
MAX_THRESHOLD = 255

IntensityLookup = Callable[[int, int], int]


class ClassifiedPoint(NamedTuple):
    x: int
    y: int
    intensity: int
    positive: bool

    @property
    def location(self) -> IntersectionPoint:
        return IntersectionPoint(self.x, self.y)


@dataclass(frozen=True)
class Classification:
    """Classified crossings of one image plus their counts.

    ``negative_count`` is always derived from the other two counts.
    """

    points: Tuple[ClassifiedPoint, ...]
    positive_count: int
    total_count: int

    @property
    def negative_count(self) -> int:
        return self.total_count - self.positive_count

    @property
    def positive_points(self) -> List[IntersectionPoint]:
        return [point.location for point in self.points if point.positive]

    @property
    def negative_points(self) -> List[IntersectionPoint]:
        return [point.location for point in self.points if not point.positive]


def validate_threshold(threshold: int) -> int:
    if isinstance(threshold, bool) or not isinstance(threshold, numbers.Integral):
        raise ConfigurationError(f"Threshold must be an integer, got {threshold!r}.")
    if not MIN_THRESHOLD <= threshold <= MAX_THRESHOLD:
        raise ConfigurationError(
            f"Threshold must be between {MIN_THRESHOLD} and {MAX_THRESHOLD}, got {threshold}."
        )
    return int(threshold)


def _resolve_lookup(intensity_lookup: Union[IntensityLookup, object]) -> IntensityLookup:
    getter = getattr(intensity_lookup, "get_intensity", None)
    if getter is not None:
        return getter
    if callable(intensity_lookup):
        return intensity_lookup
    raise TypeError(
        "intensity_lookup must be a callable (x, y) -> int or provide a get_intensity(x, y) method."
    )


def classify_points(
    points: Iterable[IntersectionPoint],
    intensity_lookup: Union[IntensityLookup, object],
    threshold: int,
) -> Classification:
    """Classify every point as positive when its intensity is at least ``threshold``.

    Args:
        points: Grid crossings, typically a :class:`~stereo_point_count.grid.GridSampler`.
        intensity_lookup: ``(x, y) -> intensity`` callable or a pixel buffer.
        threshold: Inclusive lower bound for a positive hit (0 - 255).

    Returns:
        Classification holding the points in input order with their counts.
    """
    threshold = validate_threshold(threshold)
    lookup = _resolve_lookup(intensity_lookup)

    classified: List[ClassifiedPoint] = []
    positive_count = 0
    for x, y in points:
        intensity = int(lookup(x, y))
        positive = intensity >= threshold
        if positive:
            positive_count += 1
        classified.append(ClassifiedPoint(int(x), int(y), intensity, positive))

    return Classification(
        points=tuple(classified),
        positive_count=positive_count,
        total_count=len(classified),
    )
