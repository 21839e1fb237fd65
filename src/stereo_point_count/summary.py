"""
Per-image results and their run-wide accumulation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Hashable, Iterable, List, Optional, Tuple, Union

from .grid import GridSpec, IntersectionPoint

# Column order of the per-image rows in the CSV report.
RESULT_FIELD_ORDER: tuple[str, ...] = (
    "Image",
    "GridSize",
    "GridSizePixel",
    "Positive",
    "Total",
)

# Column order of the trailing run summary block.
SUMMARY_FIELD_ORDER: tuple[str, ...] = (
    "Seconds",
    "GrandTotalPositive",
    "GrandTotal",
)


@dataclass(frozen=True)
class ImageResult:
    """Counts for one image. ``index`` is its position in the input list."""

    image_path: Union[str, Path]
    grid: GridSpec
    positive_count: int
    total_count: int
    index: Optional[int] = None
    positive_points: Tuple[IntersectionPoint, ...] = field(default=(), repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.total_count < 0 or self.positive_count < 0:
            raise ValueError("Counts must be non-negative.")
        if self.positive_count > self.total_count:
            raise ValueError(
                f"positive_count ({self.positive_count}) cannot exceed total_count ({self.total_count})."
            )

    @property
    def negative_count(self) -> int:
        return self.total_count - self.positive_count

    @property
    def spacing_x(self) -> int:
        return self.grid.spacing_x

    @property
    def spacing_y(self) -> int:
        return self.grid.spacing_y

    @property
    def key(self) -> Hashable:
        return self.index if self.index is not None else str(self.image_path)

    def as_row(self) -> Dict[str, object]:
        return {
            "Image": str(self.image_path),
            "GridSize": self.grid.grid_size_label,
            "GridSizePixel": self.grid.spacing_label,
            "Positive": self.positive_count,
            "Total": self.total_count,
        }


@dataclass(frozen=True)
class RatioResult:
    """Positive to total ratio; ``value`` is None when no points were counted."""

    positive: int
    total: int

    @property
    def defined(self) -> bool:
        return self.total > 0

    @property
    def value(self) -> Optional[float]:
        if not self.defined:
            return None
        return self.positive / self.total

    def __str__(self) -> str:
        if not self.defined:
            return f"{self.positive}/{self.total} = undefined"
        return f"{self.positive}/{self.total} = {self.value:g}"


@dataclass
class FailedImage:
    image_path: Union[str, Path]
    index: Optional[int]
    reason: str


@dataclass
class RunSummary:
    """Running totals across every image of a run."""

    elapsed_seconds: float = 0.0
    grand_positive: int = 0
    grand_total: int = 0
    failures: List[FailedImage] = field(default_factory=list)
    _applied: set = field(default_factory=set, init=False, repr=False)

    @classmethod
    def from_results(cls, results: Iterable[ImageResult]) -> "RunSummary":
        summary = cls()
        for result in results:
            summary.accumulate(result)
        return summary

    @property
    def grand_negative(self) -> int:
        return self.grand_total - self.grand_positive

    @property
    def image_count(self) -> int:
        return len(self._applied)

    def accumulate(self, result: ImageResult) -> "RunSummary":
        """Add one image's counts. Applying the same image twice is an error."""
        key = result.key
        if key in self._applied:
            raise ValueError(f"Result for image {key!r} has already been accumulated.")
        self._applied.add(key)
        self.grand_positive += result.positive_count
        self.grand_total += result.total_count
        return self

    def record_failure(self, image_path: Union[str, Path], reason: str, index: Optional[int] = None) -> None:
        self.failures.append(FailedImage(image_path, index, reason))

    def merge(self, other: "RunSummary") -> "RunSummary":
        """Combine two summaries built from disjoint sets of images."""
        overlap = self._applied & other._applied
        if overlap:
            raise ValueError(f"Summaries share images {sorted(map(str, overlap))}; refusing to double count.")
        merged = RunSummary(
            elapsed_seconds=max(self.elapsed_seconds, other.elapsed_seconds),
            grand_positive=self.grand_positive + other.grand_positive,
            grand_total=self.grand_total + other.grand_total,
            failures=[*self.failures, *other.failures],
        )
        merged._applied = self._applied | other._applied
        return merged

    def finalize(self) -> RatioResult:
        return RatioResult(self.grand_positive, self.grand_total)

    @property
    def ratio(self) -> Optional[float]:
        return self.finalize().value

    def as_row(self) -> Dict[str, object]:
        return {
            "Seconds": self.elapsed_seconds,
            "GrandTotalPositive": self.grand_positive,
            "GrandTotal": self.grand_total,
        }
