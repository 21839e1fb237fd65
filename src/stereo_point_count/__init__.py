"""
Stereological point counting.

Lays a regular grid over greyscale images, classifies each grid crossing
against an intensity threshold and tallies positive hits per image and per run.
"""

__version__ = "1.0.0"

from .grid import GridSampler, GridSpec, IntersectionPoint, compute_spacing, sample_intersections
from .classify import Classification, ClassifiedPoint, classify_points
from .summary import ImageResult, RatioResult, RunSummary
from .annotate import AnnotationRequest, annotate, grid_line_pixels, marker_pixels, render_annotation
from .config import PointCountConfig
from .errors import (
    ConfigurationError,
    InputResolutionError,
    PerImageIOError,
    SamplingDegeneracyError,
    StereoPointCountError,
)
from .pipeline import count_points, process_image, run_batch

__all__ = [
    "GridSampler",
    "GridSpec",
    "IntersectionPoint",
    "compute_spacing",
    "sample_intersections",
    "Classification",
    "ClassifiedPoint",
    "classify_points",
    "ImageResult",
    "RatioResult",
    "RunSummary",
    "AnnotationRequest",
    "annotate",
    "grid_line_pixels",
    "marker_pixels",
    "render_annotation",
    "PointCountConfig",
    "ConfigurationError",
    "InputResolutionError",
    "PerImageIOError",
    "SamplingDegeneracyError",
    "StereoPointCountError",
    "count_points",
    "process_image",
    "run_batch",
]
