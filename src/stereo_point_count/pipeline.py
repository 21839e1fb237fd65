"""
Per-image processing and the sequential batch driver.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from .annotate import AnnotationRequest, render_annotation
from .classify import Classification, classify_points
from .config import PointCountConfig
from .errors import PerImageIOError, SamplingDegeneracyError
from .grid import GridSampler, GridSpec
from .pixels import PixelBuffer, as_pixel_buffer
from .summary import ImageResult, RunSummary
from .utils.image_io import read_image, write_annotated_image

logger = logging.getLogger(__name__)

ResultCallback = Callable[[ImageResult], None]


def count_points(image: Any, config: PointCountConfig) -> Tuple[GridSpec, Classification]:
    """Lay the configured grid over ``image`` and classify every crossing."""
    buffer = as_pixel_buffer(image)
    grid = GridSpec.from_dimensions(
        buffer.width,
        buffer.height,
        config.grid_x,
        config.grid_y,
        spacing_policy=config.spacing_policy,
    )
    sampler = GridSampler.for_grid(buffer.width, buffer.height, grid)
    classification = classify_points(sampler, buffer, config.threshold)
    return grid, classification


def process_buffer(
    buffer: PixelBuffer,
    image_path: Union[str, Path],
    config: PointCountConfig,
    *,
    index: Optional[int] = None,
) -> ImageResult:
    grid, classification = count_points(buffer, config)
    result = ImageResult(
        image_path=image_path,
        grid=grid,
        positive_count=classification.positive_count,
        total_count=classification.total_count,
        index=index,
        positive_points=tuple(classification.positive_points),
    )
    logger.debug(
        "%s: grid %s, spacing %s, %d/%d positive",
        image_path,
        grid.grid_size_label,
        grid.spacing_label,
        result.positive_count,
        result.total_count,
    )

    if config.save_images:
        request = AnnotationRequest.from_result(result, marker_radius=config.marker_radius)
        annotated = render_annotation(
            buffer,
            request,
            grid_color=config.grid_color,
            marker_color=config.marker_color,
        )
        write_annotated_image(annotated, config.save_dir, image_path, grid, config.threshold)
    return result


def process_image(image_path: Union[str, Path], config: PointCountConfig, *, index: Optional[int] = None) -> ImageResult:
    """Read, count and (optionally) annotate a single image file."""
    buffer = read_image(image_path)
    return process_buffer(buffer, image_path, config, index=index)


@dataclass
class BatchResult:
    results: List[ImageResult] = field(default_factory=list)
    summary: RunSummary = field(default_factory=RunSummary)

    @property
    def failures(self):
        return self.summary.failures


def run_batch(
    image_paths: Sequence[Union[str, Path]],
    config: PointCountConfig,
    *,
    on_result: Optional[ResultCallback] = None,
) -> BatchResult:
    """
    Process ``image_paths`` one at a time, in order.

    A failing image (unreadable file, grid finer than the image) is logged and
    recorded in the summary; it contributes nothing to the totals and the
    batch carries on.

    Args:
        image_paths: Images to process; results keep this order.
        config: Grid, threshold and output settings.
        on_result: Called with each ImageResult as soon as it is available.

    Returns:
        BatchResult with the per-image results and the run summary, whose
        ``elapsed_seconds`` covers the whole loop.
    """
    batch = BatchResult()
    start = time.perf_counter()

    for index, image_path in enumerate(image_paths):
        try:
            result = process_image(image_path, config, index=index)
        except (PerImageIOError, SamplingDegeneracyError) as exc:
            logger.error("Skipping %s: %s", image_path, exc)
            batch.summary.record_failure(image_path, str(exc), index=index)
            continue

        batch.summary.accumulate(result)
        batch.results.append(result)
        if on_result is not None:
            on_result(result)

    batch.summary.elapsed_seconds = time.perf_counter() - start
    logger.info(
        "Processed %d image(s), %d failed; positive ratio %s",
        len(batch.results),
        len(batch.summary.failures),
        batch.summary.finalize(),
    )
    return batch
