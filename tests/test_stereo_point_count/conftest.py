from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Set, Tuple

import pytest
from skimage import io as skio

from .tools.demo_grid_image_generator import generate_test_grid_image

from stereo_point_count.config import PointCountConfig


@pytest.fixture
def grid_image() -> Dict[str, object]:
    image, positives = generate_test_grid_image(width=100, height=80, grid_x=4, grid_y=4, seed=7)
    return {"image": image, "positives": positives}


@pytest.fixture
def default_config() -> PointCountConfig:
    return PointCountConfig(grid_x=4, grid_y=4, threshold=128)


@pytest.fixture
def png_images(tmp_path: Path) -> List[Tuple[Path, Set[Tuple[int, int]]]]:
    """Three PNG files on disk with their expected positive crossings."""
    img_dir = tmp_path / "images"
    img_dir.mkdir()
    written = []
    for i, (width, height) in enumerate([(100, 80), (60, 60), (120, 40)]):
        image, positives = generate_test_grid_image(width=width, height=height, grid_x=4, grid_y=4, seed=i)
        path = img_dir / f"sample_{i:02d}.png"
        skio.imsave(path, image, check_contrast=False)
        written.append((path, positives))
    return written


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """Drop handlers the CLI attaches so they never outlive a test's captured streams."""
    yield
    package_logger = logging.getLogger("stereo_point_count")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
