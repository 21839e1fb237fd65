from __future__ import annotations

import numpy as np
import pytest

from stereo_point_count.classify import ClassifiedPoint, classify_points, validate_threshold
from stereo_point_count.errors import ConfigurationError
from stereo_point_count.grid import GridSampler, IntersectionPoint
from stereo_point_count.pixels import GreyImage

from .tools.demo_grid_image_generator import generate_test_grid_image, uniform_image


def test_threshold_is_inclusive() -> None:
    points = [IntersectionPoint(1, 1)]
    result = classify_points(points, lambda x, y: 128, 128)
    assert result.positive_count == 1
    assert result.points[0] == ClassifiedPoint(1, 1, 128, True)

    result = classify_points(points, lambda x, y: 127, 128)
    assert result.positive_count == 0
    assert result.negative_count == 1


def test_counts_are_consistent(grid_image) -> None:
    buffer = GreyImage(grid_image["image"])
    sampler = GridSampler(buffer.width, buffer.height, 25, 20)
    result = classify_points(sampler, buffer, 128)

    assert result.total_count == len(sampler) == 9
    assert result.positive_count + result.negative_count == result.total_count
    assert set(result.positive_points) == grid_image["positives"]
    assert len(result.negative_points) == result.negative_count


def test_points_keep_sampler_order() -> None:
    image = np.zeros((80, 100), dtype=np.uint8)
    image[20, 75] = 200
    image[60, 25] = 200
    sampler = GridSampler(100, 80, 25, 20)
    result = classify_points(sampler, GreyImage(image), 100)

    assert [p.location for p in result.points] == list(sampler)
    assert result.positive_points == [IntersectionPoint(25, 60), IntersectionPoint(75, 20)]
    assert result.points[2].intensity == 200


def test_lookup_reads_column_then_row() -> None:
    image = np.zeros((40, 100), dtype=np.uint8)
    image[10, 30] = 255
    result = classify_points([IntersectionPoint(30, 10), IntersectionPoint(10, 30)], GreyImage(image), 1)
    assert [p.positive for p in result.points] == [True, False]


@pytest.mark.parametrize(("value", "threshold", "expected"), [(0, 0, 9), (255, 255, 9), (254, 255, 0)])
def test_threshold_bounds(value: int, threshold: int, expected: int) -> None:
    buffer = GreyImage(uniform_image(value))
    result = classify_points(GridSampler(100, 80, 25, 20), buffer, threshold)
    assert result.positive_count == expected


def test_empty_points() -> None:
    result = classify_points([], lambda x, y: 0, 10)
    assert result.total_count == 0
    assert result.positive_count == 0
    assert result.points == ()


@pytest.mark.parametrize("threshold", [-1, 256, 12.5, "128", True])
def test_invalid_threshold(threshold) -> None:
    with pytest.raises(ConfigurationError):
        validate_threshold(threshold)


def test_numpy_integer_threshold_accepted() -> None:
    assert validate_threshold(np.uint8(12)) == 12


def test_lookup_must_be_callable() -> None:
    with pytest.raises(TypeError):
        classify_points([IntersectionPoint(1, 1)], object(), 10)


def test_positive_fraction_matches_generator() -> None:
    image, positives = generate_test_grid_image(width=200, height=200, grid_x=10, grid_y=10, positive_fraction=0.3, seed=3)
    result = classify_points(GridSampler(200, 200, 20, 20), GreyImage(image), 120)
    assert result.positive_count == len(positives)
    assert result.total_count == 81
