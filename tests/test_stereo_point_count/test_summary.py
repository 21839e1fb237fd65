from __future__ import annotations

import itertools

import pytest

from stereo_point_count.grid import GridSpec
from stereo_point_count.summary import ImageResult, RunSummary

GRID = GridSpec(count_x=4, count_y=4, spacing_x=25, spacing_y=20)


def _result(name: str, positive: int, total: int, index: int | None = None) -> ImageResult:
    return ImageResult(image_path=name, grid=GRID, positive_count=positive, total_count=total, index=index)


def test_ratio_scenario() -> None:
    summary = RunSummary()
    summary.accumulate(_result("a.png", 3, 9, index=0))
    summary.accumulate(_result("b.png", 4, 16, index=1))

    assert summary.grand_positive == 7
    assert summary.grand_total == 25
    assert summary.grand_negative == 18
    assert summary.ratio == pytest.approx(0.28)
    assert str(summary.finalize()) == "7/25 = 0.28"


def test_ratio_undefined_without_points() -> None:
    summary = RunSummary()
    ratio = summary.finalize()
    assert not ratio.defined
    assert ratio.value is None
    assert summary.ratio is None
    assert "undefined" in str(ratio)

    summary.accumulate(_result("empty.png", 0, 0, index=0))
    assert summary.ratio is None


def test_totals_independent_of_order() -> None:
    results = [_result(f"{i}.png", p, t, index=i) for i, (p, t) in enumerate([(3, 9), (4, 16), (0, 12), (12, 12)])]
    totals = {
        (s.grand_positive, s.grand_total)
        for s in (RunSummary.from_results(order) for order in itertools.permutations(results))
    }
    assert totals == {(19, 49)}


def test_same_image_cannot_be_counted_twice() -> None:
    summary = RunSummary()
    result = _result("a.png", 3, 9, index=0)
    summary.accumulate(result)
    with pytest.raises(ValueError, match="already been accumulated"):
        summary.accumulate(result)
    assert summary.grand_total == 9
    assert summary.image_count == 1


def test_results_without_index_are_keyed_by_path() -> None:
    summary = RunSummary()
    summary.accumulate(_result("a.png", 1, 2))
    with pytest.raises(ValueError):
        summary.accumulate(_result("a.png", 1, 2))
    summary.accumulate(_result("b.png", 1, 2))
    assert summary.grand_total == 4


def test_merge_disjoint_summaries() -> None:
    left = RunSummary.from_results([_result("a.png", 3, 9, index=0)])
    right = RunSummary.from_results([_result("b.png", 4, 16, index=1)])
    right.record_failure("c.png", "unreadable", index=2)

    merged = left.merge(right)
    assert (merged.grand_positive, merged.grand_total) == (7, 25)
    assert merged.image_count == 2
    assert [f.image_path for f in merged.failures] == ["c.png"]
    assert (right.merge(left).grand_positive, right.merge(left).grand_total) == (7, 25)


def test_merge_refuses_overlap() -> None:
    left = RunSummary.from_results([_result("a.png", 3, 9, index=0)])
    right = RunSummary.from_results([_result("a.png", 3, 9, index=0)])
    with pytest.raises(ValueError, match="double count"):
        left.merge(right)


def test_image_result_counts() -> None:
    result = _result("a.png", 3, 9)
    assert result.negative_count == 6
    assert result.positive_count + result.negative_count == result.total_count
    assert result.as_row() == {
        "Image": "a.png",
        "GridSize": "4x4",
        "GridSizePixel": "25x20",
        "Positive": 3,
        "Total": 9,
    }


@pytest.mark.parametrize(("positive", "total"), [(10, 9), (-1, 9), (0, -1)])
def test_image_result_rejects_inconsistent_counts(positive: int, total: int) -> None:
    with pytest.raises(ValueError):
        _result("a.png", positive, total)
