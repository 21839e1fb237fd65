from pathlib import Path

import numpy as np
import pytest
from skimage import io as skio

from stereo_point_count.errors import ConfigurationError, InputResolutionError
from stereo_point_count.utils.finder import find_images, resolve_images, validate_output_directory


def _make_png(path: Path, value: int = 0) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    skio.imsave(path, np.full((4, 4), value, dtype=np.uint8), check_contrast=False)
    return path


def test_find_images_in_directory_sorted(tmp_path: Path) -> None:
    _make_png(tmp_path / "b.png")
    _make_png(tmp_path / "a.png")
    _make_png(tmp_path / "C.PNG")
    (tmp_path / "notes.txt").write_text("not an image")
    _make_png(tmp_path / "nested" / "d.png")

    found = find_images(tmp_path)
    assert [p.name for p in found] == ["C.PNG", "a.png", "b.png"]


def test_find_images_custom_suffixes(tmp_path: Path) -> None:
    _make_png(tmp_path / "a.png")
    (tmp_path / "b.tif").write_bytes(b"")
    assert [p.name for p in find_images(tmp_path, allowed_suffixes=(".tif",))] == ["b.tif"]


def test_single_file_is_returned_as_is(tmp_path: Path) -> None:
    path = _make_png(tmp_path / "only.png")
    assert find_images(path) == [path]
    assert find_images(str(path)) == [path]


def test_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(InputResolutionError):
        find_images(tmp_path / "missing")


def test_resolve_images_degrades_to_empty(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="stereo_point_count.utils.finder"):
        assert resolve_images(tmp_path / "missing") == []
    assert "neither a file nor a directory" in caplog.text


def test_resolve_images_empty_directory(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="stereo_point_count.utils.finder"):
        assert resolve_images(tmp_path) == []
    assert "No images found" in caplog.text


def test_validate_output_directory_creates(tmp_path: Path) -> None:
    out = validate_output_directory(tmp_path / "results" / "annotated")
    assert out.is_dir()


def test_validate_output_directory_rejects_file(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("x")
    with pytest.raises(ConfigurationError):
        validate_output_directory(target)
