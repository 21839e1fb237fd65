"""Resolve the ``--images`` argument to an ordered list of image files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from ..errors import ConfigurationError, InputResolutionError

logger = logging.getLogger(__name__)

_ALLOWED_SUFFIXES = (".png",)


def _iter_candidate_files(img_dir: Path, suffixes: Sequence[str]) -> Iterable[Path]:
    for path in img_dir.iterdir():
        if not path.is_file():
            continue
        name_lower = path.name.lower()
        if any(name_lower.endswith(sfx) for sfx in suffixes):
            yield path


def find_images(
    images: Union[str, Path],
    *,
    allowed_suffixes: Sequence[str] | None = None,
) -> List[Path]:
    """
    Return the images named by ``images``.

    Args:
        images: A single image file, or a directory whose top-level files with
            one of ``allowed_suffixes`` (``.png`` by default) are returned,
            sorted by name.
        allowed_suffixes: Optional tuple of file suffixes to accept.

    Raises:
        InputResolutionError: ``images`` is neither a file nor a directory.
    """
    path = Path(images)
    suffixes = tuple(sfx.lower() for sfx in (allowed_suffixes or _ALLOWED_SUFFIXES))

    if path.is_dir():
        try:
            return sorted(_iter_candidate_files(path, suffixes), key=lambda p: p.name)
        except OSError as exc:
            raise InputResolutionError(f"Cannot list image directory {path}: {exc}") from exc
    if path.is_file():
        return [path]
    raise InputResolutionError(f"Image path is neither a file nor a directory: {path}")


def resolve_images(
    images: Union[str, Path],
    *,
    allowed_suffixes: Sequence[str] | None = None,
) -> List[Path]:
    """Like :func:`find_images`, but an unresolvable path yields no images."""
    try:
        found = find_images(images, allowed_suffixes=allowed_suffixes)
    except InputResolutionError as exc:
        logger.warning("%s; no images will be processed.", exc)
        return []
    if not found:
        logger.warning("No images found under %s", images)
    return found


def validate_output_directory(save_dir: Union[str, Path]) -> Path:
    """Create ``save_dir`` if needed and return it as a Path."""
    out_dir = Path(save_dir)
    if out_dir.exists() and not out_dir.is_dir():
        raise ConfigurationError(f"--saveimages must be a directory: {out_dir}")
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(f"Cannot create output directory {out_dir}: {exc}") from exc
    return out_dir
