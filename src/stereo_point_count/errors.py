"""Exception types raised by the point counting pipeline."""

from __future__ import annotations


class StereoPointCountError(Exception):
    """Base class for all point counting errors."""


class ConfigurationError(StereoPointCountError):
    """A required parameter is missing or invalid.

    ``exit_code`` is the process status the command line tool exits with.
    """

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class InputResolutionError(StereoPointCountError):
    """The images path is neither a readable file nor a directory."""


class SamplingDegeneracyError(StereoPointCountError, ValueError):
    """Grid spacing collapsed to zero (grid count exceeds the image dimension)."""


class PerImageIOError(StereoPointCountError):
    """A single image could not be read, decoded or written."""

    def __init__(self, path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
