"""Image discovery and file I/O."""

from .finder import find_images, resolve_images, validate_output_directory
from .image_io import annotated_file_name, read_image, write_annotated_image, write_image

__all__ = [
    "find_images",
    "resolve_images",
    "validate_output_directory",
    "annotated_file_name",
    "read_image",
    "write_annotated_image",
    "write_image",
]
