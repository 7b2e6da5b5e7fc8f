"""Input pipeline turning pasted or uploaded content into manuscript text."""

from inkwell.input_pipeline.html_input import (
    CONTENT_TYPES,
    ContentType,
    detect_content_type,
    html_to_manuscript,
    prepare_manuscript,
)

__all__ = [
    "CONTENT_TYPES",
    "ContentType",
    "detect_content_type",
    "html_to_manuscript",
    "prepare_manuscript",
]
