"""Artifact collection exports."""

from .artifact_walker import collect_artifacts
from .content_types import CONTENT_TYPES_BY_EXTENSION, DEFAULT_CONTENT_TYPE, content_type_for

__all__ = [
    "CONTENT_TYPES_BY_EXTENSION",
    "DEFAULT_CONTENT_TYPE",
    "collect_artifacts",
    "content_type_for",
]
