"""Artifact storage exports."""

from .artifact_uploader import (
    ArtifactUploader,
    ObjectStoreClient,
    build_artifact_key,
    build_error_key,
    relative_path_from_key,
)
from .error_reports import build_error_report
from .upload_outcomes import UploadOutcome, UploadRecord

__all__ = [
    "ArtifactUploader",
    "ObjectStoreClient",
    "UploadOutcome",
    "UploadRecord",
    "build_artifact_key",
    "build_error_key",
    "build_error_report",
    "relative_path_from_key",
]
