"""Artifact and error report persistence service."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path, PurePosixPath
from typing import Any, Protocol

import boto3

from scheduled_e2e_runner.artifact_collection import collect_artifacts, content_type_for
from scheduled_e2e_runner.configuration.runtime_settings import StorageSettings

from .upload_outcomes import UploadOutcome, UploadRecord

logger = logging.getLogger(__name__)

ARTIFACT_KEY_PREFIX = "test-runs"
ERROR_KEY_PREFIX = "errors"
ERROR_REPORT_FILENAME = "error-report.json"


class ObjectStoreClient(Protocol):  # pylint: disable=too-few-public-methods
    """Subset of the S3 client API used by the uploader."""

    def put_object(self, **kwargs: Any) -> Any: ...


def build_artifact_key(run_timestamp: str, relative_path: str) -> str:
    """Build the remote key for an artifact path relative to its collection root."""
    return f"{ARTIFACT_KEY_PREFIX}/{run_timestamp}/{relative_path}"


def relative_path_from_key(remote_key: str, run_timestamp: str) -> str:
    """Invert `build_artifact_key` for the given run timestamp."""
    prefix = f"{ARTIFACT_KEY_PREFIX}/{run_timestamp}/"
    if not remote_key.startswith(prefix):
        raise ValueError(f"Key '{remote_key}' does not belong to run {run_timestamp}.")
    return remote_key[len(prefix) :]


def build_error_key(timestamp: str) -> str:
    return f"{ERROR_KEY_PREFIX}/{timestamp}/{ERROR_REPORT_FILENAME}"


class ArtifactUploader:
    """Service that persists run artifacts and error reports to S3."""

    def __init__(
        self,
        storage_settings: StorageSettings,
        client: ObjectStoreClient | None = None,
    ) -> None:
        self._settings = storage_settings
        self._client = client

    @property
    def bucket_configured(self) -> bool:
        return bool(self._settings.bucket_name)

    def upload_artifacts(
        self, root_dirs: Sequence[Path | str], run_timestamp: str
    ) -> UploadOutcome:
        """Collect every file under the roots and upload it under the run prefix."""
        if not self.bucket_configured:
            logger.info("S3_BUCKET_NAME not set, skipping S3 upload")
            return UploadOutcome.skipped()
        try:
            files = collect_artifacts(root_dirs)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.exception("Artifact collection failed: %s", exc)
            return UploadOutcome.failed(exc)
        return self.upload_files(files, run_timestamp, roots=root_dirs)

    def upload_files(
        self,
        files: Iterable[Path | str],
        run_timestamp: str,
        *,
        roots: Sequence[Path | str] = (),
    ) -> UploadOutcome:
        """Upload the given files; any failure turns the whole phase into a failed outcome."""
        if not self.bucket_configured:
            logger.info("S3_BUCKET_NAME not set, skipping S3 upload")
            return UploadOutcome.skipped()

        resolved_roots = [Path(root).resolve() for root in roots]
        uploads: list[UploadRecord] = []
        try:
            for file_path in files:
                local_path = Path(file_path)
                key = build_artifact_key(
                    run_timestamp, _relative_to_roots(local_path, resolved_roots)
                )
                self._put(key, local_path.read_bytes(), content_type_for(local_path))
                uploads.append(
                    UploadRecord(local_path=local_path, remote_key=key, remote_url=self._url(key))
                )
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.exception("S3 upload failed: %s", exc)
            return UploadOutcome.failed(exc)

        logger.info("Uploaded %d artifacts to S3", len(uploads))
        return UploadOutcome.completed(uploads)

    def upload_error_report(self, report: Mapping[str, Any], timestamp: str) -> str | None:
        """Persist an error report; failures are logged and never raised."""
        if not self.bucket_configured:
            return None
        key = build_error_key(timestamp)
        try:
            body = json.dumps(report, indent=2, default=str).encode("utf-8")
            self._put(key, body, "application/json")
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.exception("Failed to upload error report to S3: %s", exc)
            return None
        logger.info("Error report uploaded to S3: %s", key)
        return key

    def _put(self, key: str, body: bytes, content_type: str) -> None:
        self._get_client().put_object(
            Bucket=self._settings.bucket_name,
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    def _get_client(self) -> ObjectStoreClient:
        if self._client is None:
            self._client = boto3.client("s3", region_name=self._settings.region)
        return self._client

    def _url(self, key: str) -> str:
        return f"https://{self._settings.bucket_name}.s3.amazonaws.com/{key}"


def _relative_to_roots(path: Path, roots: Sequence[Path]) -> str:
    resolved = path.resolve()
    for root in roots:
        if resolved.is_relative_to(root):
            return PurePosixPath(*resolved.relative_to(root).parts).as_posix()
    return path.name
