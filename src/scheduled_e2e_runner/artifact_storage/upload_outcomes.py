"""Artifact upload entities."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

NO_BUCKET_REASON = "No bucket configured"
UPLOAD_FAILED_REASON = "S3 upload failed"
EPHEMERAL_FALLBACK = "Artifacts stored locally (ephemeral)"


@dataclass(frozen=True)
class UploadRecord:
    """One artifact persisted to the object store."""

    local_path: Path
    remote_key: str
    remote_url: str

    def to_dict(self) -> dict[str, str]:
        return {
            "local_path": str(self.local_path),
            "remote_key": self.remote_key,
            "remote_url": self.remote_url,
        }


@dataclass(frozen=True)
class UploadOutcome:
    """Outcome of the artifact upload phase."""

    uploaded: bool
    files: tuple[UploadRecord, ...] = ()
    reason: str | None = None
    error: str | None = None
    fallback: str | None = None

    @staticmethod
    def completed(files: Sequence[UploadRecord]) -> UploadOutcome:
        return UploadOutcome(uploaded=True, files=tuple(files))

    @staticmethod
    def skipped() -> UploadOutcome:
        return UploadOutcome(uploaded=False, reason=NO_BUCKET_REASON)

    @staticmethod
    def failed(error: Exception) -> UploadOutcome:
        return UploadOutcome(
            uploaded=False,
            reason=UPLOAD_FAILED_REASON,
            error=str(error),
            fallback=EPHEMERAL_FALLBACK,
        )

    def to_dict(self) -> dict[str, Any]:
        if self.uploaded:
            return {"uploaded": True, "files": [record.to_dict() for record in self.files]}
        payload: dict[str, Any] = {"uploaded": False, "reason": self.reason}
        if self.error is not None:
            payload["error"] = self.error
        if self.fallback is not None:
            payload["fallback"] = self.fallback
        return payload
