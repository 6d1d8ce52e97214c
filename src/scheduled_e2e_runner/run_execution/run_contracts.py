"""Run execution entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from scheduled_e2e_runner.artifact_storage.upload_outcomes import UploadOutcome
from scheduled_e2e_runner.cost_estimation.cost_models import CostEstimate
from scheduled_e2e_runner.process_execution.process_outcomes import ProcessOutcome

DEFAULT_TARGET_SPEC = "tests/amazon/search.spec.ts"
_TARGET_SPEC_KEYS = ("target_spec", "testFile")


class RunRequestError(Exception):
    """Raised when an invocation event cannot be turned into a run request."""


@dataclass(frozen=True)
class RunRequest:
    """Input contract for executing one run."""

    target_spec: str = DEFAULT_TARGET_SPEC

    @staticmethod
    def from_event(event: Mapping[str, Any] | None) -> RunRequest:
        """Read the target spec from an invocation event, falling back to the default."""
        payload = event or {}
        if not isinstance(payload, Mapping):
            raise RunRequestError("Invocation event must be a JSON object.")
        for key in _TARGET_SPEC_KEYS:
            if key not in payload or payload[key] is None:
                continue
            value = payload[key]
            if not isinstance(value, str) or not value.strip():
                raise RunRequestError(f"{key} must be a non-empty string.")
            return RunRequest(target_spec=value.strip())
        return RunRequest()


@dataclass(frozen=True)
class RunResult:  # pylint: disable=too-many-instance-attributes
    """Terminal record of one orchestrated run."""

    success: bool
    timestamp: str
    target_spec: str
    attempts_used: int
    request_id: str
    output: ProcessOutcome | None = None
    artifacts: UploadOutcome | None = None
    cost: CostEstimate | None = None
    error: str | None = None
    error_report_key: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "timestamp": self.timestamp,
            "target_spec": self.target_spec,
            "attempts_used": self.attempts_used,
            "request_id": self.request_id,
        }
        if self.output is not None:
            payload["output"] = self.output.output_dict()
        if self.artifacts is not None:
            payload["artifacts"] = self.artifacts.to_dict()
        if self.cost is not None:
            payload["cost"] = self.cost.to_dict()
        if self.error is not None:
            payload["error"] = self.error
        if self.error_report_key is not None:
            payload["error_report_key"] = self.error_report_key
        return payload
