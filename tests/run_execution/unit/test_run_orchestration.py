"""Tests for the run orchestration use case."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest
from scheduled_e2e_runner.artifact_storage import ArtifactUploader, UploadOutcome
from scheduled_e2e_runner.configuration.runtime_settings import (
    ProcessSettings,
    RetrySettings,
    RunnerSettings,
    StorageSettings,
)
from scheduled_e2e_runner.process_execution import (
    ProcessOutcome,
    TestSpawnError,
    TestTimeoutError,
)
from scheduled_e2e_runner.run_execution import RunRequest, execute_test_run

REQUEST_ID = "c0ffee00-request"


def _outcome(exit_code: int, *, duration_ms: int = 120_000, stdout: str = "") -> ProcessOutcome:
    return ProcessOutcome(
        succeeded=exit_code == 0,
        timestamp="2026-10-19T08:30:00.123Z",
        duration_ms=duration_ms,
        stdout=stdout,
        stderr="",
        exit_code=exit_code,
    )


class ScriptedRunner:
    def __init__(self, steps: Sequence[ProcessOutcome | Exception]) -> None:
        self._steps = list(steps)
        self.calls: list[str] = []

    def run(self, target_spec: str) -> ProcessOutcome:
        self.calls.append(target_spec)
        step = self._steps[len(self.calls) - 1]
        if isinstance(step, Exception):
            raise step
        return step


class RecordingUploader:
    def __init__(self, outcome: UploadOutcome | None = None) -> None:
        self._outcome = outcome or UploadOutcome.completed(())
        self.artifact_calls: list[tuple[tuple[Path, ...], str]] = []
        self.error_reports: list[tuple[dict[str, Any], str]] = []

    def upload_artifacts(self, root_dirs: Sequence[Path], run_timestamp: str) -> UploadOutcome:
        self.artifact_calls.append((tuple(root_dirs), run_timestamp))
        return self._outcome

    def upload_error_report(self, report: dict[str, Any], timestamp: str) -> str | None:
        self.error_reports.append((report, timestamp))
        return f"errors/{timestamp}/error-report.json"


def _settings(
    tmp_path: Path, *, max_retries: int = 2, bucket: str | None = "bucket"
) -> RunnerSettings:
    return RunnerSettings(
        storage=StorageSettings(bucket_name=bucket, region="us-east-1"),
        process=ProcessSettings(task_root=tmp_path, scratch_root=tmp_path / "scratch"),
        retry=RetrySettings(max_retries=max_retries, base_delay_seconds=1.0),
    )


def _execute(tmp_path: Path, runner, uploader, sleeps: list[float], **settings_overrides):
    return execute_test_run(
        RunRequest(target_spec="tests/amazon/search.spec.ts"),
        _settings(tmp_path, **settings_overrides),
        request_id=REQUEST_ID,
        runner=runner,
        uploader=uploader,
        sleep=sleeps.append,
    )


def test_passing_first_attempt_uploads_artifacts_and_estimates_cost(tmp_path: Path) -> None:
    runner = ScriptedRunner([_outcome(0, stdout="1 passed")])
    uploader = RecordingUploader()
    sleeps: list[float] = []

    result = _execute(tmp_path, runner, uploader, sleeps)

    assert result.success is True
    assert result.attempts_used == 1
    assert result.request_id == REQUEST_ID
    assert result.timestamp == "2026-10-19T08:30:00.123Z"
    assert result.error is None
    assert sleeps == []
    scratch = tmp_path / "scratch"
    assert uploader.artifact_calls == [
        ((scratch / "test-results", scratch / "playwright-report"), "2026-10-19T08:30:00.123Z")
    ]
    assert uploader.error_reports == []
    payload = result.to_dict()
    assert payload["output"] == {"stdout": "1 passed", "stderr": "", "exit_code": 0}
    assert payload["cost"]["total_cost_usd"] == "$0.004100"
    assert payload["artifacts"] == {"uploaded": True, "files": []}
    json.dumps(payload)


def test_failing_test_is_terminal_without_retry(tmp_path: Path) -> None:
    runner = ScriptedRunner([_outcome(1, stdout="1 failed"), _outcome(0)])
    uploader = RecordingUploader()
    sleeps: list[float] = []

    result = _execute(tmp_path, runner, uploader, sleeps)

    assert result.success is False
    assert result.attempts_used == 1
    assert len(runner.calls) == 1
    assert sleeps == []
    assert result.output is not None and result.output.exit_code == 1
    assert len(uploader.artifact_calls) == 1
    assert uploader.error_reports == []
    assert result.error is None


@pytest.mark.parametrize("failures", [1, 2])
def test_infrastructure_failures_are_retried_until_success(tmp_path: Path, failures: int) -> None:
    steps: list[ProcessOutcome | Exception] = [TestTimeoutError(840)] * failures
    runner = ScriptedRunner([*steps, _outcome(0, stdout="recovered")])
    uploader = RecordingUploader()
    sleeps: list[float] = []

    result = _execute(tmp_path, runner, uploader, sleeps)

    assert result.success is True
    assert result.attempts_used == failures + 1
    assert sleeps == [1.0 * attempt for attempt in range(1, failures + 1)]
    assert result.to_dict()["output"]["stdout"] == "recovered"
    assert uploader.error_reports == []


def test_retry_after_infrastructure_failure_can_end_in_test_failure(tmp_path: Path) -> None:
    runner = ScriptedRunner([TestSpawnError("node missing"), _outcome(1)])
    uploader = RecordingUploader()
    sleeps: list[float] = []

    result = _execute(tmp_path, runner, uploader, sleeps)

    assert result.success is False
    assert result.attempts_used == 2
    assert sleeps == [1.0]
    assert result.error is None


def test_exhausted_retries_upload_error_report_and_skip_artifacts(tmp_path: Path) -> None:
    runner = ScriptedRunner(
        [TestTimeoutError(840), TestSpawnError("spawn failed"), TestTimeoutError(840)]
    )
    uploader = RecordingUploader()
    sleeps: list[float] = []

    result = _execute(tmp_path, runner, uploader, sleeps)

    assert result.success is False
    assert result.attempts_used == 3
    assert result.error == "Test execution timeout (14 minutes)"
    assert sleeps == [1.0, 2.0]
    assert uploader.artifact_calls == []
    assert len(uploader.error_reports) == 1
    report, timestamp = uploader.error_reports[0]
    assert report["error"] == "Test execution timeout (14 minutes)"
    assert report["timestamp"] == timestamp
    assert result.error_report_key == f"errors/{timestamp}/error-report.json"
    payload = result.to_dict()
    assert "output" not in payload
    assert "cost" not in payload
    assert payload["request_id"] == REQUEST_ID


def test_zero_retries_gives_a_single_attempt(tmp_path: Path) -> None:
    runner = ScriptedRunner([TestTimeoutError(840)])
    uploader = RecordingUploader()
    sleeps: list[float] = []

    result = _execute(tmp_path, runner, uploader, sleeps, max_retries=0)

    assert result.success is False
    assert result.attempts_used == 1
    assert sleeps == []


def test_unexpected_error_is_captured_not_raised(tmp_path: Path) -> None:
    runner = ScriptedRunner([RuntimeError("disk full"), _outcome(0)])
    uploader = RecordingUploader()
    sleeps: list[float] = []

    result = _execute(tmp_path, runner, uploader, sleeps)

    assert result.success is False
    assert result.attempts_used == 1
    assert result.error == "disk full"
    assert len(runner.calls) == 1
    assert len(uploader.error_reports) == 1


def test_upload_failure_does_not_change_test_success(tmp_path: Path) -> None:
    runner = ScriptedRunner([_outcome(0)])
    uploader = RecordingUploader(UploadOutcome.failed(OSError("network down")))
    sleeps: list[float] = []

    result = _execute(tmp_path, runner, uploader, sleeps)

    assert result.success is True
    assert result.to_dict()["artifacts"] == {
        "uploaded": False,
        "reason": "S3 upload failed",
        "error": "network down",
        "fallback": "Artifacts stored locally (ephemeral)",
    }


def test_real_uploader_without_bucket_reports_skipped_artifacts(tmp_path: Path) -> None:
    runner = ScriptedRunner([_outcome(0)])
    sleeps: list[float] = []
    settings = _settings(tmp_path, bucket=None)

    result = execute_test_run(
        RunRequest(),
        settings,
        request_id=REQUEST_ID,
        runner=runner,
        uploader=ArtifactUploader(settings.storage),
        sleep=sleeps.append,
    )

    assert result.success is True
    assert result.target_spec == "tests/amazon/search.spec.ts"
    assert result.to_dict()["artifacts"] == {"uploaded": False, "reason": "No bucket configured"}


class BrokenPoolClient:
    def __init__(self) -> None:
        self.calls = 0

    def put_object(self, **kwargs: Any) -> dict[str, Any]:
        self.calls += 1
        raise RuntimeError("connection pool exhausted")


def _write_artifact(tmp_path: Path) -> None:
    screenshot = tmp_path / "scratch" / "test-results" / "search-chromium" / "shot.png"
    screenshot.parent.mkdir(parents=True)
    screenshot.write_bytes(b"png")


def test_passing_run_stays_successful_when_object_store_client_breaks(tmp_path: Path) -> None:
    _write_artifact(tmp_path)
    client = BrokenPoolClient()
    settings = _settings(tmp_path)
    sleeps: list[float] = []

    result = execute_test_run(
        RunRequest(),
        settings,
        request_id=REQUEST_ID,
        runner=ScriptedRunner([_outcome(0)]),
        uploader=ArtifactUploader(settings.storage, client=client),
        sleep=sleeps.append,
    )

    assert result.success is True
    assert result.attempts_used == 1
    assert result.error is None
    assert client.calls == 1
    assert result.artifacts is not None and result.artifacts.uploaded is False
    assert result.to_dict()["artifacts"]["error"] == "connection pool exhausted"
    assert result.cost is not None


def test_exhausted_retries_return_result_when_error_report_upload_breaks(tmp_path: Path) -> None:
    client = BrokenPoolClient()
    settings = _settings(tmp_path, max_retries=1)
    sleeps: list[float] = []

    result = execute_test_run(
        RunRequest(),
        settings,
        request_id=REQUEST_ID,
        runner=ScriptedRunner([TestTimeoutError(840), TestTimeoutError(840)]),
        uploader=ArtifactUploader(settings.storage, client=client),
        sleep=sleeps.append,
    )

    assert result.success is False
    assert result.attempts_used == 2
    assert result.error == "Test execution timeout (14 minutes)"
    assert result.error_report_key is None
    assert client.calls == 1
    assert sleeps == [1.0]
