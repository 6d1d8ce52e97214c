"""Run execution use-case service."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Protocol

from scheduled_e2e_runner.artifact_storage import ArtifactUploader, build_error_report
from scheduled_e2e_runner.clock import utc_timestamp
from scheduled_e2e_runner.configuration.runtime_settings import RunnerSettings
from scheduled_e2e_runner.cost_estimation import estimate_cost
from scheduled_e2e_runner.process_execution import (
    Attempt,
    PlaywrightProcessRunner,
    ProcessOutcome,
    TestInfrastructureError,
)

from .run_contracts import RunRequest, RunResult

logger = logging.getLogger(__name__)


class SuiteRunner(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol implemented by the real process runner and test fakes."""

    def run(self, target_spec: str) -> ProcessOutcome: ...


def execute_test_run(
    request: RunRequest,
    settings: RunnerSettings,
    *,
    request_id: str,
    runner: SuiteRunner | None = None,
    uploader: ArtifactUploader | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """Run the target spec with retries and return the terminal run record.

    Infrastructure failures (timeout, spawn error) are retried with a
    growing delay. A test that ran and failed is terminal on the first
    attempt. This function never raises; failures are encoded in the result.
    """
    resolved_runner = runner or PlaywrightProcessRunner(settings.process)
    resolved_uploader = uploader or ArtifactUploader(settings.storage)
    max_attempts = settings.retry.max_retries + 1
    logger.info("Starting test execution: %s (request %s)", request.target_spec, request_id)

    attempt_number = 0
    while True:
        attempt_number += 1
        attempt = Attempt(attempt_number=attempt_number, started_at=utc_timestamp())
        logger.info("Attempt %d/%d started at %s", attempt_number, max_attempts, attempt.started_at)
        try:
            outcome = resolved_runner.run(request.target_spec)
        except TestInfrastructureError as exc:
            logger.warning("Attempt %d failed: %s", attempt_number, exc)
            if attempt_number >= max_attempts:
                return _fail_run(
                    request=request,
                    request_id=request_id,
                    attempt=attempt,
                    error=exc,
                    uploader=resolved_uploader,
                )
            delay_seconds = settings.retry.base_delay_seconds * attempt_number
            logger.info("Retrying in %.1fs", delay_seconds)
            sleep(delay_seconds)
            continue
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.exception("Attempt %d aborted by an unexpected error", attempt_number)
            return _fail_run(
                request=request,
                request_id=request_id,
                attempt=attempt,
                error=exc,
                uploader=resolved_uploader,
            )

        logger.info(
            "Attempt %d finished: exit_code=%s duration_ms=%d",
            attempt_number,
            outcome.exit_code,
            outcome.duration_ms,
        )
        return _complete_run(
            request=request,
            settings=settings,
            request_id=request_id,
            attempt=attempt,
            outcome=outcome,
            uploader=resolved_uploader,
        )


def _complete_run(
    *,
    request: RunRequest,
    settings: RunnerSettings,
    request_id: str,
    attempt: Attempt,
    outcome: ProcessOutcome,
    uploader: ArtifactUploader,
) -> RunResult:
    artifacts = uploader.upload_artifacts(settings.process.artifact_dirs, outcome.timestamp)
    logger.info(
        "Artifact upload finished: uploaded=%s files=%d reason=%s",
        artifacts.uploaded,
        len(artifacts.files),
        artifacts.reason,
    )
    result = RunResult(
        success=outcome.succeeded,
        timestamp=outcome.timestamp,
        target_spec=request.target_spec,
        attempts_used=attempt.attempt_number,
        request_id=request_id,
        output=outcome,
        artifacts=artifacts,
        cost=estimate_cost(outcome.duration_ms, settings.cost),
    )
    logger.info("Test execution completed: %s", json.dumps(result.to_dict()))
    return result


def _fail_run(
    *,
    request: RunRequest,
    request_id: str,
    attempt: Attempt,
    error: Exception,
    uploader: ArtifactUploader,
) -> RunResult:
    timestamp = utc_timestamp()
    report_key = uploader.upload_error_report(build_error_report(error, timestamp), timestamp)
    result = RunResult(
        success=False,
        timestamp=timestamp,
        target_spec=request.target_spec,
        attempts_used=attempt.attempt_number,
        request_id=request_id,
        error=str(error),
        error_report_key=report_key,
    )
    logger.error("Test execution failed: %s", json.dumps(result.to_dict()))
    return result
