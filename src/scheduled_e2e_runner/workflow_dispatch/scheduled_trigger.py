"""Scheduled trigger use case: hand the suite over to CI."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from scheduled_e2e_runner.clock import utc_timestamp
from scheduled_e2e_runner.configuration.runtime_settings import RunnerSettings

from .github_workflow_dispatcher import GitHubWorkflowDispatcher, WorkflowDispatchError

logger = logging.getLogger(__name__)

TRIGGER_SOURCE = "aws_lambda"


class WorkflowDispatcher(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol implemented by the GitHub dispatcher and test fakes."""

    def dispatch(self, inputs: dict[str, str | None]) -> None: ...


def trigger_workflow_run(
    settings: RunnerSettings,
    *,
    request_id: str,
    dispatcher: WorkflowDispatcher | None = None,
) -> dict[str, Any]:
    """Dispatch the CI workflow and return an HTTP-style response."""
    dispatch_settings = settings.dispatch
    if not dispatch_settings.has_token:
        return _response(400, {"success": False, "error": "GitHub token not configured"})
    if not dispatch_settings.owner or not dispatch_settings.repo:
        return _response(400, {"success": False, "error": "GitHub repository not configured"})

    resolved_dispatcher = dispatcher or GitHubWorkflowDispatcher(dispatch_settings)
    try:
        resolved_dispatcher.dispatch(
            {
                "trigger_source": TRIGGER_SOURCE,
                "s3_bucket": settings.storage.bucket_name,
                "timestamp": utc_timestamp(),
            }
        )
    except WorkflowDispatchError as exc:
        logger.error("Failed to trigger GitHub Actions: %s", exc)
        return _response(500, {"success": False, "error": str(exc), "request_id": request_id})

    logger.info("GitHub Actions workflow triggered successfully")
    return _response(
        200,
        {
            "success": True,
            "message": "Playwright tests triggered via GitHub Actions",
            "workflow_url": dispatch_settings.workflow_url,
            "request_id": request_id,
            "trigger_time": utc_timestamp(),
        },
    )


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {"statusCode": status_code, "body": json.dumps(body)}
