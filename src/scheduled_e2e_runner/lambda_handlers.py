"""Serverless entry points for the test runner and the CI trigger."""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from typing import Any

from scheduled_e2e_runner.configuration import ConfigurationError, load_settings
from scheduled_e2e_runner.run_execution import RunRequest, RunRequestError, execute_test_run
from scheduled_e2e_runner.workflow_dispatch import trigger_workflow_run

logger = logging.getLogger(__name__)


def run_tests_handler(
    event: Mapping[str, Any] | None,
    context: Any,
    *,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Run one Playwright spec with retries and return the run record."""
    _configure_logging()
    request_id = _request_id(context)
    try:
        settings = load_settings(environ=environ)
        request = RunRequest.from_event(event)
    except (ConfigurationError, RunRequestError) as exc:
        logger.error("Rejected run invocation %s: %s", request_id, exc)
        return _rejection(str(exc), request_id)
    return execute_test_run(request, settings, request_id=request_id).to_dict()


def trigger_workflow_handler(
    event: Mapping[str, Any] | None,
    context: Any,
    *,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Dispatch the CI workflow that runs the suite."""
    del event
    _configure_logging()
    request_id = _request_id(context)
    logger.info("Trigger invoked, dispatching GitHub Actions workflow (request %s)", request_id)
    try:
        settings = load_settings(environ=environ)
    except ConfigurationError as exc:
        logger.error("Rejected trigger invocation %s: %s", request_id, exc)
        body = {"success": False, "error": str(exc), "request_id": request_id}
        return {"statusCode": 400, "body": json.dumps(body)}
    return trigger_workflow_run(settings, request_id=request_id)


def _request_id(context: Any) -> str:
    request_id = getattr(context, "aws_request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    return f"local-{uuid.uuid4().hex}"


def _rejection(message: str, request_id: str) -> dict[str, Any]:
    return {"statusCode": 400, "success": False, "error": message, "request_id": request_id}


def _configure_logging() -> None:
    logging.getLogger().setLevel(logging.INFO)
