"""GitHub Actions workflow dispatch client."""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx

from scheduled_e2e_runner.configuration.runtime_settings import DispatchSettings

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "scheduled-e2e-runner"


class WorkflowDispatchError(Exception):
    """Raised when the workflow dispatch request is rejected or cannot be sent."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class GitHubWorkflowDispatcher:  # pylint: disable=too-few-public-methods
    """Service that dispatches a named workflow on a named branch."""

    def __init__(self, settings: DispatchSettings, client: httpx.Client | None = None) -> None:
        self._settings = settings
        self._client = client

    @property
    def dispatch_url(self) -> str:
        settings = self._settings
        return (
            f"{settings.api_url}/repos/{settings.owner}/{settings.repo}"
            f"/actions/workflows/{settings.workflow_id}/dispatches"
        )

    def dispatch(self, inputs: Mapping[str, str | None]) -> None:
        """Send the dispatch request; GitHub answers 204 on success.

        Raises:
          WorkflowDispatchError: On any other status code or a transport failure.
        """
        payload = {"ref": self._settings.ref, "inputs": dict(inputs)}
        headers = {
            "Authorization": f"Bearer {self._settings.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT,
        }
        logger.info("Dispatching workflow %s on %s", self._settings.workflow_id, self._settings.ref)
        try:
            if self._client is not None:
                response = self._client.post(self.dispatch_url, json=payload, headers=headers)
            else:
                with httpx.Client(timeout=self._settings.timeout_seconds) as client:
                    response = client.post(self.dispatch_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise WorkflowDispatchError(f"GitHub API request failed: {exc}") from exc

        if response.status_code != 204:
            raise WorkflowDispatchError(
                f"GitHub API returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
