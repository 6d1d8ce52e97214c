"""Playwright test process runner service."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from collections.abc import Mapping

from scheduled_e2e_runner.clock import utc_timestamp
from scheduled_e2e_runner.configuration.runtime_settings import ProcessSettings

from .process_outcomes import ProcessOutcome, TestSpawnError, TestTimeoutError

logger = logging.getLogger(__name__)

REPORTER_FLAG = "--reporter=json"


class PlaywrightProcessRunner:  # pylint: disable=too-few-public-methods
    """Service that runs one target spec in a child process under a hard timeout."""

    def __init__(
        self,
        process_settings: ProcessSettings,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._settings = process_settings
        self._environ = os.environ if environ is None else environ

    def run(self, target_spec: str) -> ProcessOutcome:
        """Run the target spec and return its outcome.

        A non-zero exit code is a normal, failed outcome. Only a timeout or a
        spawn failure raises.

        Raises:
          TestTimeoutError: If the process outlives ``timeout_seconds``.
          TestSpawnError: If the process cannot be started.
        """
        self._ensure_scratch_dirs()
        command = self.build_command(target_spec)
        timestamp = utc_timestamp()
        started = time.monotonic()
        logger.info("Spawning test process: %s", shlex.join(command))
        try:
            process = subprocess.Popen(  # pylint: disable=consider-using-with
                command,
                cwd=self._settings.task_root,
                env=self._build_environment(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise TestSpawnError(f"Failed to start test process: {exc}") from exc

        try:
            stdout, stderr = process.communicate(timeout=self._settings.timeout_seconds)
        except subprocess.TimeoutExpired as exc:
            process.terminate()
            _close_pipes(process)
            logger.warning(
                "Test process exceeded %ss and was sent SIGTERM", self._settings.timeout_seconds
            )
            raise TestTimeoutError(self._settings.timeout_seconds) from exc

        duration_ms = int(round((time.monotonic() - started) * 1000))
        exit_code = process.returncode
        return ProcessOutcome(
            succeeded=exit_code == 0,
            timestamp=timestamp,
            duration_ms=duration_ms,
            stdout=stdout or "",
            stderr=stderr or "",
            exit_code=exit_code,
        )

    def build_command(self, target_spec: str) -> list[str]:
        return [*self._settings.resolved_command(), target_spec, REPORTER_FLAG]

    def _ensure_scratch_dirs(self) -> None:
        for directory in self._settings.artifact_dirs:
            directory.mkdir(parents=True, exist_ok=True)

    def _build_environment(self) -> dict[str, str]:
        scratch_root = self._settings.scratch_root
        env = dict(self._environ)
        env.update(
            {
                "PLAYWRIGHT_JSON_OUTPUT_NAME": str(scratch_root / "test-results.json"),
                "HOME": str(scratch_root),
                "PLAYWRIGHT_BROWSERS_PATH": str(self._settings.task_root / "browsers"),
                "PW_TEST_RESULTS_DIR": str(self._settings.results_dir),
                "PW_OUTPUT_DIR": str(self._settings.report_dir),
            }
        )
        return env


def _close_pipes(process: subprocess.Popen[str]) -> None:
    for stream in (process.stdout, process.stderr):
        if stream is not None:
            stream.close()
