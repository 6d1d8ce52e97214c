"""Test process entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class TestInfrastructureError(Exception):
    """Raised when the test process could not run to completion."""

    __test__ = False


class TestTimeoutError(TestInfrastructureError):
    """Raised when the test process exceeds its wall-clock ceiling."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Test execution timeout ({_describe_seconds(timeout_seconds)})")
        self.timeout_seconds = timeout_seconds


class TestSpawnError(TestInfrastructureError):
    """Raised when the test process cannot be started."""


@dataclass(frozen=True)
class Attempt:
    """One iteration of the retry loop."""

    attempt_number: int
    started_at: str


@dataclass(frozen=True)
class ProcessOutcome:
    """Captured result of one completed test process."""

    succeeded: bool
    timestamp: str
    duration_ms: int
    stdout: str
    stderr: str
    exit_code: int | None

    def output_dict(self) -> dict[str, Any]:
        return {"stdout": self.stdout, "stderr": self.stderr, "exit_code": self.exit_code}


def _describe_seconds(seconds: float) -> str:
    if seconds >= 60 and seconds % 60 == 0:
        return f"{int(seconds // 60)} minutes"
    return f"{seconds:g} seconds"
