"""Test process exports."""

from .playwright_process_runner import REPORTER_FLAG, PlaywrightProcessRunner
from .process_outcomes import (
    Attempt,
    ProcessOutcome,
    TestInfrastructureError,
    TestSpawnError,
    TestTimeoutError,
)

__all__ = [
    "Attempt",
    "PlaywrightProcessRunner",
    "ProcessOutcome",
    "REPORTER_FLAG",
    "TestInfrastructureError",
    "TestSpawnError",
    "TestTimeoutError",
]
