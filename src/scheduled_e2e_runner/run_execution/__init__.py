"""Run execution domain exports."""

from .run_contracts import DEFAULT_TARGET_SPEC, RunRequest, RunRequestError, RunResult
from .run_orchestration import SuiteRunner, execute_test_run

__all__ = [
    "DEFAULT_TARGET_SPEC",
    "RunRequest",
    "RunRequestError",
    "RunResult",
    "SuiteRunner",
    "execute_test_run",
]
