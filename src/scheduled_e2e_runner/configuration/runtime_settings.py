"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

PLATFORM_TIMEOUT_SECONDS = 900
DEFAULT_TIMEOUT_SECONDS = 14 * 60
DEFAULT_TASK_ROOT = Path("/var/task")
DEFAULT_SCRATCH_ROOT = Path("/tmp")
PLACEHOLDER_TOKEN = "dummy-token"


@dataclass(frozen=True)
class StorageSettings:
    """Artifact bucket configuration."""

    bucket_name: str | None
    region: str | None


@dataclass(frozen=True)
class ProcessSettings:
    """Test process launch configuration."""

    task_root: Path = DEFAULT_TASK_ROOT
    scratch_root: Path = DEFAULT_SCRATCH_ROOT
    command: tuple[str, ...] = ()
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def results_dir(self) -> Path:
        return self.scratch_root / "test-results"

    @property
    def report_dir(self) -> Path:
        return self.scratch_root / "playwright-report"

    @property
    def artifact_dirs(self) -> tuple[Path, Path]:
        return (self.results_dir, self.report_dir)

    def resolved_command(self) -> tuple[str, ...]:
        """Return the argv prefix; the target spec and reporter flag are appended by the runner."""
        if self.command:
            return self.command
        playwright_bin = self.task_root / "node_modules" / ".bin" / "playwright"
        return ("node", str(playwright_bin), "test")


@dataclass(frozen=True)
class RetrySettings:
    """Retry policy for infrastructure failures."""

    max_retries: int = 2
    base_delay_seconds: float = 1.0


@dataclass(frozen=True)
class CostSettings:
    """Pricing inputs for the invocation cost estimate."""

    memory_gb: Decimal = Decimal("2")
    gb_second_rate_usd: Decimal = Decimal("0.0000166667")
    storage_cost_usd: Decimal = Decimal("0.0001")
    local_currency_rate: Decimal = Decimal("83")
    local_currency_symbol: str = "₹"


@dataclass(frozen=True)
class DispatchSettings:
    """GitHub Actions workflow dispatch configuration."""

    token: str | None
    owner: str | None
    repo: str | None
    workflow_id: str = "test-only.yml"
    ref: str = "main"
    api_url: str = "https://api.github.com"
    timeout_seconds: float = 10.0

    @property
    def has_token(self) -> bool:
        return bool(self.token) and self.token != PLACEHOLDER_TOKEN

    @property
    def workflow_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/actions"


@dataclass(frozen=True)
class RunnerSettings:
    """Top-level configuration aggregate."""

    storage: StorageSettings
    process: ProcessSettings = field(default_factory=ProcessSettings)
    retry: RetrySettings = field(default_factory=RetrySettings)
    cost: CostSettings = field(default_factory=CostSettings)
    dispatch: DispatchSettings = field(
        default_factory=lambda: DispatchSettings(token=None, owner=None, repo=None)
    )
    source_path: Path | None = None
