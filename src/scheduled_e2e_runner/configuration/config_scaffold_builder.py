"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "runner.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Runner configuration template for scheduled-e2e-runner.
# Environment variables override the matching keys below:
#   S3_BUCKET_NAME, AWS_REGION, LAMBDA_TASK_ROOT, GITHUB_TOKEN, GITHUB_OWNER, GITHUB_REPO

storage:
  # Leave bucket_name empty to keep artifacts on the local scratch disk only.
  bucket_name: ""
  region: "us-east-1"

process:
  task_root: "/var/task"
  scratch_root: "/tmp"
  # Argv prefix; the target spec and --reporter=json are appended.
  # command: ["node", "/var/task/node_modules/.bin/playwright", "test"]
  # Must stay below the 900 second platform limit.
  timeout_seconds: 840

retry:
  # Infrastructure failures (timeout, spawn error) are retried; failing tests are not.
  max_retries: 2
  base_delay_seconds: 1

cost:
  memory_gb: 2
  gb_second_rate_usd: "0.0000166667"
  storage_cost_usd: "0.0001"
  local_currency_rate: 83
  local_currency_symbol: "₹"

dispatch:
  # token: prefer the GITHUB_TOKEN environment variable.
  owner: ""
  repo: ""
  workflow_id: "test-only.yml"
  ref: "main"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML runner configuration template with inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the runner configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Runner configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
