"""Configuration loader tests."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest
from scheduled_e2e_runner.configuration.loader import ConfigurationError, load_settings


def _write_file(path: Path, contents: str) -> Path:
    path.write_text(contents, encoding="utf-8")
    return path


def test_loads_defaults_when_no_file_and_empty_environment() -> None:
    settings = load_settings(environ={})

    assert settings.storage.bucket_name is None
    assert settings.storage.region is None
    assert settings.process.task_root == Path("/var/task")
    assert settings.process.scratch_root == Path("/tmp")
    assert settings.process.timeout_seconds == 840
    assert settings.retry.max_retries == 2
    assert settings.retry.base_delay_seconds == 1.0
    assert settings.cost.memory_gb == Decimal("2")
    assert settings.dispatch.workflow_id == "test-only.yml"
    assert settings.dispatch.ref == "main"
    assert settings.source_path is None


def test_environment_variables_populate_storage_process_and_dispatch() -> None:
    settings = load_settings(
        environ={
            "S3_BUCKET_NAME": "artifacts",
            "AWS_REGION": "ap-south-1",
            "LAMBDA_TASK_ROOT": "/opt/task",
            "GITHUB_TOKEN": "ghp_secret",
            "GITHUB_OWNER": "acme",
            "GITHUB_REPO": "shop-e2e",
        }
    )

    assert settings.storage.bucket_name == "artifacts"
    assert settings.storage.region == "ap-south-1"
    assert settings.process.task_root == Path("/opt/task")
    assert settings.dispatch.token == "ghp_secret"
    assert settings.dispatch.has_token is True
    assert settings.dispatch.workflow_url == "https://github.com/acme/shop-e2e/actions"


def test_loads_yaml_sections_and_lets_environment_win(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "runner.yaml",
        """
storage:
  bucket_name: from-file
  region: eu-west-1
process:
  task_root: /srv/task
  scratch_root: /srv/scratch
  command: ["npx", "playwright", "test"]
  timeout_seconds: 120
retry:
  max_retries: 4
  base_delay_seconds: 0.5
cost:
  memory_gb: 4
  gb_second_rate_usd: "0.00002"
  local_currency_rate: 90
  local_currency_symbol: "EUR "
dispatch:
  owner: acme
  repo: shop-e2e
  workflow_id: nightly.yml
  ref: develop
  api_url: https://github.example.com/api/v3/
""",
    )

    settings = load_settings(config_path, environ={"S3_BUCKET_NAME": "from-env"})

    assert settings.source_path == config_path
    assert settings.storage.bucket_name == "from-env"
    assert settings.storage.region == "eu-west-1"
    assert settings.process.task_root == Path("/srv/task")
    assert settings.process.scratch_root == Path("/srv/scratch")
    assert settings.process.command == ("npx", "playwright", "test")
    assert settings.process.timeout_seconds == 120.0
    assert settings.retry.max_retries == 4
    assert settings.retry.base_delay_seconds == 0.5
    assert settings.cost.memory_gb == Decimal("4")
    assert settings.cost.gb_second_rate_usd == Decimal("0.00002")
    assert settings.cost.local_currency_rate == Decimal("90")
    assert settings.cost.local_currency_symbol == "EUR"
    assert settings.dispatch.workflow_id == "nightly.yml"
    assert settings.dispatch.ref == "develop"
    assert settings.dispatch.api_url == "https://github.example.com/api/v3"


def test_reads_config_path_from_environment_variable(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "runner.yaml", "retry:\n  max_retries: 0\n")

    settings = load_settings(environ={"E2E_RUNNER_CONFIG": str(config_path)})

    assert settings.retry.max_retries == 0
    assert settings.source_path == config_path


def test_empty_yaml_file_uses_defaults(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "runner.yaml", "")

    settings = load_settings(config_path, environ={})

    assert settings.retry.max_retries == 2


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_settings(tmp_path / "missing.yaml", environ={})


def test_non_mapping_root_raises(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "runner.yaml", "- one\n- two\n")

    with pytest.raises(ConfigurationError, match="root must be a mapping"):
        load_settings(config_path, environ={})


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "runner.yaml", "retry: [unclosed\n")

    with pytest.raises(ConfigurationError, match="Failed to parse"):
        load_settings(config_path, environ={})


def test_config_path_pointing_at_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Failed to read"):
        load_settings(tmp_path, environ={})


def test_config_file_with_invalid_utf8_raises(tmp_path: Path) -> None:
    config_path = tmp_path / "runner.yaml"
    config_path.write_bytes(b"\xff\xferetry: 1\n")

    with pytest.raises(ConfigurationError, match="Failed to read"):
        load_settings(config_path, environ={})


def test_timeout_must_stay_below_platform_limit(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "runner.yaml", "process:\n  timeout_seconds: 900\n")

    with pytest.raises(ConfigurationError, match="platform limit"):
        load_settings(config_path, environ={})


@pytest.mark.parametrize(
    ("contents", "message"),
    [
        ("retry:\n  max_retries: -1\n", "retry.max_retries must not be negative"),
        ("retry:\n  max_retries: true\n", "retry.max_retries must be an integer"),
        ("process:\n  timeout_seconds: 0\n", "process.timeout_seconds must be greater than zero"),
        ("process:\n  command: node test\n", "process.command must be a list"),
        ("process:\n  command: ['node', '']\n", "process.command entries"),
        ("storage: []\n", "'storage' must be a mapping"),
        ("storage:\n  bucket_name: 12\n", "storage.bucket_name must be a string"),
        ("cost:\n  memory_gb: abc\n", "cost.memory_gb must be a number"),
        ("cost:\n  memory_gb: -2\n", "cost.memory_gb must be a non-negative number"),
    ],
)
def test_invalid_values_raise_field_qualified_errors(
    tmp_path: Path, contents: str, message: str
) -> None:
    config_path = _write_file(tmp_path / "runner.yaml", contents)

    with pytest.raises(ConfigurationError, match=message):
        load_settings(config_path, environ={})


def test_placeholder_token_is_not_treated_as_configured() -> None:
    settings = load_settings(environ={"GITHUB_TOKEN": "dummy-token"})

    assert settings.dispatch.has_token is False
