"""Configuration loader service."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    PLATFORM_TIMEOUT_SECONDS,
    CostSettings,
    DispatchSettings,
    ProcessSettings,
    RetrySettings,
    RunnerSettings,
    StorageSettings,
)

CONFIG_PATH_ENV_VAR = "E2E_RUNNER_CONFIG"


class ConfigurationError(Exception):
    """Raised when the runner configuration is invalid."""


def load_settings(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> RunnerSettings:
    """Build runner settings from an optional YAML file and environment variables.

    Environment variables take precedence over file values for the bucket,
    region, task root and GitHub credentials.

    Args:
      config_path: Optional YAML file. Falls back to ``E2E_RUNNER_CONFIG``.
      environ: Environment mapping, ``os.environ`` when omitted.

    Raises:
      ConfigurationError: If the file is missing, unparsable or invalid.
    """
    env = os.environ if environ is None else environ
    resolved_path = config_path or env.get(CONFIG_PATH_ENV_VAR) or None
    path = Path(resolved_path) if resolved_path else None
    parsed = _read_config_file(path) if path else {}

    storage = _parse_storage_section(_optional_mapping(parsed.get("storage"), "storage"), env)
    process = _parse_process_section(_optional_mapping(parsed.get("process"), "process"), env)
    retry = _parse_retry_section(_optional_mapping(parsed.get("retry"), "retry"))
    cost = _parse_cost_section(_optional_mapping(parsed.get("cost"), "cost"))
    dispatch = _parse_dispatch_section(_optional_mapping(parsed.get("dispatch"), "dispatch"), env)

    return RunnerSettings(
        storage=storage,
        process=process,
        retry=retry,
        cost=cost,
        dispatch=dispatch,
        source_path=path,
    )


def _read_config_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Failed to read configuration file: {exc}") from exc
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc
    if parsed is None:
        return {}
    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")
    return parsed


def _parse_storage_section(section: Mapping[str, Any], env: Mapping[str, str]) -> StorageSettings:
    bucket_name = _optional_string(
        env.get("S3_BUCKET_NAME", section.get("bucket_name")), "storage.bucket_name"
    )
    region = _optional_string(env.get("AWS_REGION", section.get("region")), "storage.region")
    return StorageSettings(bucket_name=bucket_name, region=region)


def _parse_process_section(section: Mapping[str, Any], env: Mapping[str, str]) -> ProcessSettings:
    defaults = ProcessSettings()
    task_root_raw = env.get("LAMBDA_TASK_ROOT", section.get("task_root"))
    task_root = _optional_string(task_root_raw, "process.task_root")
    scratch_root = _optional_string(section.get("scratch_root"), "process.scratch_root")
    command = _normalize_command(section.get("command"))
    timeout_seconds = _require_positive_number(
        section.get("timeout_seconds", defaults.timeout_seconds), "process.timeout_seconds"
    )
    if timeout_seconds >= PLATFORM_TIMEOUT_SECONDS:
        raise ConfigurationError(
            "process.timeout_seconds must be less than the "
            f"{PLATFORM_TIMEOUT_SECONDS}s platform limit."
        )
    return ProcessSettings(
        task_root=Path(task_root) if task_root else defaults.task_root,
        scratch_root=Path(scratch_root) if scratch_root else defaults.scratch_root,
        command=command,
        timeout_seconds=timeout_seconds,
    )


def _parse_retry_section(section: Mapping[str, Any]) -> RetrySettings:
    defaults = RetrySettings()
    max_retries = _require_non_negative_int(
        section.get("max_retries", defaults.max_retries), "retry.max_retries"
    )
    base_delay_seconds = _require_non_negative_number(
        section.get("base_delay_seconds", defaults.base_delay_seconds), "retry.base_delay_seconds"
    )
    return RetrySettings(max_retries=max_retries, base_delay_seconds=base_delay_seconds)


def _parse_cost_section(section: Mapping[str, Any]) -> CostSettings:
    defaults = CostSettings()
    symbol = _optional_string(section.get("local_currency_symbol"), "cost.local_currency_symbol")
    return CostSettings(
        memory_gb=_require_decimal(section.get("memory_gb", defaults.memory_gb), "cost.memory_gb"),
        gb_second_rate_usd=_require_decimal(
            section.get("gb_second_rate_usd", defaults.gb_second_rate_usd),
            "cost.gb_second_rate_usd",
        ),
        storage_cost_usd=_require_decimal(
            section.get("storage_cost_usd", defaults.storage_cost_usd), "cost.storage_cost_usd"
        ),
        local_currency_rate=_require_decimal(
            section.get("local_currency_rate", defaults.local_currency_rate),
            "cost.local_currency_rate",
        ),
        local_currency_symbol=symbol or defaults.local_currency_symbol,
    )


def _parse_dispatch_section(
    section: Mapping[str, Any], env: Mapping[str, str]
) -> DispatchSettings:
    defaults = DispatchSettings(token=None, owner=None, repo=None)
    return DispatchSettings(
        token=_optional_string(env.get("GITHUB_TOKEN", section.get("token")), "dispatch.token"),
        owner=_optional_string(env.get("GITHUB_OWNER", section.get("owner")), "dispatch.owner"),
        repo=_optional_string(env.get("GITHUB_REPO", section.get("repo")), "dispatch.repo"),
        workflow_id=_optional_string(section.get("workflow_id"), "dispatch.workflow_id")
        or defaults.workflow_id,
        ref=_optional_string(section.get("ref"), "dispatch.ref") or defaults.ref,
        api_url=(
            _optional_string(section.get("api_url"), "dispatch.api_url") or defaults.api_url
        ).rstrip("/"),
        timeout_seconds=_require_positive_number(
            section.get("timeout_seconds", defaults.timeout_seconds), "dispatch.timeout_seconds"
        ),
    )


def _normalize_command(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        raise ConfigurationError("process.command must be a list of strings.")
    if not isinstance(value, Sequence):
        raise ConfigurationError("process.command must be a list of strings.")
    command: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ConfigurationError("process.command entries must be non-empty strings.")
        command.append(item.strip())
    return tuple(command)


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value < 0:
        raise ConfigurationError(f"{field_name} must not be negative.")
    return value


def _require_non_negative_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigurationError(f"{field_name} must be a number.")
    if value < 0:
        raise ConfigurationError(f"{field_name} must not be negative.")
    return float(value)


def _require_positive_number(value: Any, field_name: str) -> float:
    number = _require_non_negative_number(value, field_name)
    if number == 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return number


def _require_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, int | float | str | Decimal):
        raise ConfigurationError(f"{field_name} must be a number.")
    try:
        number = Decimal(str(value))
    except InvalidOperation as exc:
        raise ConfigurationError(f"{field_name} must be a number.") from exc
    if not number.is_finite() or number < 0:
        raise ConfigurationError(f"{field_name} must be a non-negative number.")
    return number
