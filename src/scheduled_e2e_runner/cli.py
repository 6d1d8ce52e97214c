"""Command line interface entry point."""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass
from decimal import Decimal

import click

from scheduled_e2e_runner.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    CostSettings,
    load_settings,
    write_placeholder_configuration,
)
from scheduled_e2e_runner.cost_estimation import estimate_cost
from scheduled_e2e_runner.run_execution import (
    DEFAULT_TARGET_SPEC,
    RunRequest,
    RunRequestError,
    execute_test_run,
)
from scheduled_e2e_runner.workflow_dispatch import trigger_workflow_run


class CliError(Exception):
    """Custom CLI error."""


@dataclass(frozen=True)
class LocalInvocationContext:
    """Stand-in for the serverless invocation context when running locally."""

    aws_request_id: str

    @staticmethod
    def create() -> LocalInvocationContext:
        return LocalInvocationContext(aws_request_id=f"local-test-{int(time.time() * 1000)}")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="scheduled-e2e-runner")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log run phases to stderr.")
def cli(verbose: bool) -> None:
    """Scheduled Playwright test runner utility."""
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML runner configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a YAML runner configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="run")
@click.option(
    "--target",
    "target_spec",
    required=False,
    default=DEFAULT_TARGET_SPEC,
    show_default=True,
    help="Playwright spec to execute",
)
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Optional YAML runner configuration file",
)
@click.option(
    "--request-id",
    "request_id",
    required=False,
    help="Correlation id for logs; generated when omitted",
)
def run_tests(target_spec: str, config_path: str | None, request_id: str | None) -> None:
    """Run one spec locally the way the serverless handler would."""
    context = LocalInvocationContext.create()
    try:
        settings = load_settings(config_path)
        request = RunRequest.from_event({"target_spec": target_spec})
    except (ConfigurationError, RunRequestError) as exc:
        raise CliError(str(exc)) from exc

    result = execute_test_run(request, settings, request_id=request_id or context.aws_request_id)
    click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    if not result.success:
        raise CliError("Tests failed.")
    if result.cost is not None:
        click.echo(f"Estimated cost: {result.cost.to_dict()['total_cost_local']}")


@cli.command(name="trigger")
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Optional YAML runner configuration file",
)
def trigger(config_path: str | None) -> None:
    """Dispatch the CI workflow that runs the suite."""
    context = LocalInvocationContext.create()
    try:
        settings = load_settings(config_path)
    except ConfigurationError as exc:
        raise CliError(str(exc)) from exc

    response = trigger_workflow_run(settings, request_id=context.aws_request_id)
    click.echo(response["body"])
    if response["statusCode"] != 200:
        raise CliError(f"Workflow dispatch failed with status {response['statusCode']}.")


@cli.command(name="estimate-cost")
@click.option(
    "--duration-ms",
    "duration_ms",
    required=True,
    type=click.IntRange(min=0),
    help="Test execution duration in milliseconds",
)
@click.option(
    "--memory-gb",
    "memory_gb",
    required=False,
    type=click.FloatRange(min=0, min_open=True),
    help="Memory allocation in GB (defaults to 2)",
)
def estimate(duration_ms: int, memory_gb: float | None) -> None:
    """Estimate the cost of one invocation of the given duration."""
    settings = CostSettings()
    if memory_gb is not None:
        settings = CostSettings(memory_gb=Decimal(str(memory_gb)))
    click.echo(json.dumps(estimate_cost(duration_ms, settings).to_dict(), ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
