# ====================================
# 📁 lambdaroute/cli/main.py
# ====================================
import typer
import logging
import json
import asyncio
import sys
from pathlib import Path
from typing import Optional
from typing_extensions import Annotated

import pydantic

from lambdaroute.core.exceptions import NotResolvableError
from lambdaroute.core.orchestrator.main_orchestrator import run_blue_green_deployment
from lambdaroute.core.observability.tracing import setup_tracing
from lambdaroute.core.versioning.resolver import resolve_qualifier_string
from lambdaroute.interfaces.types.deployment import DeploymentRequest
from lambdaroute.sdk.client import CloudDriverClient
from lambdaroute.shared.app_config import AppConfig
from lambdaroute.shared.app_logger import get_app_logger

logger = get_app_logger("cli")

app = typer.Typer(
    name="lambdaroute",
    help="Verify a candidate Lambda version blue/green style and route its alias to it.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main_cli_setup(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose DEBUG logging for all loggers."),
):
    """
    lambdaroute CLI entry point. Logs go to stderr so stdout stays parseable.
    """
    config = AppConfig()
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s [%(levelname)-8s] %(name)-25s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if verbose:
        logger.setLevel(logging.DEBUG)
        logger.debug("Verbose (DEBUG) logging enabled.")
    if config.otel_exporter_otlp_traces_endpoint:
        setup_tracing(endpoint=config.otel_exporter_otlp_traces_endpoint, environment=config.environment)
    ctx.obj = config


@app.command("resolve")
def resolve_cmd(
    qualifier: Annotated[str, typer.Argument(help="Version id or $LATEST / $OLDEST / $PREVIOUS / $MOVING.")],
    revisions: Annotated[str, typer.Option(help="Revision set as a JSON object, e.g. '{\"a\": \"3\", \"b\": \"2\"}'.")],
    retain: Annotated[int, typer.Option(help="Versions to keep when resolving $MOVING.")] = 0,
):
    """Resolves a version qualifier against a revision set."""
    try:
        revision_set = json.loads(revisions)
    except json.JSONDecodeError as e:
        typer.secho(f"--revisions is not valid JSON: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    if not isinstance(revision_set, dict):
        typer.secho("--revisions must be a JSON object", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    try:
        resolved = resolve_qualifier_string(qualifier, {str(k): str(v) for k, v in revision_set.items()}, retain)
    except NotResolvableError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(",".join(resolved) if isinstance(resolved, list) else resolved)


@app.command("bluegreen")
def bluegreen_cmd(
    ctx: typer.Context,
    request_file: Annotated[Path, typer.Argument(help="JSON file holding a DeploymentRequest.", exists=True, dir_okay=False)],
    base_url: Annotated[Optional[str], typer.Option(help="Clouddriver base URL. Defaults to CLOUDDRIVER_BASE_URL.")] = None,
):
    """Runs one blue/green verification and promotion."""
    config: AppConfig = ctx.obj or AppConfig()
    try:
        request = DeploymentRequest.model_validate_json(request_file.read_text())
    except pydantic.ValidationError as e:
        typer.secho(f"Invalid deployment request: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    async def _run():
        async with CloudDriverClient(base_url=base_url or config.clouddriver_base_url,
                                     timeout=config.http_timeout_seconds) as client:
            return await run_blue_green_deployment(
                request,
                deploy_backend=client,
                status_fetcher=client,
                artifact_fetcher=client,
                revision_source=client,
                config=config,
            )

    try:
        outcome = asyncio.run(_run())
    except ValueError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    typer.echo(outcome.model_dump_json(indent=2))
    if not outcome.succeeded:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
