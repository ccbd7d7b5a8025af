"""Typer CLI for running validations and managing domain caches."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent.parent
from dotenv import load_dotenv

load_dotenv(_project_root / ".env")
load_dotenv(_project_root / ".env.local")

import asyncio
import json
from typing import Optional

import typer
from pydantic import TypeAdapter, ValidationError

from docgap.logging_config import setup_cli_logging
from docgap.models.issue_models import Issue
from docgap.models.validation_models import ValidationRequest
from docgap.services.domain import normalize_domain
from docgap.services.validator import build_validator
from docgap.storage import ObjectStoreError

app = typer.Typer(help="Validate developer issues against a documentation site.")

_issues_adapter = TypeAdapter(list[Issue])


def _load_issues(path: Path) -> list[Issue]:
    """Read issues from a JSON file holding a list or an object with an "issues" key."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("issues", [])
    return _issues_adapter.validate_python(payload)


def _echo_json(data: dict, output: Optional[Path] = None) -> None:
    text = json.dumps(data, indent=2)
    if output is not None:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Wrote {output}")
    else:
        typer.echo(text)


@app.command()
def validate(
    issues_json: Path = typer.Argument(..., exists=True, dir_okay=False, help="Issues JSON file"),
    domain: str = typer.Option(..., "--domain", "-d", help="Documentation domain"),
    session_id: str = typer.Option(..., "--session-id", "-s", help="Session identifier"),
    refresh_cache: bool = typer.Option(
        False, "--refresh-cache", help="Drop the domain caches before validating"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the report here instead of stdout"
    ),
):
    """Validate every issue in ISSUES_JSON against DOMAIN's documentation."""
    try:
        issues = _load_issues(issues_json)
        request = ValidationRequest(
            issues=issues,
            domain=domain,
            session_id=session_id,
            refresh_cache=refresh_cache,
        )
    except (ValueError, ValidationError) as e:
        typer.echo(f"Invalid input: {e}", err=True)
        raise typer.Exit(1)

    setup_cli_logging()
    validator = build_validator()
    result = asyncio.run(validator.run(request))
    _echo_json(result.model_dump(mode="json", by_alias=True, exclude_none=True), output)

    if result.error:
        typer.echo(f"Error: {result.message}", err=True)
        raise typer.Exit(1)

    summary = result.summary
    typer.echo(
        f"{summary.total_issues} issues: {summary.resolved} resolved, "
        f"{summary.confirmed} confirmed, {summary.potential_gaps} potential gaps, "
        f"{summary.critical_gaps} critical gaps",
        err=True,
    )


@app.command()
def health(domain: str = typer.Argument(..., help="Documentation domain")):
    """Check the sitemap health of DOMAIN's documentation."""
    setup_cli_logging()
    validator = build_validator()
    summary = asyncio.run(validator.clients.health.check(domain))
    if summary is None:
        typer.echo("Health check skipped: sitemap discovery or probing failed", err=True)
        raise typer.Exit(1)
    _echo_json(summary.model_dump(mode="json", by_alias=True))


@app.command("invalidate-cache")
def invalidate_cache(domain: str = typer.Argument(..., help="Documentation domain")):
    """Drop the embedding and sitemap health caches for DOMAIN."""
    setup_cli_logging()
    validator = build_validator()
    normalized = normalize_domain(domain)
    try:
        asyncio.run(validator.invalidate_caches(normalized))
    except ObjectStoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Caches invalidated for {normalized}")


if __name__ == "__main__":
    app()
