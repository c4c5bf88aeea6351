from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click
import typer
import uvicorn
from dotenv import load_dotenv

from .. import __version__
from ..core.services import VersionSniffer, collect_manifests
from ..infra.api_client import ApiError, FixEnvApiClient
from ..infra.local_files import LocalDirectorySource
from .api import create_app
from .cli_formatter import NO_MANIFEST_HINT, format_scan_result, format_snapshot_written
from .config import AppConfig
from .container import Container


app = typer.Typer(add_completion=False, invoke_without_command=True)

DEFAULT_SNAPSHOT_FILE = "environment.zfix"


def _create_container() -> Container:
    load_dotenv()
    container = Container()
    container.config.from_pydantic(AppConfig())
    return container


def _api_client(container: Container, api_url: Optional[str]) -> FixEnvApiClient:
    if api_url:
        return container.api_client(base_url=api_url)
    return container.api_client()


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    if "No Python dependency files" in message:
        typer.echo(NO_MANIFEST_HINT, err=True)
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"fixenv v{__version__}")
        raise typer.Exit()


@app.callback()
def root(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """fixenv - Python environment analyzer."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _scan_local(container: Container, client: FixEnvApiClient, root_dir: Path) -> dict[str, Any]:
    source = LocalDirectorySource(root_dir)
    files = collect_manifests(source)
    if not files:
        _fail(
            "No Python dependency files found "
            "(requirements.txt, pyproject.toml, Pipfile, or setup.py)"
        )
    version = VersionSniffer(logger=container.logger()).detect(files=files, source=source)
    return client.analyze_local(
        files,
        python_version=version.version if version.is_known else None,
        local_path=str(root_dir),
    )


@app.command()
def scan(
    target: str = typer.Argument(..., help="GitHub repository URL or path to a local project"),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="fixenv service URL (overrides FIXENV_API__BASE_URL)"),
):
    """Analyze a repository or local project for dependency issues."""
    local_dir = Path(target).expanduser()
    is_local = local_dir.is_dir()
    if not is_local and "github.com/" not in target:
        _fail("Please provide a valid GitHub repository URL or an existing directory")

    container = _create_container()
    client = _api_client(container, api_url)
    try:
        if is_local:
            result = _scan_local(container, client, local_dir.resolve())
        else:
            result = client.analyze_repo(target)
    except ApiError as e:
        _fail(e.message)
    finally:
        client.close()
        container.shutdown_resources()

    if json_output:
        typer.echo(json.dumps(result, ensure_ascii=False, indent=2))
    else:
        typer.echo(format_scan_result(target, result, color=sys.stdout.isatty()))


def snapshot_request(repo_url: str, result: dict[str, Any]) -> dict[str, Any]:
    """Build the ``/generate-snapshot`` body from an ``/analyze-repo`` response."""
    data = result.get("data") or {}
    return {
        "issues": data.get("issues", []),
        "suggestions": data.get("suggestions", []),
        "dependencyDiff": data.get("dependencyDiff", []),
        "vulnerabilities": data.get("vulnerabilities", []),
        "reproducibilityScore": data.get("reproducibilityScore"),
        "detectedFormats": result.get("detectedFormats", []),
        "primaryFormat": result.get("primaryFormat"),
        "pythonVersion": result.get("pythonVersion"),
        "rawRequirements": result.get("rawRequirements"),
        "repositoryUrl": repo_url,
    }


@app.command()
def snapshot(
    repo_url: str = typer.Argument(..., help="GitHub repository URL"),
    output: Path = typer.Option(Path(DEFAULT_SNAPSHOT_FILE), "--output", "-o", help="Where to write the .zfix file"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="fixenv service URL (overrides FIXENV_API__BASE_URL)"),
):
    """Analyze a repository and write a fixed-environment .zfix snapshot."""
    if "github.com/" not in repo_url:
        _fail("Please provide a valid GitHub repository URL")

    container = _create_container()
    client = _api_client(container, api_url)
    try:
        result = client.analyze_repo(repo_url)
        snap = client.generate_snapshot(snapshot_request(repo_url, result))
    except ApiError as e:
        _fail(e.message)
    finally:
        client.close()
        container.shutdown_resources()

    output.write_text(json.dumps(snap.get("zfixData", {}), ensure_ascii=False, indent=2), encoding="utf-8")
    typer.echo(format_snapshot_written(str(output), snap))


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
):
    """Run the fixenv HTTP API."""
    load_dotenv()
    container = Container()
    container.config.from_pydantic(AppConfig())
    typer.echo(f"fixenv API listening on http://{host}:{port}")
    uvicorn.run(create_app(container), host=host, port=port)


def main() -> None:
    """Console entry point: usage errors exit with 1 instead of click's 2."""
    try:
        code = app(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        typer.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(code if isinstance(code, int) else 0)


if __name__ == "__main__":
    main()
