from __future__ import annotations

from pathlib import Path
from typing import Any

from .config import AppConfig
from .container import Container
from ..core.services import collect_manifests
from ..infra.local_files import LocalDirectorySource


def _create_container(config: AppConfig | None = None) -> Container:
    """Create and initialize a container.

    Args:
        config: Optional config. If None, loads from environment variables.

    Returns:
        Initialized container instance
    """
    container = Container()

    if config is None:
        # Load from environment variables (BaseSettings default behavior)
        config = AppConfig()

    container.config.from_pydantic(config)
    container.init_resources()

    return container


def analyze(repo_url: str, *, config: AppConfig | None = None) -> dict[str, Any]:
    """Analyze the dependency files of a GitHub repository in-process.

    Args:
        repo_url: GitHub repository URL
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        Response body as served by ``POST /analyze-repo`` (without ``success``)
    """
    container = _create_container(config)
    try:
        outcome = container.analyze_repo_uc().execute(repo_url=repo_url)
        return {"cached": outcome.cached, **outcome.payload}
    finally:
        container.shutdown_resources()


def analyze_local(
    path: str | Path,
    *,
    python_version: str | None = None,
    config: AppConfig | None = None,
) -> dict[str, Any]:
    """Analyze a local checkout without going through GitHub or the cache."""
    root = Path(path)
    files = collect_manifests(LocalDirectorySource(root))
    container = _create_container(config)
    try:
        outcome = container.analyze_local_uc().execute(
            local_files=[{"name": f.name, "content": f.content} for f in files],
            python_version=python_version,
            local_path=str(root),
        )
        return {"cached": outcome.cached, **outcome.payload}
    finally:
        container.shutdown_resources()


def create_share(
    analysis_data: dict[str, Any],
    repository_url: str,
    *,
    origin: str | None = None,
    config: AppConfig | None = None,
) -> dict[str, str]:
    """Store a result for public viewing and return its token and URL."""
    container = _create_container(config)
    try:
        link = container.create_share_uc().execute(
            analysis_data=analysis_data,
            repository_url=repository_url,
            origin=origin,
        )
        return {"shareToken": link.token, "shareUrl": link.url}
    finally:
        container.shutdown_resources()


def get_share(token: str, *, config: AppConfig | None = None) -> dict[str, Any]:
    """Read a shared result; counts as one view."""
    container = _create_container(config)
    try:
        shared = container.get_share_uc().execute(token=token)
        return {
            "analysisData": shared.analysis_data,
            "repositoryUrl": shared.repository_url,
            "createdAt": shared.created_at.isoformat(),
            "viewCount": shared.view_count,
        }
    finally:
        container.shutdown_resources()


def generate_snapshot(request: dict[str, Any], *, config: AppConfig | None = None) -> dict[str, Any]:
    """Generate a ``.zfix`` snapshot from an analysis result (camelCase keys)."""
    container = _create_container(config)
    try:
        snap = container.snapshot_uc().execute(body=request)
        return {
            "zfixData": snap.zfix,
            "fixedContent": snap.fixed_content,
            "filename": snap.filename,
            "format": snap.format,
        }
    finally:
        container.shutdown_resources()
