from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from ..core.domain.models import WireModel


class LocalFile(WireModel):
    name: str
    content: str


class AnalyzeRepoRequest(WireModel):
    """Body of ``POST /analyze-repo``: a GitHub URL or files uploaded from a local checkout."""

    repo_url: Optional[str] = None
    local_files: Optional[list[LocalFile]] = None
    python_version: Optional[str] = None
    is_local: bool = False
    local_path: Optional[str] = None


class CreateShareRequest(WireModel):
    analysis_data: Optional[dict[str, Any]] = None
    repository_url: Optional[str] = None


class ErrorEnvelope(WireModel):
    success: bool = False
    error: str


class ShareResponse(WireModel):
    success: bool = True
    share_token: str
    share_url: str


class SharedResultData(WireModel):
    analysis_data: dict[str, Any]
    repository_url: str
    created_at: str
    view_count: int


class SharedResultResponse(WireModel):
    """Body of ``GET /get-share``; the shared fields sit under ``data``."""

    success: bool = True
    data: SharedResultData


class SnapshotResponse(WireModel):
    success: bool = True
    zfix_data: dict[str, Any]
    fixed_content: str
    filename: str
    format: str


class HealthResponse(WireModel):
    status: str = Field(default="ok")
