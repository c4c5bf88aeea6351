"""FastAPI application exposing the analysis, share and snapshot endpoints."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import Body, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..core.domain.exceptions import FixEnvError, InvalidRequestError, RateLimitExceededError
from .. import __version__
from .config import AppConfig
from .container import Container
from .models import (
    AnalyzeRepoRequest,
    CreateShareRequest,
    ErrorEnvelope,
    HealthResponse,
    SharedResultData,
    SharedResultResponse,
    ShareResponse,
    SnapshotResponse,
)


UNKNOWN_CLIENT = "unknown"


def client_id(request: Request) -> str:
    """Identify the caller: first ``x-forwarded-for`` hop, then ``cf-connecting-ip``."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("cf-connecting-ip") or UNKNOWN_CLIENT


def _error_response(status_code: int, message: str, headers: Optional[dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(error=message).to_wire(),
        headers=headers,
    )


def _create_container(config: AppConfig | None = None) -> Container:
    container = Container()
    container.config.from_pydantic(config or AppConfig())
    return container


def create_app(container: Container | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        container: Pre-configured container (tests override its providers).
            If None, one is built from environment variables.
    """
    container = container or _create_container()
    logger_provider = container.logger

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        container.init_resources()
        try:
            yield
        finally:
            container.shutdown_resources()

    app = FastAPI(title="fixenv", version=__version__, lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.exception_handler(FixEnvError)
    async def handle_fixenv_error(request: Request, exc: FixEnvError) -> JSONResponse:
        headers = None
        if isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(exc.retry_after)}
        if exc.status_code >= 500:
            logger_provider().error(
                "request_failed",
                path=request.url.path,
                status=exc.status_code,
                error=exc.message,
                error_type=type(exc).__name__,
            )
        return _error_response(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
        return _error_response(400, f"Invalid request body: {detail}")

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger_provider().exception("unhandled_error", path=request.url.path)
        return _error_response(500, str(exc) or "Internal server error")

    def enforce_limit(scope: str, request: Request) -> None:
        allowed, retry_after = container.rate_limiter().hit(scope, client_id(request))
        if not allowed:
            raise RateLimitExceededError(retry_after)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse()

    @app.post("/analyze-repo")
    def analyze_repo(payload: AnalyzeRepoRequest) -> dict[str, Any]:
        if payload.is_local or payload.local_files:
            outcome = container.analyze_local_uc().execute(
                local_files=[f.model_dump() for f in payload.local_files or []],
                python_version=payload.python_version,
                local_path=payload.local_path,
            )
        else:
            outcome = container.analyze_repo_uc().execute(repo_url=payload.repo_url or "")
        return {"success": True, "cached": outcome.cached, **outcome.payload}

    @app.post("/create-share", response_model=ShareResponse)
    def create_share(payload: CreateShareRequest, request: Request) -> ShareResponse:
        enforce_limit("create-share", request)
        link = container.create_share_uc().execute(
            analysis_data=payload.analysis_data,
            repository_url=payload.repository_url,
            origin=request.headers.get("origin"),
        )
        return ShareResponse(share_token=link.token, share_url=link.url)

    @app.get("/get-share", response_model=SharedResultResponse)
    def get_share(request: Request, token: Optional[str] = Query(default=None)) -> SharedResultResponse:
        enforce_limit("get-share", request)
        shared = container.get_share_uc().execute(token=token)
        return SharedResultResponse(
            data=SharedResultData(
                analysis_data=shared.analysis_data,
                repository_url=shared.repository_url,
                created_at=shared.created_at.isoformat(),
                view_count=shared.view_count,
            )
        )

    @app.post("/generate-snapshot", response_model=SnapshotResponse)
    def generate_snapshot(request: Request, body: Any = Body(default=None)) -> SnapshotResponse:
        enforce_limit("generate-snapshot", request)
        if not isinstance(body, dict):
            raise InvalidRequestError("Request body must be a JSON object")
        snapshot = container.snapshot_uc().execute(body=body)
        return SnapshotResponse(
            zfix_data=snapshot.zfix,
            fixed_content=snapshot.fixed_content,
            filename=snapshot.filename,
            format=snapshot.format,
        )

    return app
