from __future__ import annotations

import secrets
import string
from typing import Any, Optional, Protocol

from .domain.models import CacheKey, SharedResult


class FileSourcePort(Protocol):
    """A place dependency files can be read from (a GitHub branch, a local directory...)."""

    def read(self, path: str) -> Optional[str]:
        """Return the file content, or None when the file is absent or unreadable."""
        ...


class GitHubPort(Protocol):
    """Port for unauthenticated GitHub reads."""

    def branch_exists(self, owner: str, repo: str, branch: str) -> bool:
        ...

    def fetch_raw(self, owner: str, repo: str, branch: str, path: str) -> Optional[str]:
        """Fetch a file from the raw content host; None on 404 or transport failure."""
        ...

    def latest_commit_sha(self, owner: str, repo: str) -> Optional[str]:
        """Return the full SHA of the newest commit on the default branch, if reachable."""
        ...


class LLMPort(Protocol):
    """Port for chat-completion style inference."""

    def complete(self, *, system: str, prompt: str, temperature: float | None = None) -> str:
        ...


class ResultCachePort(Protocol):
    """Port for time-limited analysis caching."""

    def get(self, key: CacheKey) -> Optional[dict[str, Any]]:
        """Return the newest unexpired payload stored under the key."""
        ...

    def put(self, key: CacheKey, repository_url: str, payload: dict[str, Any]) -> None:
        ...


class ShareStorePort(Protocol):
    """Port for publicly shared analysis results."""

    def token_exists(self, token: str) -> bool:
        ...

    def create(self, *, token: str, repository_url: str, analysis_data: dict[str, Any]) -> SharedResult:
        ...

    def find(self, token: str) -> Optional[SharedResult]:
        ...

    def set_view_count(self, token: str, view_count: int) -> None:
        ...


class RateLimiterPort(Protocol):
    def hit(self, scope: str, client_id: str) -> tuple[bool, int]:
        """Count one request; return (allowed, retry_after_seconds)."""
        ...


class TokenGeneratorPort(Protocol):
    def generate(self) -> str:
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    Extra keyword arguments become structured fields on the log record.
    """

    def debug(self, message: str, **kwargs: Any) -> None:
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        ...

    def exception(self, message: str, **kwargs: Any) -> None:
        ...


SHARE_TOKEN_ALPHABET = string.ascii_letters + string.digits


class ShareTokenGenerator:
    def __init__(self, length: int = 12) -> None:
        self._length = length

    def generate(self) -> str:
        return "".join(secrets.choice(SHARE_TOKEN_ALPHABET) for _ in range(self._length))
