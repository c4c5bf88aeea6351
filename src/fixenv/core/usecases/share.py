from __future__ import annotations

from typing import Any, Optional

from ..domain.exceptions import InvalidRequestError, ShareNotFoundError, ShareTokenExhaustedError
from ..domain.models import ShareLink, SharedResult
from ..ports import LoggerPort, ShareStorePort, TokenGeneratorPort


class CreateShareUseCase:
    """Stores an analysis result under a fresh public token."""

    def __init__(
        self,
        *,
        store: ShareStorePort,
        token_gen: TokenGeneratorPort,
        logger: LoggerPort,
        public_base_url: str,
        max_attempts: int = 5,
    ) -> None:
        self._store = store
        self._token_gen = token_gen
        self._logger = logger
        self._public_base_url = public_base_url
        self._max_attempts = max_attempts

    def _unique_token(self) -> str:
        for _ in range(self._max_attempts):
            token = self._token_gen.generate()
            if not self._store.token_exists(token):
                return token
        raise ShareTokenExhaustedError(self._max_attempts)

    def execute(
        self,
        *,
        analysis_data: Optional[dict[str, Any]],
        repository_url: Optional[str],
        origin: Optional[str] = None,
    ) -> ShareLink:
        if not analysis_data or not repository_url:
            raise InvalidRequestError("Missing required fields: analysisData and repositoryUrl")

        token = self._unique_token()
        self._store.create(token=token, repository_url=repository_url, analysis_data=analysis_data)

        base = (origin or self._public_base_url).rstrip("/")
        link = ShareLink(token=token, url=f"{base}/share/{token}")
        self._logger.info("share_created", token=token, repository_url=repository_url)
        return link


class GetShareUseCase:
    """Reads a shared result and counts the view."""

    def __init__(self, *, store: ShareStorePort, logger: LoggerPort) -> None:
        self._store = store
        self._logger = logger

    def execute(self, *, token: Optional[str]) -> SharedResult:
        if not token:
            raise InvalidRequestError("Missing share token")

        shared = self._store.find(token)
        if shared is None:
            raise ShareNotFoundError(token)

        # Read-then-write without locking; concurrent views can under-count.
        shared.view_count += 1
        self._store.set_view_count(token, shared.view_count)
        self._logger.info("share_viewed", token=token, view_count=shared.view_count)
        return shared
