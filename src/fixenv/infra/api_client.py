from __future__ import annotations

from typing import Any, Optional, Sequence

import httpx

from ..core.domain.models import ManifestFile


class ApiError(Exception):
    """Raised when the fixenv service answers with ``success: false`` or is unreachable."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class FixEnvApiClient:
    """HTTP client the CLI uses to talk to a fixenv service."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 120.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self._client.post(f"{self._base_url}{path}", json=body)
        except httpx.HTTPError as e:
            raise ApiError(f"Could not reach the fixenv API at {self._base_url}: {e}") from e

        try:
            result = resp.json()
        except ValueError:
            result = {}
        if not isinstance(result, dict):
            result = {}

        if not resp.is_success or not result.get("success"):
            message = result.get("error") or f"API returned {resp.status_code}"
            raise ApiError(str(message), status_code=resp.status_code)
        return result

    def analyze_repo(self, repo_url: str) -> dict[str, Any]:
        return self._post("/analyze-repo", {"repoUrl": repo_url})

    def analyze_local(
        self,
        files: Sequence[ManifestFile],
        *,
        python_version: Optional[str],
        local_path: str,
    ) -> dict[str, Any]:
        return self._post(
            "/analyze-repo",
            {
                "localFiles": [{"name": f.name, "content": f.content} for f in files],
                "pythonVersion": python_version,
                "isLocal": True,
                "localPath": local_path,
            },
        )

    def generate_snapshot(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._post("/generate-snapshot", body)
