from __future__ import annotations

from typing import Iterator, Optional

import httpx

from ..core.ports import LoggerPort


DEFAULT_API_URL = "https://api.github.com"
DEFAULT_RAW_URL = "https://raw.githubusercontent.com"


class GitHubClient:
    """Unauthenticated (optionally token-authenticated) reads against GitHub.

    Every transport failure is reported as "absent" to callers: ``False`` for
    branch probes and ``None`` for file and commit lookups.
    """

    def __init__(
        self,
        *,
        logger: LoggerPort,
        api_url: str = DEFAULT_API_URL,
        raw_url: str = DEFAULT_RAW_URL,
        token: str = "",
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._logger = logger
        self._api_url = api_url.rstrip("/")
        self._raw_url = raw_url.rstrip("/")
        headers = {"Accept": "application/vnd.github+json", "User-Agent": "fixenv"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._headers = headers

    def close(self) -> None:
        self._client.close()

    def _get(self, url: str, **kwargs) -> Optional[httpx.Response]:
        try:
            return self._client.get(url, headers=self._headers, **kwargs)
        except httpx.HTTPError as e:
            self._logger.warning("github_request_failed", url=url, error=str(e))
            return None

    def branch_exists(self, owner: str, repo: str, branch: str) -> bool:
        resp = self._get(f"{self._api_url}/repos/{owner}/{repo}/branches/{branch}")
        return resp is not None and resp.is_success

    def fetch_raw(self, owner: str, repo: str, branch: str, path: str) -> Optional[str]:
        resp = self._get(f"{self._raw_url}/{owner}/{repo}/{branch}/{path}")
        if resp is None or not resp.is_success:
            return None
        return resp.text

    def latest_commit_sha(self, owner: str, repo: str) -> Optional[str]:
        resp = self._get(f"{self._api_url}/repos/{owner}/{repo}/commits", params={"per_page": 1})
        if resp is None or not resp.is_success:
            return None
        try:
            commits = resp.json()
        except ValueError:
            return None
        if not isinstance(commits, list) or not commits:
            return None
        sha = commits[0].get("sha") if isinstance(commits[0], dict) else None
        return sha if isinstance(sha, str) and sha else None


def init_github(
    *,
    logger: LoggerPort,
    api_url: str = DEFAULT_API_URL,
    raw_url: str = DEFAULT_RAW_URL,
    token: str = "",
    timeout: float = 10.0,
) -> Iterator[GitHubClient]:
    """dependency_injector Resource initializer: close the HTTP client on shutdown."""
    client = GitHubClient(logger=logger, api_url=api_url, raw_url=raw_url, token=token, timeout=timeout)
    yield client
    client.close()
