from __future__ import annotations

from typing import Any, Optional, Sequence

from ..domain.exceptions import InvalidRequestError, NoManifestFoundError
from ..domain.models import (
    AnalysisOutcome,
    CacheKey,
    CommitPinnedKey,
    DetectedVersion,
    ManifestFile,
    RepoRef,
    UNKNOWN_VERSION,
    UrlOnlyKey,
)
from ..ports import GitHubPort, LoggerPort, ResultCachePort
from ..services import AnalysisOrchestrator, InMemorySource, parse_repo_url
from ..services.manifest_locator import candidate_for


SHORT_SHA_LENGTH = 7
CLIENT_VERSION_SOURCE = "client"


def build_cache_key(repo_url: str, commit_sha: Optional[str]) -> CacheKey:
    if commit_sha:
        return CommitPinnedKey(repo_url=repo_url, short_sha=commit_sha[:SHORT_SHA_LENGTH])
    return UrlOnlyKey(repo_url=repo_url)


class AnalyzeRepoUseCase:
    """Use case for analyzing a GitHub repository, backed by the result cache."""

    def __init__(
        self,
        *,
        orchestrator: AnalysisOrchestrator,
        github: GitHubPort,
        cache: ResultCachePort,
        logger: LoggerPort,
        cache_enabled: bool = True,
    ) -> None:
        self._orchestrator = orchestrator
        self._github = github
        self._cache = cache
        self._logger = logger
        self._cache_enabled = cache_enabled

    def resolve_cache_key(self, repo_url: str, ref: RepoRef) -> CacheKey:
        sha = self._github.latest_commit_sha(ref.owner, ref.name)
        key = build_cache_key(repo_url, sha)
        self._logger.debug("cache_key_resolved", key=key.value, pinned=isinstance(key, CommitPinnedKey))
        return key

    def execute(self, *, repo_url: str) -> AnalysisOutcome:
        """Execute analysis, serving a cached payload when one is fresh.

        Args:
            repo_url: GitHub repository URL

        Returns:
            Outcome with the response payload and whether it came from the cache
        """
        if not repo_url:
            raise InvalidRequestError("Missing required field: repoUrl")
        ref = parse_repo_url(repo_url)

        if not self._cache_enabled:
            return AnalysisOutcome(payload=self._orchestrator.analyze_repository(ref).to_payload())

        key = self.resolve_cache_key(repo_url, ref)
        cached = self._cache.get(key)
        if cached is not None:
            self._logger.info("cache_hit", key=key.value)
            return AnalysisOutcome(payload=cached, cached=True)

        self._logger.info("cache_miss", key=key.value)
        payload = self._orchestrator.analyze_repository(ref).to_payload()

        # A failed write is logged and the computed payload is still returned.
        try:
            self._cache.put(key, repo_url, payload)
        except Exception:
            self._logger.exception("cache_write_failed", key=key.value)

        return AnalysisOutcome(payload=payload)


class AnalyzeLocalUseCase:
    """Use case for analyzing dependency files uploaded by the CLI from a local checkout."""

    def __init__(self, *, orchestrator: AnalysisOrchestrator, logger: LoggerPort) -> None:
        self._orchestrator = orchestrator
        self._logger = logger

    def execute(
        self,
        *,
        local_files: Sequence[dict[str, Any]],
        python_version: Optional[str] = None,
        local_path: Optional[str] = None,
    ) -> AnalysisOutcome:
        uploaded: dict[str, str] = {}
        for entry in local_files:
            name = entry.get("name")
            content = entry.get("content")
            if not isinstance(name, str) or not isinstance(content, str):
                raise InvalidRequestError("Each local file needs a string name and content")
            uploaded[name] = content

        if not uploaded:
            raise NoManifestFoundError(local_path or "<local>")

        files = []
        for name, content in uploaded.items():
            candidate = candidate_for(name)
            files.append(ManifestFile(name=name, type=candidate.type, format=candidate.format, content=content))

        if python_version and python_version != UNKNOWN_VERSION:
            version = DetectedVersion(version=python_version, source=CLIENT_VERSION_SOURCE)
        else:
            version = self._orchestrator.detect_version(files, InMemorySource(uploaded))

        self._logger.info(
            "local_analysis_started",
            local_path=local_path,
            files=[f.name for f in files],
            python_version=version.version,
        )
        result = self._orchestrator.analyze_files(files, version)
        return AnalysisOutcome(payload=result.to_payload())
