from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..domain.exceptions import InvalidRepoUrlError, NoManifestFoundError
from ..domain.models import ManifestCandidate, ManifestFile, RepoRef
from ..ports import FileSourcePort, GitHubPort, LoggerPort
from .probes import Probe, probe_all, probe_first


MANIFEST_CANDIDATES: tuple[ManifestCandidate, ...] = (
    ManifestCandidate("requirements.txt", "pip", "Requirements.txt"),
    ManifestCandidate("pyproject.toml", "poetry", "Poetry (pyproject.toml)"),
    ManifestCandidate("poetry.lock", "poetry-lock", "Poetry Lock"),
    ManifestCandidate("Pipfile", "pipenv", "Pipenv"),
    ManifestCandidate("Pipfile.lock", "pipenv-lock", "Pipenv Lock"),
    ManifestCandidate("setup.py", "setuptools", "Setup.py"),
)

PREFERRED_BRANCH = "main"
FALLBACK_BRANCH = "master"

_GITHUB_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+)")


def parse_repo_url(url: str) -> RepoRef:
    """Extract owner and repository name from a GitHub URL.

    Raises:
        InvalidRepoUrlError: If the URL does not point at github.com/<owner>/<repo>
    """
    match = _GITHUB_URL_RE.search(url or "")
    if not match:
        raise InvalidRepoUrlError(url)
    owner, name = match.group(1), match.group(2)
    name = name.split("?", 1)[0].split("#", 1)[0]
    if name.endswith(".git"):
        name = name[:-4]
    if not name:
        raise InvalidRepoUrlError(url)
    return RepoRef(owner=owner, name=name)


def candidate_for(name: str) -> ManifestCandidate:
    """Return the known candidate for a file name, or a generic one for anything else."""
    for candidate in MANIFEST_CANDIDATES:
        if candidate.name == name:
            return candidate
    return ManifestCandidate(name, "unknown", name)


def _manifest_probe(source: FileSourcePort, candidate: ManifestCandidate) -> Probe[ManifestFile]:
    def run() -> Optional[ManifestFile]:
        content = source.read(candidate.name)
        if content is None:
            return None
        return ManifestFile(
            name=candidate.name,
            type=candidate.type,
            format=candidate.format,
            content=content,
        )

    return Probe(label=candidate.name, run=run)


def collect_manifests(source: FileSourcePort) -> list[ManifestFile]:
    """Probe every candidate file concurrently and return those that exist, in candidate order."""
    probes = [_manifest_probe(source, c) for c in MANIFEST_CANDIDATES]
    return probe_all(probes)


class GitHubBranchSource:
    """FileSourcePort reading one branch of a GitHub repository."""

    def __init__(self, *, github: GitHubPort, ref: RepoRef, branch: str) -> None:
        self._github = github
        self.ref = ref
        self.branch = branch

    def read(self, path: str) -> Optional[str]:
        return self._github.fetch_raw(self.ref.owner, self.ref.name, self.branch, path)


@dataclass
class LocatedManifests:
    ref: RepoRef
    branch: str
    files: list[ManifestFile]
    source: GitHubBranchSource


class ManifestLocator:
    """Finds the dependency files of a GitHub repository."""

    def __init__(self, *, github: GitHubPort, logger: LoggerPort) -> None:
        self._github = github
        self._logger = logger

    def resolve_branch(self, ref: RepoRef) -> str:
        """Use ``main`` when the branch API confirms it, ``master`` otherwise."""
        branch = probe_first([
            Probe(
                label=PREFERRED_BRANCH,
                run=lambda: PREFERRED_BRANCH
                if self._github.branch_exists(ref.owner, ref.name, PREFERRED_BRANCH)
                else None,
            ),
        ])
        return branch or FALLBACK_BRANCH

    def locate(self, ref: RepoRef) -> LocatedManifests:
        """Resolve the branch and fetch every candidate manifest.

        Raises:
            NoManifestFoundError: If none of the candidates exist on the branch
        """
        branch = self.resolve_branch(ref)
        self._logger.info("branch_resolved", repo=ref.slug, branch=branch)

        source = GitHubBranchSource(github=self._github, ref=ref, branch=branch)
        files = collect_manifests(source)
        if not files:
            self._logger.warning("no_manifest_found", repo=ref.slug, branch=branch)
            raise NoManifestFoundError(ref.url)

        self._logger.info(
            "manifests_located",
            repo=ref.slug,
            branch=branch,
            files=[{"name": f.name, "bytes": len(f.content)} for f in files],
        )
        return LocatedManifests(ref=ref, branch=branch, files=files, source=source)


class InMemorySource:
    """FileSourcePort over files a client uploaded with its request."""

    def __init__(self, files: dict[str, str]) -> None:
        self._files = dict(files)

    def read(self, path: str) -> Optional[str]:
        return self._files.get(path)
