from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


UNVERSIONED = "unversioned"
UNKNOWN_VERSION = "unknown"
VERSION_NOT_DETECTED = "not detected"

Severity = Literal["high", "medium", "low"]
Category = Literal["missing_pin", "conflict", "outdated"]


@dataclass(frozen=True)
class ManifestCandidate:
    """A dependency file name the locator looks for."""
    name: str
    type: str
    format: str


@dataclass(frozen=True)
class ManifestFile:
    name: str
    type: str
    format: str
    content: str


@dataclass(frozen=True)
class DetectedVersion:
    """Python version found in a repository, or the ``unknown`` sentinel."""
    version: str = UNKNOWN_VERSION
    source: str = VERSION_NOT_DETECTED

    @property
    def is_known(self) -> bool:
        return self.version != UNKNOWN_VERSION


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str

    @property
    def slug(self) -> str:
        """Returns owner/name format."""
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        """Returns GitHub HTTPS URL."""
        return f"https://github.com/{self.slug}"


@dataclass(frozen=True)
class CommitPinnedKey:
    """Cache key tied to a commit; stale as soon as the repository moves."""
    repo_url: str
    short_sha: str

    @property
    def value(self) -> str:
        return f"{self.repo_url}-{self.short_sha}"


@dataclass(frozen=True)
class UrlOnlyKey:
    """Cache key used when the commit lookup failed; may serve results up to the TTL old."""
    repo_url: str

    @property
    def value(self) -> str:
        return self.repo_url


CacheKey = Union[CommitPinnedKey, UrlOnlyKey]


class WireModel(BaseModel):
    """Base for models exchanged with clients and the LLM (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Issue(WireModel):
    title: str
    package: str
    severity: Severity
    category: Category
    description: str


class DependencyChange(WireModel):
    package: str
    before: str
    after: str

    @property
    def is_pinned(self) -> bool:
        return self.before != UNVERSIONED


class SnapshotDependencyChange(DependencyChange):
    """Diff entry sent back for snapshot generation; may explain the change."""

    reason: str | None = None


class AnalysisPayload(WireModel):
    """Shape the LLM is instructed to reply with."""

    issues: list[Issue]
    suggestions: list[str]
    dependency_diff: list[DependencyChange]


class AnalysisReport(AnalysisPayload):
    reproducibility_score: int


class Vulnerability(BaseModel):
    """Security advisory attached to a package (snake_case on the wire)."""

    id: str
    package: str
    version: str
    severity: str
    summary: str | None = None
    fixed_versions: str | None = None
    link: str | None = None


class SnapshotRequest(WireModel):
    issues: list[Issue]
    suggestions: list[str] = Field(default_factory=list)
    dependency_diff: list[SnapshotDependencyChange] = Field(default_factory=list)
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)
    detected_formats: list[str] = Field(default_factory=list)
    primary_format: str | None = None
    python_version: str | None = None
    raw_requirements: str | None = None
    repository_url: str | None = None
    reproducibility_score: int | None = None


@dataclass
class AnalysisResult:
    report: AnalysisReport
    files: list[ManifestFile]
    python_version: DetectedVersion

    @property
    def detected_formats(self) -> list[str]:
        return list(dict.fromkeys(f.format for f in self.files))

    @property
    def primary_format(self) -> str:
        return self.files[0].format

    def to_payload(self) -> dict[str, Any]:
        """Render the response body (minus the envelope flags) sent to clients and cached."""
        return {
            "data": self.report.to_wire(),
            "detectedFormats": self.detected_formats,
            "primaryFormat": self.primary_format,
            "pythonVersion": self.python_version.version,
            "pythonVersionSource": self.python_version.source,
            "foundFiles": [{"name": f.name, "format": f.format} for f in self.files],
            "rawRequirements": self.files[0].content,
        }


@dataclass
class AnalysisOutcome:
    payload: dict[str, Any]
    cached: bool = False


@dataclass
class SharedResult:
    token: str
    repository_url: str
    analysis_data: dict[str, Any]
    created_at: datetime
    view_count: int = 0


@dataclass
class ShareLink:
    token: str
    url: str


@dataclass
class Snapshot:
    zfix: dict[str, Any]
    fixed_content: str
    filename: str = "environment.zfix"
    format: str = ".zfix"
