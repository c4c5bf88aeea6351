from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from ..domain.models import DetectedVersion, ManifestFile
from ..ports import FileSourcePort, LoggerPort
from .probes import Probe, probe_first


PYPROJECT_PATTERN = re.compile(r"""python\s*=\s*["']([^"']+)["']""")

_WORKFLOW_PATTERN = re.compile(r"""python-version:\s*['"]?(\d+\.\d+\.?\d*)['"]?""", re.IGNORECASE)


@dataclass(frozen=True)
class VersionSource:
    path: str
    pattern: re.Pattern[str]


AUXILIARY_VERSION_SOURCES: tuple[VersionSource, ...] = (
    VersionSource(".python-version", re.compile(r"(\d+\.\d+\.?\d*)")),
    VersionSource("runtime.txt", re.compile(r"python-(\d+\.\d+\.?\d*)", re.IGNORECASE)),
    VersionSource(".github/workflows/ci.yml", _WORKFLOW_PATTERN),
    VersionSource(".github/workflows/main.yml", _WORKFLOW_PATTERN),
    VersionSource(".github/workflows/test.yml", _WORKFLOW_PATTERN),
)


def _match(pattern: re.Pattern[str], content: str, source: str) -> Optional[DetectedVersion]:
    m = pattern.search(content)
    if not m:
        return None
    return DetectedVersion(version=m.group(1), source=source)


class VersionSniffer:
    """Detects the Python version a project targets.

    ``pyproject.toml`` (already fetched by the locator) always wins. Otherwise
    auxiliary files are read one at a time until one of them matches.
    """

    def __init__(
        self,
        *,
        logger: LoggerPort,
        sources: Sequence[VersionSource] = AUXILIARY_VERSION_SOURCES,
    ) -> None:
        self._logger = logger
        self._sources = tuple(sources)

    def _pyproject_probe(self, files: Sequence[ManifestFile]) -> Probe[DetectedVersion]:
        def run() -> Optional[DetectedVersion]:
            pyproject = next((f for f in files if f.name == "pyproject.toml"), None)
            if pyproject is None:
                return None
            return _match(PYPROJECT_PATTERN, pyproject.content, "pyproject.toml")

        return Probe(label="pyproject.toml", run=run)

    def _auxiliary_probe(self, source: FileSourcePort, entry: VersionSource) -> Probe[DetectedVersion]:
        def run() -> Optional[DetectedVersion]:
            content = source.read(entry.path)
            if content is None:
                return None
            return _match(entry.pattern, content, entry.path)

        return Probe(label=entry.path, run=run)

    def detect(self, *, files: Sequence[ManifestFile], source: FileSourcePort) -> DetectedVersion:
        probes = [self._pyproject_probe(files)]
        probes.extend(self._auxiliary_probe(source, entry) for entry in self._sources)

        detected = probe_first(probes)
        if detected is None:
            self._logger.info("python_version_not_detected")
            return DetectedVersion()

        self._logger.info(
            "python_version_detected",
            version=detected.version,
            source=detected.source,
        )
        return detected
