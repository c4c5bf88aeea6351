from __future__ import annotations

from .probes import Probe, probe_all, probe_first
from .manifest_locator import InMemorySource, ManifestLocator, collect_manifests, parse_repo_url
from .version_sniffer import VersionSniffer
from .response_interpreter import ResponseInterpreter
from .analysis_orchestrator import AnalysisOrchestrator
from .snapshot_builder import SnapshotBuilder

__all__ = [
    "Probe",
    "probe_all",
    "probe_first",
    "InMemorySource",
    "ManifestLocator",
    "collect_manifests",
    "parse_repo_url",
    "VersionSniffer",
    "ResponseInterpreter",
    "AnalysisOrchestrator",
    "SnapshotBuilder",
]
