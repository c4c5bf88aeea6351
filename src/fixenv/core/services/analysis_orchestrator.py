from __future__ import annotations

from typing import Sequence

from ..domain.exceptions import LLMRequestError
from ..domain.models import (
    AnalysisReport,
    AnalysisResult,
    DetectedVersion,
    ManifestFile,
    RepoRef,
)
from ..domain.prompt import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt
from ..domain.scoring import compute_reproducibility_score
from ..ports import FileSourcePort, LLMPort, LoggerPort
from .manifest_locator import ManifestLocator
from .response_interpreter import ResponseInterpreter
from .version_sniffer import VersionSniffer


class AnalysisOrchestrator:
    """Orchestrates the complete analysis workflow.

    Coordinates manifest discovery, version detection, the LLM review and
    scoring for either a GitHub repository or files uploaded by a client.
    """

    def __init__(
        self,
        *,
        locator: ManifestLocator,
        sniffer: VersionSniffer,
        llm: LLMPort,
        interpreter: ResponseInterpreter,
        logger: LoggerPort,
        temperature: float | None = None,
    ) -> None:
        self._locator = locator
        self._sniffer = sniffer
        self._llm = llm
        self._interpreter = interpreter
        self._logger = logger
        self._temperature = temperature

    def analyze_repository(self, ref: RepoRef) -> AnalysisResult:
        """Execute the complete analysis workflow for a GitHub repository.

        Args:
            ref: Repository to analyze

        Returns:
            Analysis result with score

        Raises:
            NoManifestFoundError: If the repository has no dependency files
        """
        self._logger.info("analysis_started", repo=ref.slug)

        # 1) Discover dependency files
        located = self._locator.locate(ref)

        # 2) Detect target Python version
        version = self._sniffer.detect(files=located.files, source=located.source)

        # 3) Review and score
        return self.analyze_files(located.files, version)

    def detect_version(self, files: Sequence[ManifestFile], source: FileSourcePort) -> DetectedVersion:
        return self._sniffer.detect(files=files, source=source)

    def analyze_files(self, files: Sequence[ManifestFile], version: DetectedVersion) -> AnalysisResult:
        """Run the LLM review over already collected files and score the reply."""
        prompt = build_analysis_prompt(files=files, version=version)
        try:
            raw_text = self._llm.complete(
                system=ANALYSIS_SYSTEM_PROMPT,
                prompt=prompt,
                temperature=self._temperature,
            )
        except LLMRequestError as e:
            if e.upstream_status is None:
                raise
            raise LLMRequestError.from_status(e.upstream_status, action="analysis") from e

        payload = self._interpreter.interpret(raw_text)
        score = compute_reproducibility_score(payload.issues, payload.dependency_diff)
        report = AnalysisReport(
            issues=payload.issues,
            suggestions=payload.suggestions,
            dependency_diff=payload.dependency_diff,
            reproducibility_score=score,
        )
        self._logger.info(
            "score_computed",
            score=score,
            issues=len(report.issues),
            packages=len(report.dependency_diff),
        )
        return AnalysisResult(report=report, files=list(files), python_version=version)
