from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable

from ..domain.models import Snapshot, SnapshotRequest
from ..domain.prompt import SNAPSHOT_SYSTEM_PROMPT, build_snapshot_prompt
from ..ports import LLMPort, LoggerPort


ZFIX_VERSION = "1.0"
GENERATOR = "FixEnv"
DEFAULT_CHANGE_REASON = "Version correction applied"

_FENCE = re.compile(r"```[a-z]*\n?", re.IGNORECASE)


def resolve_output_format(primary_format: str | None) -> str:
    """Pick the fixed-file format matching the project's primary manifest."""
    fmt = primary_format or ""
    if "Poetry" in fmt or "pyproject.toml" in fmt:
        return "pyproject.toml"
    if "Pipenv" in fmt or "Pipfile" in fmt:
        return "Pipfile"
    return "requirements.txt"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotBuilder:
    """Generates a fixed dependency file and wraps it in a ``.zfix`` document."""

    def __init__(
        self,
        *,
        llm: LLMPort,
        logger: LoggerPort,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._llm = llm
        self._logger = logger
        self._clock = clock

    def build(self, request: SnapshotRequest) -> Snapshot:
        now = self._clock()
        output_format = resolve_output_format(request.primary_format)
        self._logger.info(
            "snapshot_started",
            repository_url=request.repository_url,
            output_format=output_format,
            python_version=request.python_version,
            vulnerabilities=len(request.vulnerabilities),
        )

        prompt = build_snapshot_prompt(request=request, output_format=output_format, today=now.date())
        raw = self._llm.complete(system=SNAPSHOT_SYSTEM_PROMPT, prompt=prompt)
        fixed_content = _FENCE.sub("", raw).strip()

        timestamp = now.isoformat()
        zfix = {
            "version": ZFIX_VERSION,
            "generated_at": timestamp,
            "generator": GENERATOR,
            "metadata": {
                "repository_url": request.repository_url or "unknown",
                "python_version": request.python_version or "unknown",
                "detected_formats": request.detected_formats,
                "primary_format": request.primary_format or output_format,
                "scan_timestamp": timestamp,
            },
            "analysis": {
                "reproducibility_score": request.reproducibility_score or 0,
                "total_issues": len(request.issues),
                "issues": [
                    {
                        "severity": i.severity,
                        "title": i.title,
                        "package": i.package,
                        "description": i.description,
                    }
                    for i in request.issues
                ],
                "suggestions": request.suggestions,
                "dependency_changes": [
                    {
                        "package": d.package,
                        "before": d.before,
                        "after": d.after,
                        "reason": d.reason or DEFAULT_CHANGE_REASON,
                    }
                    for d in request.dependency_diff
                ],
                "vulnerabilities": [v.model_dump() for v in request.vulnerabilities],
                "vulnerability_count": len(request.vulnerabilities),
            },
            "fixed_dependencies": {
                "format": output_format,
                "content": fixed_content,
            },
        }
        self._logger.info("snapshot_generated", output_format=output_format, content_len=len(fixed_content))
        return Snapshot(zfix=zfix, fixed_content=fixed_content)
