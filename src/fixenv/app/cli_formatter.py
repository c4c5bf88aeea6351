"""CLI output formatting utilities for human-readable display."""

from __future__ import annotations

from typing import Any

import typer


MAX_ISSUES_SHOWN = 10
MAX_VULNERABILITIES_SHOWN = 5
RULE = "-" * 50

NO_MANIFEST_HINT = (
    "This repository does not appear to be a Python project.\n"
    "fixenv requires: requirements.txt, pyproject.toml, Pipfile, or setup.py"
)

_SEVERITY_COLORS = {
    "high": typer.colors.RED,
    "medium": typer.colors.YELLOW,
    "low": typer.colors.BLUE,
    "CRITICAL": typer.colors.BRIGHT_RED,
    "HIGH": typer.colors.RED,
    "MEDIUM": typer.colors.YELLOW,
}


def score_color(score: int) -> str:
    if score >= 80:
        return typer.colors.GREEN
    if score >= 50:
        return typer.colors.YELLOW
    return typer.colors.RED


def _style(text: str, color: bool, **kwargs: Any) -> str:
    return typer.style(text, **kwargs) if color else text


def display_name(target: str) -> str:
    """Strip the GitHub host from a repository URL for display."""
    for prefix in ("https://github.com/", "http://github.com/", "github.com/"):
        if target.startswith(prefix):
            return target[len(prefix):]
    return target


def format_scan_result(target: str, result: dict[str, Any], *, color: bool = True) -> str:
    """Format an analysis response for human-readable CLI output.

    Args:
        target: Repository URL or local path that was scanned
        result: Successful ``/analyze-repo`` response body
        color: Emit ANSI colours

    Returns:
        Formatted string for display
    """
    data = result.get("data") or {}
    issues = data.get("issues") or []
    vulnerabilities = data.get("vulnerabilities") or []
    score = int(data.get("reproducibilityScore") or 0)

    lines = []
    lines.append(_style("fixenv - Python Environment Analysis", color, fg=typer.colors.CYAN, bold=True))
    lines.append(RULE)
    lines.append(f"Repository: {_style(display_name(target), color, fg=typer.colors.CYAN)}")

    python_version = result.get("pythonVersion")
    if python_version and python_version != "unknown":
        lines.append(f"Python: {_style(python_version, color, fg=typer.colors.YELLOW)}")

    formats = result.get("detectedFormats") or []
    if formats:
        lines.append(f"Formats: {', '.join(formats)}")

    if result.get("cached"):
        lines.append("(served from cache)")

    lines.append("")
    lines.append(f"Reproducibility Score: {_style(f'{score}%', color, fg=score_color(score), bold=True)}")
    issue_color = typer.colors.YELLOW if issues else typer.colors.GREEN
    lines.append(f"Issues Found: {_style(str(len(issues)), color, fg=issue_color)}")

    if vulnerabilities:
        critical = sum(1 for v in vulnerabilities if v.get("severity") == "CRITICAL")
        high = sum(1 for v in vulnerabilities if v.get("severity") == "HIGH")
        vuln_line = f"Vulnerabilities: {_style(str(len(vulnerabilities)), color, fg=typer.colors.RED)}"
        if critical:
            vuln_line += f" ({critical} Critical)"
        elif high:
            vuln_line += f" ({high} High)"
        lines.append(vuln_line)
    else:
        lines.append(f"Vulnerabilities: {_style('0', color, fg=typer.colors.GREEN)}")

    if issues:
        lines.append("")
        lines.append("Issues:")
        for issue in issues[:MAX_ISSUES_SHOWN]:
            severity = issue.get("severity", "")
            marker = _style("*", color, fg=_SEVERITY_COLORS.get(severity, typer.colors.BLUE))
            lines.append(f"  {marker} {issue.get('title', '')}: {issue.get('package', '')} ({severity})")
        if len(issues) > MAX_ISSUES_SHOWN:
            lines.append(f"  ... and {len(issues) - MAX_ISSUES_SHOWN} more issues")

    if vulnerabilities:
        lines.append("")
        lines.append("Security Vulnerabilities:")
        for vuln in vulnerabilities[:MAX_VULNERABILITIES_SHOWN]:
            severity = vuln.get("severity", "")
            sev = _style(f"({severity})", color, fg=_SEVERITY_COLORS.get(severity, typer.colors.BLUE))
            lines.append(f"  {vuln.get('id', '')}: {vuln.get('package', '')}@{vuln.get('version', '')} {sev}")
            if vuln.get("fixed_versions"):
                lines.append(f"     Fix: upgrade to {vuln['fixed_versions']}")
        if len(vulnerabilities) > MAX_VULNERABILITIES_SHOWN:
            lines.append(f"  ... and {len(vulnerabilities) - MAX_VULNERABILITIES_SHOWN} more vulnerabilities")

    lines.append("")
    lines.append(RULE)
    lines.append("Run with --json for full output")

    return "\n".join(lines)


def format_snapshot_written(path: str, snapshot: dict[str, Any]) -> str:
    zfix = snapshot.get("zfixData") or {}
    fixed = zfix.get("fixed_dependencies") or {}
    lines = [
        f"Snapshot written: {path}",
        f"Fixed file format: {fixed.get('format', 'requirements.txt')}",
    ]
    return "\n".join(lines)
