from fixenv.app.cli_formatter import (
    display_name,
    format_scan_result,
    format_snapshot_written,
    score_color,
)

import typer


def _issue(n, severity="medium"):
    return {"title": f"Issue {n}", "package": f"pkg{n}", "severity": severity, "category": "deprecated_package", "description": ""}


def test_display_name():
    assert display_name("https://github.com/acme/demo") == "acme/demo"
    assert display_name("github.com/acme/demo") == "acme/demo"
    assert display_name("/work/demo") == "/work/demo"


def test_score_color_bands():
    assert score_color(100) == typer.colors.GREEN
    assert score_color(80) == typer.colors.GREEN
    assert score_color(79) == typer.colors.YELLOW
    assert score_color(50) == typer.colors.YELLOW
    assert score_color(49) == typer.colors.RED


def test_clean_result():
    out = format_scan_result(
        "https://github.com/acme/clean",
        {"data": {"issues": [], "reproducibilityScore": 100}, "pythonVersion": "unknown", "detectedFormats": []},
        color=False,
    )

    assert "Repository: acme/clean" in out
    assert "Python:" not in out
    assert "Reproducibility Score: 100%" in out
    assert "Issues Found: 0" in out
    assert "Vulnerabilities: 0" in out
    assert "Issues:" not in out
    assert out.endswith("Run with --json for full output")


def test_issue_list_is_truncated_and_cache_flag_shown():
    result = {
        "cached": True,
        "data": {"issues": [_issue(n) for n in range(12)], "reproducibilityScore": 60},
        "detectedFormats": ["Requirements.txt", "Poetry"],
    }

    out = format_scan_result("/work/demo", result, color=False)

    assert "(served from cache)" in out
    assert "Formats: Requirements.txt, Poetry" in out
    assert "Issue 9: pkg9 (medium)" in out
    assert "Issue 10" not in out
    assert "... and 2 more issues" in out


def test_vulnerabilities_section():
    vulns = [
        {"id": f"GHSA-{n}", "package": "django", "version": "3.2.0", "severity": "CRITICAL" if n == 0 else "HIGH",
         "fixed_versions": "3.2.25" if n == 0 else None}
        for n in range(6)
    ]

    out = format_scan_result(
        "https://github.com/acme/web",
        {"data": {"issues": [], "vulnerabilities": vulns, "reproducibilityScore": 70}},
        color=False,
    )

    assert "Vulnerabilities: 6 (1 Critical)" in out
    assert "GHSA-0: django@3.2.0 (CRITICAL)" in out
    assert "Fix: upgrade to 3.2.25" in out
    assert "GHSA-5" not in out
    assert "... and 1 more vulnerabilities" in out


def test_colour_codes_only_when_requested():
    result = {"data": {"issues": [], "reproducibilityScore": 90}}

    assert "\x1b[" in format_scan_result("acme/demo", result, color=True)
    assert "\x1b[" not in format_scan_result("acme/demo", result, color=False)


def test_snapshot_written():
    out = format_snapshot_written("environment.zfix", {"zfixData": {"fixed_dependencies": {"format": "Pipfile"}}})

    assert out == "Snapshot written: environment.zfix\nFixed file format: Pipfile"
