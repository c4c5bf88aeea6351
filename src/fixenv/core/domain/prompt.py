from __future__ import annotations

from datetime import date
from typing import Sequence

from .models import DetectedVersion, ManifestFile, SnapshotRequest


ANALYSIS_SYSTEM_PROMPT = (
    "You are a Python dependency analysis expert. "
    "Always respond with valid JSON only, no additional text."
)

SNAPSHOT_SYSTEM_PROMPT = (
    "You are a Python dependency expert. Generate corrected dependency files "
    "without any markdown formatting or explanations."
)

KNOWN_PATTERNS = """\
1. Missing version pins: unpinned packages (e.g. numpy with no version) drift between installs
2. Python compatibility (check against the detected Python version):
   - pandas <1.5 does not support Python 3.11+
   - NumPy <1.22 does not support Python 3.11+
   - TensorFlow 2.3 supports Python 3.6-3.8 only
   - Django 2.2 does not support Python 3.10+
   - matplotlib 3.1.0 requires Python <3.11
3. CUDA mismatches: torch 2.1.0 ships for CUDA 12.1, torch 1.13.1+cu117 for CUDA 11.7
4. Breaking upgrades:
   - SQLAlchemy 2.0 breaks Flask-SQLAlchemy <3
   - Pydantic 2.0 breaks FastAPI <0.100
   - jinja2 2.x is incompatible with Flask 2.2+
5. Conflicting versions:
   - scipy 1.5.x cannot run with numpy 1.26.x
   - protobuf 4.x breaks TensorFlow 2.4 (needs 3.20.x)
6. Deprecated packages: sklearn -> scikit-learn
7. Missing dependencies: commonly imported but unlisted packages (requests, pytest)
8. Duplicate packages: the same package listed twice with different versions
9. Platform issues: CuPy CUDA wheels are unavailable on Windows, faiss-cpu <1.7.4 needs compilers
10. Indirect conflicts: transformers 4.33+ requires tokenizers 0.14+
11. Wrong build types: GPU builds (torch+cu118) on CPU-only systems
12. Typos: common misspellings (numpi -> numpy)
13. Format specific checks:
    - Poetry: dev-dependencies that belong in the main dependencies
    - Pipenv: disagreement between Pipfile and Pipfile.lock
    - setup.py: missing install_requires or wrong version constraints"""

FEW_SHOT_EXAMPLES = """\
Example 1 - Missing pin:
Input: "numpy\\npandas==1.3.0"
Output issue: {"title": "Missing version pin for numpy", "package": "numpy", "severity": "high", "category": "missing_pin", "description": "Unpinned numpy leads to version drift and potential incompatibility with pandas==1.3.0"}
Output suggestion: "Pin numpy to a compatible version: numpy==1.21.6"

Example 2 - Python compatibility:
Input: "pandas==1.2.4" (Python 3.11)
Output issue: {"title": "pandas incompatible with Python 3.11", "package": "pandas", "severity": "high", "category": "conflict", "description": "pandas <1.5 does not support Python 3.11"}
Output suggestion: "Upgrade to pandas==2.1.0 for Python 3.11 compatibility"

Example 3 - Deprecated package:
Input: "sklearn==0.0"
Output issue: {"title": "Deprecated package 'sklearn'", "package": "sklearn", "severity": "medium", "category": "outdated", "description": "sklearn is a deprecated meta-package, use scikit-learn instead"}
Output suggestion: "Replace with scikit-learn==1.3.0\""""

RESPONSE_CONTRACT = """\
Use this exact structure:
{
  "issues": [
    {
      "title": "Issue title",
      "package": "package-name",
      "severity": "high|medium|low",
      "category": "missing_pin|conflict|outdated",
      "description": "Detailed description"
    }
  ],
  "suggestions": ["Specific actionable suggestion as a string"],
  "dependencyDiff": [
    {
      "package": "package-name",
      "before": "detected version or 'unversioned'",
      "after": "suggested version"
    }
  ]
}

CATEGORY RULES:
- "missing_pin": package has no version specified
- "conflict": package versions conflict with each other or with the Python version
- "outdated": package has an old version that should be upgraded"""


def version_sentence(version: DetectedVersion) -> str:
    if version.is_known:
        return (
            f"DETECTED PYTHON VERSION: {version.version} (from {version.source})\n"
            f"IMPORTANT: Check all packages for compatibility with Python {version.version}"
        )
    return (
        "NOTE: No Python version detected. Provide general compatibility "
        "warnings for common Python version issues."
    )


def render_files(files: Sequence[ManifestFile]) -> str:
    return "".join(f"\n--- {f.name} ({f.format}) ---\n{f.content}\n" for f in files)


def build_analysis_prompt(*, files: Sequence[ManifestFile], version: DetectedVersion) -> str:
    """Build the dependency review prompt for the discovered manifest files."""
    listing = "\n".join(f"- {f.name} ({f.format})" for f in files)
    return (
        "You are an expert Python dependency analyst. Analyze the following Python "
        "dependency file(s) using your knowledge of common dependency issues.\n\n"
        f"DETECTED FILES:\n{listing}\n\n"
        f"{version_sentence(version)}\n\n"
        f"KNOWN PATTERNS TO DETECT:\n\n{KNOWN_PATTERNS}\n\n"
        f"FEW-SHOT EXAMPLES:\n\n{FEW_SHOT_EXAMPLES}\n\n"
        f"NOW ANALYZE THESE DEPENDENCY FILES:\n{render_files(files)}\n"
        "CRITICAL: Respond ONLY with a valid JSON object. No markdown, no "
        "explanatory text, raw JSON only.\n\n"
        f"{RESPONSE_CONTRACT}"
    )


def build_snapshot_prompt(
    *,
    request: SnapshotRequest,
    output_format: str,
    today: date,
) -> str:
    """Build the prompt asking for a complete, fixed dependency file."""
    python_version = request.python_version
    has_version = bool(python_version) and python_version != "unknown"
    target_python = python_version if has_version else "latest stable"

    issues = "\n".join(f"- {i.title} ({i.package}): {i.description}" for i in request.issues)
    suggestions = "\n".join(f"- {s}" for s in request.suggestions)
    corrections = "\n".join(f"{d.package}: {d.before} -> {d.after}" for d in request.dependency_diff)

    sections = [
        "You are a Python dependency expert. Generate a COMPLETE, production-ready "
        "dependency file with inline comments explaining each fix.",
        f"OUTPUT FORMAT: {output_format}",
    ]
    if has_version:
        sections.append(
            f"TARGET PYTHON VERSION: {python_version}\n"
            f"Ensure all packages are compatible with Python {python_version}."
        )
    if request.raw_requirements:
        sections.append(
            f"ORIGINAL DEPENDENCIES FILE:\n{request.raw_requirements}\n\n"
            "Include ALL of these dependencies in your output, applying fixes where needed."
        )
    sections.append(f"DETECTED ISSUES:\n{issues}")
    sections.append(f"AI SUGGESTIONS:\n{suggestions}")
    sections.append(f"DEPENDENCY CORRECTIONS:\n{corrections}")
    if request.vulnerabilities:
        lines = []
        for v in request.vulnerabilities:
            line = f"- {v.id}: {v.package}@{v.version} ({v.severity})"
            if v.fixed_versions:
                line += f" - Fix: upgrade to {v.fixed_versions}"
            lines.append(line)
        sections.append(
            f"SECURITY VULNERABILITIES ({len(request.vulnerabilities)}):\n" + "\n".join(lines)
        )
    sections.append(
        "INSTRUCTIONS:\n"
        f"1. Generate a COMPLETE {output_format} file including ALL dependencies\n"
        "2. Add an inline comment per dependency: what was fixed and why, the CVE "
        "it addresses, or that it was already correct\n"
        '3. Use the "after" versions from the dependency corrections\n'
        "4. Pin ALL dependencies to specific versions\n"
        f"5. Ensure compatibility with Python {target_python}\n"
        f"6. Follow {output_format} syntax and conventions\n"
        f"7. Start with a header comment: # Auto-fixed by FixEnv - {today.isoformat()}\n"
        "8. Prefer upgrading vulnerable packages to their fixed versions"
    )
    sections.append(
        "Respond with ONLY the complete file content. No explanations, no markdown "
        "code blocks, just the raw file content that can be saved directly."
    )
    return "\n\n".join(sections)
