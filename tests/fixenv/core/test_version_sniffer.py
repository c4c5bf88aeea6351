"""Tests for Python version detection."""
from fixenv.core.domain.models import DetectedVersion, ManifestFile
from fixenv.core.services import InMemorySource, VersionSniffer

from fakes import FakeLogger


class RecordingSource(InMemorySource):
    def __init__(self, files):
        super().__init__(files)
        self.reads = []

    def read(self, path):
        self.reads.append(path)
        return super().read(path)


def _pyproject(content):
    return ManifestFile(name="pyproject.toml", type="poetry", format="Poetry (pyproject.toml)", content=content)


def test_pyproject_match_wins_without_reading_other_files():
    source = RecordingSource({".python-version": "3.9.1", "runtime.txt": "python-3.8.0"})
    files = [_pyproject('[tool.poetry.dependencies]\npython = "^3.11"\n')]

    detected = VersionSniffer(logger=FakeLogger()).detect(files=files, source=source)

    assert detected == DetectedVersion(version="^3.11", source="pyproject.toml")
    assert source.reads == []


def test_python_version_file_is_read_first():
    source = RecordingSource({".python-version": "3.10.4\n", "runtime.txt": "python-3.8.0"})

    detected = VersionSniffer(logger=FakeLogger()).detect(files=[], source=source)

    assert detected == DetectedVersion(version="3.10.4", source=".python-version")
    assert source.reads == [".python-version"]


def test_runtime_txt_is_case_insensitive():
    source = RecordingSource({"runtime.txt": "Python-3.9.7"})

    detected = VersionSniffer(logger=FakeLogger()).detect(files=[], source=source)

    assert detected.version == "3.9.7"
    assert detected.source == "runtime.txt"


def test_workflow_matrix_value_is_used():
    workflow = "jobs:\n  test:\n    steps:\n      - uses: actions/setup-python@v5\n        with:\n          python-version: '3.12'\n"
    source = RecordingSource({".github/workflows/test.yml": workflow})

    detected = VersionSniffer(logger=FakeLogger()).detect(files=[], source=source)

    assert detected == DetectedVersion(version="3.12", source=".github/workflows/test.yml")
    assert source.reads == [
        ".python-version",
        "runtime.txt",
        ".github/workflows/ci.yml",
        ".github/workflows/main.yml",
        ".github/workflows/test.yml",
    ]


def test_pyproject_without_python_constraint_falls_through():
    source = RecordingSource({".python-version": "3.11"})
    files = [_pyproject('[project]\nname = "demo"\n')]

    detected = VersionSniffer(logger=FakeLogger()).detect(files=files, source=source)

    assert detected.source == ".python-version"


def test_nothing_found_returns_unknown_sentinel():
    logger = FakeLogger()

    detected = VersionSniffer(logger=logger).detect(files=[], source=InMemorySource({}))

    assert detected == DetectedVersion(version="unknown", source="not detected")
    assert detected.is_known is False
    assert "python_version_not_detected" in logger.messages()
