import os
from pathlib import Path

import pytest
from helpers import mark_by_dir


TESTS = Path(__file__).parent


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    # Keep developer FIXENV_* settings out of the test run
    for name in list(os.environ):
        if name.startswith("FIXENV_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FIXENV_DIRECTORIES__HOME", str(tmp_path / "fixenv-home"))
    yield


def pytest_collection_modifyitems(config, items):
    # Mark tests by directory structure
    mark_by_dir(items, TESTS / "fixenv" / "core", pytest.mark.unit)
    mark_by_dir(items, TESTS / "fixenv" / "infra", pytest.mark.integration)
    mark_by_dir(items, TESTS / "fixenv" / "app", pytest.mark.e2e)
