"""FixEnvApiClient and LocalDirectorySource."""
import json

import httpx
import pytest

from fixenv.core.domain.models import ManifestFile
from fixenv.infra.api_client import ApiError, FixEnvApiClient
from fixenv.infra.local_files import LocalDirectorySource


def _client(handler):
    return FixEnvApiClient(
        base_url="https://fixenv.example.com/",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_analyze_repo_posts_repo_url():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "data": {"reproducibilityScore": 95}})

    result = _client(handler).analyze_repo("https://github.com/acme/demo")

    assert seen == {
        "url": "https://fixenv.example.com/analyze-repo",
        "body": {"repoUrl": "https://github.com/acme/demo"},
    }
    assert result["data"]["reproducibilityScore"] == 95


def test_analyze_local_uploads_files():
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"success": True})

    files = [ManifestFile("requirements.txt", "pip", "Requirements.txt", "flask==3.0.0")]
    _client(handler).analyze_local(files, python_version="3.12", local_path="/work/demo")

    assert seen == {
        "localFiles": [{"name": "requirements.txt", "content": "flask==3.0.0"}],
        "pythonVersion": "3.12",
        "isLocal": True,
        "localPath": "/work/demo",
    }


def test_error_envelope_raises_api_error():
    def handler(request):
        return httpx.Response(404, json={"success": False, "error": "No Python dependency files found"})

    with pytest.raises(ApiError) as exc:
        _client(handler).analyze_repo("https://github.com/acme/empty")

    assert exc.value.status_code == 404
    assert "No Python dependency files found" in exc.value.message


def test_non_json_error_uses_status():
    with pytest.raises(ApiError) as exc:
        _client(lambda request: httpx.Response(502, text="Bad Gateway")).analyze_repo("https://github.com/a/b")

    assert exc.value.message == "API returned 502"


def test_unreachable_service_raises_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ApiError) as exc:
        _client(handler).generate_snapshot({"issues": []})

    assert "Could not reach the fixenv API" in exc.value.message


def test_local_directory_source(tmp_path):
    (tmp_path / "requirements.txt").write_text("numpy\n", encoding="utf-8")
    (tmp_path / ".github" / "workflows").mkdir(parents=True)
    (tmp_path / ".github" / "workflows" / "ci.yml").write_text("python-version: 3.11", encoding="utf-8")
    source = LocalDirectorySource(tmp_path)

    assert source.read("requirements.txt") == "numpy\n"
    assert source.read(".github/workflows/ci.yml") == "python-version: 3.11"
    assert source.read("setup.py") is None
    assert source.read(".github") is None
