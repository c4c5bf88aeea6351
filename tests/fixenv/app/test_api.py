"""HTTP API tests through the real container, with GitHub and the LLM faked."""
from contextlib import ExitStack

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from fixenv.app.api import client_id, create_app
from fixenv.app.config import AppConfig, DirectoryConfig, LLMConfig, ShareConfig
from fixenv.app.container import Container
from fixenv.core.domain.exceptions import LLMRequestError
from fixenv.infra.rate_limiter import RedisRateLimiter

from fakes import ACME_REPLY, CLEAN_REPLY, FakeGitHub, FakeLLM, FakeLogger, FakeRedis, acme_github


ACME_URL = "https://github.com/acme/demo"

SNAPSHOT_BODY = {
    "issues": [
        {
            "title": "Missing pin",
            "package": "numpy",
            "severity": "high",
            "category": "missing_pin",
            "description": "numpy is not pinned",
        }
    ],
    "suggestions": ["Pin numpy"],
    "dependencyDiff": [{"package": "numpy", "before": "unversioned", "after": "1.26.2"}],
    "primaryFormat": "Requirements.txt",
    "pythonVersion": "3.11",
    "repositoryUrl": ACME_URL,
    "reproducibilityScore": 95,
}


@pytest.fixture
def make_client(tmp_path):
    """Build a TestClient (lifespan included) around a container with fakes injected."""
    stack = ExitStack()

    def _make(*, github=None, llm=None, api_key="test-key", rate_limiter=None):
        config = AppConfig(
            directories=DirectoryConfig(home=tmp_path),
            llm=LLMConfig(api_key=api_key),
            share=ShareConfig(public_base_url="https://fixenv.example.com"),
        )
        container = Container()
        container.config.from_pydantic(config)
        container.github.override(providers.Object(github or acme_github()))
        if llm is not None:
            container.llm.override(providers.Object(llm))
        if rate_limiter is not None:
            container.rate_limiter.override(providers.Object(rate_limiter))

        client = TestClient(create_app(container), raise_server_exceptions=False)
        return stack.enter_context(client)

    yield _make
    stack.close()


def test_health(make_client):
    resp = make_client().get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_cors_preflight(make_client):
    resp = make_client().options(
        "/analyze-repo",
        headers={"Origin": "https://app.example.com", "Access-Control-Request-Method": "POST"},
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


def test_analyze_repo_then_served_from_cache(make_client):
    llm = FakeLLM(ACME_REPLY)
    client = make_client(llm=llm)

    first = client.post("/analyze-repo", json={"repoUrl": ACME_URL})
    second = client.post("/analyze-repo", json={"repoUrl": ACME_URL})

    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["cached"] is False
    assert body["data"]["reproducibilityScore"] == 95
    assert body["primaryFormat"] == "Requirements.txt"
    assert body["foundFiles"] == [{"name": "requirements.txt", "format": "Requirements.txt"}]
    assert body["pythonVersion"] == "unknown"

    assert second.status_code == 200
    assert second.json()["cached"] is True
    assert second.json()["data"] == body["data"]
    assert len(llm.calls) == 1


def test_invalid_repo_url_is_400(make_client):
    resp = make_client(llm=FakeLLM(ACME_REPLY)).post("/analyze-repo", json={"repoUrl": "https://gitlab.com/acme/demo"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid GitHub URL format"}


def test_missing_repo_url_is_400(make_client):
    resp = make_client().post("/analyze-repo", json={})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required field: repoUrl"


def test_malformed_body_is_400(make_client):
    resp = make_client().post(
        "/analyze-repo",
        content=b"not json",
        headers={"content-type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert resp.json()["error"].startswith("Invalid request body")


def test_repository_without_manifest_is_404(make_client):
    llm = FakeLLM(ACME_REPLY)
    client = make_client(github=FakeGitHub(branches={"main"}, sha="abc1234"), llm=llm)

    resp = client.post("/analyze-repo", json={"repoUrl": "https://github.com/acme/docs"})

    assert resp.status_code == 404
    assert resp.json()["error"].startswith("No Python dependency files found")
    assert llm.calls == []


def test_local_files_analysis(make_client):
    llm = FakeLLM(CLEAN_REPLY)
    github = acme_github()
    client = make_client(github=github, llm=llm)

    resp = client.post(
        "/analyze-repo",
        json={
            "localFiles": [{"name": "requirements.txt", "content": "requests==2.31.0"}],
            "pythonVersion": "3.11",
            "isLocal": True,
            "localPath": "/work/demo",
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["cached"] is False
    assert body["pythonVersion"] == "3.11"
    assert body["pythonVersionSource"] == "client"
    assert body["rawRequirements"] == "requests==2.31.0"
    assert github.raw_calls == []


def test_upstream_quota_errors_pass_through(make_client):
    client = make_client(llm=FakeLLM(error=LLMRequestError.from_status(429)))

    resp = client.post("/analyze-repo", json={"repoUrl": ACME_URL})

    assert resp.status_code == 429
    assert resp.json() == {"success": False, "error": "Rate limit exceeded. Please try again in a moment."}


def test_unparseable_reply_is_502(make_client):
    resp = make_client(llm=FakeLLM("I cannot help with that")).post("/analyze-repo", json={"repoUrl": ACME_URL})

    assert resp.status_code == 502
    assert resp.json()["success"] is False


def test_missing_api_key_is_500(make_client):
    resp = make_client(api_key=None).post("/analyze-repo", json={"repoUrl": ACME_URL})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "LLM API key not configured"}


def test_unexpected_error_is_wrapped(make_client):
    resp = make_client(llm=FakeLLM(error=RuntimeError("boom"))).post("/analyze-repo", json={"repoUrl": ACME_URL})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "boom"}


def test_share_round_trip_counts_views(make_client):
    client = make_client()
    analysis = {"data": {"reproducibilityScore": 95, "issues": []}}

    created = client.post(
        "/create-share",
        json={"analysisData": analysis, "repositoryUrl": ACME_URL},
        headers={"origin": "https://app.example.com"},
    )

    assert created.status_code == 200
    token = created.json()["shareToken"]
    assert len(token) == 12
    assert created.json()["shareUrl"] == f"https://app.example.com/share/{token}"
    assert created.json()["success"] is True

    first = client.get("/get-share", params={"token": token})
    second = client.get("/get-share", params={"token": token})

    assert first.status_code == 200
    assert first.json()["success"] is True
    shared = first.json()["data"]
    assert shared["analysisData"] == analysis
    assert shared["repositoryUrl"] == ACME_URL
    assert shared["viewCount"] == 1
    assert "createdAt" in shared
    assert "viewCount" not in first.json()
    assert second.json()["data"]["viewCount"] == 2


def test_share_url_falls_back_to_public_base_url(make_client):
    created = make_client().post(
        "/create-share",
        json={"analysisData": {"data": {}}, "repositoryUrl": ACME_URL},
    )

    assert created.json()["shareUrl"].startswith("https://fixenv.example.com/share/")


def test_create_share_requires_both_fields(make_client):
    resp = make_client().post("/create-share", json={"repositoryUrl": ACME_URL})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields: analysisData and repositoryUrl"


def test_get_share_errors(make_client):
    client = make_client()

    missing = client.get("/get-share")
    unknown = client.get("/get-share", params={"token": "doesnotexist"})

    assert missing.status_code == 400
    assert missing.json()["error"] == "Missing share token"
    assert unknown.status_code == 404
    assert unknown.json() == {"success": False, "error": "Shared result not found"}


def test_generate_snapshot(make_client):
    llm = FakeLLM("```txt\nnumpy==1.26.2\n```")
    resp = make_client(llm=llm).post("/generate-snapshot", json=SNAPSHOT_BODY)

    assert resp.status_code == 200
    body = resp.json()
    assert body["fixedContent"] == "numpy==1.26.2"
    assert body["filename"] == "environment.zfix"
    assert body["format"] == ".zfix"
    assert body["zfixData"]["generator"] == "FixEnv"
    assert body["zfixData"]["fixed_dependencies"] == {"format": "requirements.txt", "content": "numpy==1.26.2"}
    assert body["zfixData"]["analysis"]["reproducibility_score"] == 95


def test_generate_snapshot_rejects_bad_bodies(make_client):
    client = make_client(llm=FakeLLM("numpy==1.26.2"))

    not_object = client.post("/generate-snapshot", json=[1, 2, 3])
    no_issues = client.post("/generate-snapshot", json={"suggestions": []})

    assert not_object.status_code == 400
    assert not_object.json()["error"] == "Request body must be a JSON object"
    assert no_issues.status_code == 400
    assert no_issues.json()["error"].startswith("Invalid snapshot request")


def test_rate_limit_returns_429_with_retry_after(make_client):
    limiter = RedisRateLimiter(redis=FakeRedis(), limits={"get-share": 2}, logger=FakeLogger())
    client = make_client(rate_limiter=limiter)
    headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}

    statuses = [client.get("/get-share", params={"token": "nope"}, headers=headers).status_code for _ in range(3)]
    other_client = client.get("/get-share", params={"token": "nope"}, headers={"x-forwarded-for": "198.51.100.2"})
    limited = client.get("/get-share", params={"token": "nope"}, headers=headers)

    assert statuses == [404, 404, 429]
    assert other_client.status_code == 404
    assert limited.headers["retry-after"] == "60"
    assert limited.json() == {"success": False, "error": "Rate limit exceeded. Please try again in a minute."}


def test_analyze_repo_is_not_rate_limited(make_client):
    limiter = RedisRateLimiter(redis=FakeRedis(), limits={"create-share": 1}, logger=FakeLogger())
    client = make_client(llm=FakeLLM(ACME_REPLY), rate_limiter=limiter)

    statuses = [client.post("/analyze-repo", json={"repoUrl": ACME_URL}).status_code for _ in range(3)]

    assert statuses == [200, 200, 200]


class _FakeRequest:
    def __init__(self, headers):
        self.headers = headers


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"x-forwarded-for": "203.0.113.7, 10.0.0.1"}, "203.0.113.7"),
        ({"cf-connecting-ip": "198.51.100.2"}, "198.51.100.2"),
        ({"x-forwarded-for": "203.0.113.7", "cf-connecting-ip": "198.51.100.2"}, "203.0.113.7"),
        ({}, "unknown"),
    ],
)
def test_client_id(headers, expected):
    assert client_id(_FakeRequest(headers)) == expected
