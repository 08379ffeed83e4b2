import json

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, body=None, raw=None):
        self.status_code = status_code
        if raw is None:
            raw = json.dumps(body).encode("utf-8") if body is not None else b""
        self.content = raw
        self.text = raw.decode("utf-8", errors="replace")

    def json(self):
        # requests raises a ValueError subclass on undecodable bodies
        return json.loads(self.text)


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def ok_session():
    body = {
        "proof_id": "abc123",
        "validator": "integrity-validator-1",
        "verified": True,
        "capsule": {"alg": "ed25519", "kid": "key-7", "hp_version": "2"},
    }
    return FakeSession(FakeResponse(200, body))


@pytest.fixture
def timeout_session():
    return FakeSession(error=requests.Timeout("Read timed out. (read timeout=10)"))


@pytest.fixture
def ci_env(tmp_path):
    return {
        "INPUT_API_KEY": "secret-key",
        "GITHUB_WORKSPACE": str(tmp_path),
        "GITHUB_REPOSITORY": "acme/widgets",
        "GITHUB_SHA": "0123456789abcdef",
        "GITHUB_ACTOR": "octocat",
        "GITHUB_RUN_ID": "42",
        "GITHUB_RUN_NUMBER": "7",
        "GITHUB_WORKFLOW": "release",
        "GITHUB_REF": "refs/tags/v1.0.0",
    }


@pytest.fixture
def make_session():
    def factory(status_code=200, body=None, raw=None, error=None):
        if error is not None:
            return FakeSession(error=error)
        return FakeSession(FakeResponse(status_code, body, raw))

    return factory
