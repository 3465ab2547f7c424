"""
Shared pytest configuration for CmdSense tests.

This file provides shared fixtures and configuration for all test modules.
"""

import json
import os
from typing import List
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from cmdsense.config.models import CmdSenseConfig, AppConfig, EngineConfig, RemoteConfig, CacheConfig
from cmdsense.core.context import ContextProvider, PathCandidate
from cmdsense.core.llm_client import RemoteInferenceClient
from cmdsense.core.suggestions import SuggestionEngine, SuggestionContext


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests spanning several components")
    config.addinivalue_line("markers", "slow: tests that sleep or wait on timers")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real credentials and overrides out of the tests."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("CMDSENSE_ENV", raising=False)
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    for key in list(os.environ):
        if key.startswith("CMDSENSE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def offline_config():
    """Configuration with no API key: the engine runs offline."""
    return CmdSenseConfig(
        app=AppConfig(log_level="DEBUG"),
        engine=EngineConfig(offline_mode=True),
        cache=CacheConfig(max_size=100),
    )


@pytest.fixture
def online_config():
    """Configuration with an API key so the remote path is taken."""
    return CmdSenseConfig(
        remote=RemoteConfig(api_key="test-key", endpoint="https://inference.test/v1/chat/completions"),
    )


@pytest.fixture
def mock_client():
    """Stand-in for RemoteInferenceClient with an AsyncMock ``complete``."""
    client = Mock(spec=RemoteInferenceClient)
    client.complete = AsyncMock(return_value="")
    client.close = AsyncMock()
    return client


@pytest.fixture
def offline_engine(offline_config):
    return SuggestionEngine(config=offline_config)


@pytest.fixture
def online_engine(online_config, mock_client):
    return SuggestionEngine(config=online_config, client=mock_client)


@pytest.fixture
def context():
    return SuggestionContext(current_directory="/home/user/project")


def chat_response(content: str, status_code: int = 200) -> httpx.Response:
    """An OpenAI-style chat completion response."""
    body = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    return httpx.Response(status_code, content=json.dumps(body).encode())


def make_client(handler, timeout: float = 5.0) -> RemoteInferenceClient:
    """Client whose requests are answered by ``handler`` via httpx.MockTransport."""
    return RemoteInferenceClient(
        api_key="test-key",
        endpoint="https://inference.test/v1/chat/completions",
        model="test-model",
        timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


class FakeContextProvider(ContextProvider):
    """In-memory provider used by completion tests."""

    def __init__(self, entries=None, branches=None, scripts=None, fail=False):
        self.entries = entries or {}
        self.branches = branches or []
        self.scripts = scripts or []
        self.fail = fail
        self.calls: List[tuple] = []

    def list_directory(self, directory, prefix="", dirs_only=False):
        self.calls.append(("list_directory", directory, prefix, dirs_only))
        if self.fail:
            raise PermissionError("denied")
        candidates = [PathCandidate(name, is_dir) for name, is_dir in self.entries.get(directory, [])]
        return [c for c in candidates if c.name.startswith(prefix) and (c.is_directory or not dirs_only)]

    def git_branches(self, directory):
        self.calls.append(("git_branches", directory))
        if self.fail:
            raise RuntimeError("not a repository")
        return list(self.branches)

    def npm_scripts(self, directory):
        self.calls.append(("npm_scripts", directory))
        return list(self.scripts)


@pytest.fixture
def fake_provider():
    return FakeContextProvider(
        entries={
            "/work": [("src", True), ("setup.py", False), ("scripts", True), ("my notes.txt", False)],
            "/work/src/": [("main.py", False), ("models", True)],
        },
        branches=["main", "feature/login", "fix/typo"],
        scripts=["build", "test", "start"],
    )
