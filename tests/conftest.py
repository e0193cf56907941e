"""Shared test fixtures."""

from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from vector_cli.services.api_client import ApiClient

TEST_TOKEN = "test-token-123"


class FakeApi:
    """In-memory stand-in for the Vector API, served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, {} if body is None else body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})
        status, body = self.routes[key]
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture(autouse=True)
def config_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point every test at an empty, private config directory."""
    directory = tmp_path / "config"
    monkeypatch.setenv("VECTOR_CONFIG_DIR", str(directory))
    monkeypatch.delenv("VECTOR_API_KEY", raising=False)
    return directory


@pytest.fixture
def api(monkeypatch) -> FakeApi:
    """Route every ApiClient the CLI builds to a FakeApi."""
    fake = FakeApi()
    factory = functools.partial(ApiClient, transport=httpx.MockTransport(fake.handler))
    monkeypatch.setattr("vector_cli.config.ApiClient", factory)
    monkeypatch.setattr("vector_cli.commands.auth.ApiClient", factory)
    return fake


@pytest.fixture
def logged_in(monkeypatch) -> str:
    monkeypatch.setenv("VECTOR_API_KEY", TEST_TOKEN)
    return TEST_TOKEN


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()
