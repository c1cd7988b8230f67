"""Pytest configuration and fixtures for heypanel tests."""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from heypanel import config as config_module
from heypanel.activity import ActivityLog
from heypanel.api.client import ApiClient
from heypanel.config import APIConfig
from heypanel.credentials import CredentialStore

TEST_BASE_URL = "https://api.test"
TEST_UPLOAD_URL = "https://upload.test/v1/asset"


@pytest.fixture(autouse=True)
def isolate_panel_state(tmp_path, monkeypatch) -> None:
    """Point every XDG directory at a per-test temp dir and drop env overrides."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    for name in (
        "HEYPANEL_API_KEY",
        "HEYPANEL_BASE_URL",
        "HEYPANEL_UPLOAD_URL",
        "HEYPANEL_TIMEOUT",
        "HEYPANEL_VOICE",
        "HEYPANEL_ENGINE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "_cached_config", None)


class FakeApi:
    """In-process stand-in for the remote API, served through httpx.MockTransport.

    Routes are keyed by (method, path). Unknown routes answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: str | None = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json)

        self.routes[(method, path)] = respond

    def fail(self, method: str, path: str, error: type[httpx.RequestError] = httpx.ConnectError) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            raise error("connection refused", request=request)

        self.routes[(method, path)] = respond

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.url.path}"})
        return route(request)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.calls]

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def credentials(tmp_path) -> CredentialStore:
    store = CredentialStore(tmp_path / "vault" / "credential")
    store.set("test-key", persist=False)
    return store


@pytest.fixture
def activity() -> ActivityLog:
    return ActivityLog()


@pytest.fixture
def api_config() -> APIConfig:
    return APIConfig(base_url=TEST_BASE_URL, upload_url=TEST_UPLOAD_URL, timeout=5.0)


@pytest.fixture
def api_client(fake_api, credentials, activity, api_config) -> ApiClient:
    return ApiClient(credentials, activity, api_config, http_client=fake_api.http_client())
