import os

# Pin the env-driven defaults before sora_relay.config is imported so a local
# .env cannot change which routes the module-level app exposes.
os.environ["RELAY_ROUTE_PREFIX"] = ""
os.environ["ENABLE_GENERIC_PROXY"] = "true"
os.environ["LOG_JSON"] = "false"

from collections.abc import Callable  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from sora_relay.config import Settings  # noqa: E402
from sora_relay.main import create_app  # noqa: E402


class FakeUpstream:
    """Records outbound requests and answers them with a configurable response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.respond: Callable[[httpx.Request], httpx.Response] = lambda _req: httpx.Response(
            200, json={"ok": True}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_client(upstream: FakeUpstream):
    def _make(**settings_overrides) -> TestClient:
        settings = Settings(
            log_json=False,
            upstream_timeout_seconds=None,
            route_prefix=settings_overrides.pop("route_prefix", ""),
            enable_generic_proxy=settings_overrides.pop("enable_generic_proxy", True),
        )
        app = create_app(settings=settings, transport=httpx.MockTransport(upstream.handler))
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
