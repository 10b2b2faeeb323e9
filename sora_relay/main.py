import httpx
from fastapi import FastAPI

from sora_relay.adapter.client.http import Sender, make_sender
from sora_relay.api.health.endpoint import router as health_router
from sora_relay.api.proxy.endpoint import router as proxy_router
from sora_relay.api.upload.endpoint import router as upload_router
from sora_relay.config import RelayConfig, Settings, settings as default_settings
from sora_relay.observability import RequestLoggingMiddleware, configure_logging
from sora_relay.security.cors import setup_cors


def create_app(
    settings: Settings | None = None,
    config: RelayConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    sender: Sender | None = None,
) -> FastAPI:
    settings = settings or default_settings
    config = config or RelayConfig()
    configure_logging(settings)

    app = FastAPI(title="Sora Relay", version="0.1.0")
    app.state.relay_config = config
    app.state.sender = sender or make_sender(
        timeout=settings.upstream_timeout_seconds,
        transport=transport,
    )

    setup_cors(app, config.cors_headers)
    app.add_middleware(RequestLoggingMiddleware)

    prefix = settings.route_prefix
    if settings.enable_generic_proxy:
        app.include_router(proxy_router, prefix=prefix)
    app.include_router(upload_router, prefix=prefix)
    app.include_router(health_router, prefix=prefix)
    return app


app = create_app()
