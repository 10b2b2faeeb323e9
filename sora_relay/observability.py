import json
import logging
import time
import uuid
from datetime import datetime, timezone

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

from sora_relay.config import Settings

# Extras a relay log line may carry; header values, tokens and bodies never do.
RELAY_LOG_FIELDS = (
    "operation",
    "request_id",
    "method",
    "path",
    "status_code",
    "latency_ms",
    "client_ip",
    "target_host",
    "upstream_status",
)


class RelayJsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "time": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(
            {key: getattr(record, key) for key in RELAY_LOG_FIELDS if getattr(record, key, None) is not None}
        )
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(settings: Settings) -> None:
    # httpx logs every full upstream URL at INFO; keep those out of relay logs.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler()
    if settings.log_json:
        handler.setFormatter(RelayJsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s [%(operation)s] %(message)s",
                defaults={"operation": "-"},
            )
        )
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    root.addHandler(handler)


def _operation_for(request: Request) -> str | None:
    route = request.scope.get("route")
    if route is not None:
        return getattr(route, "name", None)
    if request.method == "OPTIONS":
        return "preflight"
    return None


_access_logger = logging.getLogger("sora_relay.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()

        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            extra = {
                "operation": _operation_for(request),
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code if response else 500,
                "latency_ms": round((time.perf_counter() - start) * 1000.0, 2),
                "client_ip": request.client.host if request.client else None,
            }
            if response is None:
                _access_logger.exception("request_failed", extra=extra)
            else:
                _access_logger.info("request_complete", extra=extra)
                response.headers["x-request-id"] = request_id
