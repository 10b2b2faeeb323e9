import json
import logging
from typing import Any
from urllib.parse import urlsplit

from pydantic import ValidationError

from sora_relay.adapter.client.http import Sender, UpstreamCall
from sora_relay.errors import DecodingError, EnvelopeValidationError
from sora_relay.schemas import ErrorResponse, RelayRequest
from sora_relay.service.normalizer import NormalizedResponse, normalize

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("method", "url")
OPERATION = "proxy"
FAILURE_ERROR = "Proxy request failed"


def parse_relay_request(raw_body: bytes) -> RelayRequest:
    try:
        request = RelayRequest.model_validate_json(raw_body)
    except ValidationError as exc:
        raise DecodingError(f"invalid proxy envelope: {exc.errors()[0]['msg']}") from exc
    if request.has_missing_fields():
        raise EnvelopeValidationError(REQUIRED_FIELDS)
    return request


def _body_supplied(body: Any) -> bool:
    # Empty objects and arrays still count as a body; null, false, 0 and "" do not.
    if isinstance(body, (dict, list)):
        return True
    return bool(body)


def _header_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_relay_call(request: RelayRequest) -> UpstreamCall:
    method = request.method.upper()
    headers = {name: _header_value(value) for name, value in (request.headers or {}).items()}
    content: bytes | None = None

    if method == "POST" and _body_supplied(request.body):
        content = json.dumps(request.body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        if not any(name.lower() == "content-type" for name in headers):
            headers["Content-Type"] = "application/json"

    return UpstreamCall(method=method, url=request.url, headers=headers, content=content)


async def relay(raw_body: bytes, send: Sender) -> NormalizedResponse:
    try:
        call = build_relay_call(parse_relay_request(raw_body))
        upstream = await send(call)
    except EnvelopeValidationError as exc:
        return NormalizedResponse(400, ErrorResponse(error=str(exc)).model_dump(exclude_none=True))
    except Exception as exc:  # noqa: BLE001
        logger.exception("proxy_request_failed", extra={"operation": OPERATION})
        body = ErrorResponse(error=FAILURE_ERROR, message=str(exc)).model_dump()
        return NormalizedResponse(500, body)

    logger.info(
        "upstream_complete",
        extra={
            "operation": OPERATION,
            "method": call.method,
            "target_host": urlsplit(call.url).hostname,
            "upstream_status": upstream.status_code,
        },
    )
    return normalize(upstream.text, upstream.status_code)
