from dataclasses import dataclass, field
from typing import Awaitable, Callable

import httpx

from sora_relay.errors import UpstreamNetworkError

# (field name, (filename or None for a plain text part, content, content type))
MultipartField = tuple[str, tuple[str | None, bytes | str] | tuple[str | None, bytes | str, str]]


@dataclass(frozen=True)
class UpstreamCall:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes | None = None
    files: list[MultipartField] | None = None


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    text: str


Sender = Callable[[UpstreamCall], Awaitable[UpstreamResponse]]


def build_client(
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    # timeout=None means no timeout at all, not the httpx 5s default.
    return httpx.AsyncClient(timeout=timeout, transport=transport)


async def send_upstream(call: UpstreamCall, client: httpx.AsyncClient) -> UpstreamResponse:
    try:
        response = await client.request(
            call.method,
            call.url,
            headers=call.headers,
            content=call.content,
            files=call.files,
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise UpstreamNetworkError(str(exc) or exc.__class__.__name__) from exc
    return UpstreamResponse(status_code=response.status_code, text=response.text)


def make_sender(
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Sender:
    """Return a sender that opens a fresh client per upstream call."""

    async def _send(call: UpstreamCall) -> UpstreamResponse:
        async with build_client(timeout=timeout, transport=transport) as client:
            return await send_upstream(call, client)

    return _send
