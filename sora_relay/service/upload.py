import base64
import binascii
import logging
import re
from urllib.parse import urlsplit

from pydantic import ValidationError

from sora_relay.adapter.client.http import Sender, UpstreamCall
from sora_relay.config import RelayConfig
from sora_relay.errors import DecodingError, EnvelopeValidationError
from sora_relay.schemas import ErrorResponse, UploadRequest
from sora_relay.service.normalizer import NormalizedResponse, normalize

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("image_data", "filename", "token", "target_url")
OPERATION = "upload"
FAILURE_ERROR = "Upload failed"

# First match wins; anything unmatched is sent as PNG.
_MIME_BY_EXTENSION = (
    ((".jpg", ".jpeg"), "image/jpeg"),
    ((".webp",), "image/webp"),
    ((".gif",), "image/gif"),
)
DEFAULT_MIME_TYPE = "image/png"


def infer_mime_type(filename: str) -> str:
    lowered = filename.lower()
    for extensions, mime_type in _MIME_BY_EXTENSION:
        if lowered.endswith(extensions):
            return mime_type
    return DEFAULT_MIME_TYPE


_ASCII_WHITESPACE = re.compile(r"[\t\n\f\r ]+")


def decode_image(image_data: str) -> bytes:
    # Line-wrapped and unpadded payloads are accepted; anything else must be exact.
    compact = _ASCII_WHITESPACE.sub("", image_data)
    if len(compact) % 4 == 1:
        raise DecodingError("invalid base64 image data: truncated input")
    compact += "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodingError(f"invalid base64 image data: {exc}") from exc


def parse_upload_request(raw_body: bytes) -> UploadRequest:
    try:
        request = UploadRequest.model_validate_json(raw_body)
    except ValidationError as exc:
        raise DecodingError(f"invalid upload envelope: {exc.errors()[0]['msg']}") from exc
    if request.has_missing_fields():
        raise EnvelopeValidationError(REQUIRED_FIELDS)
    return request


def build_upload_call(request: UploadRequest, config: RelayConfig) -> UpstreamCall:
    content = decode_image(request.image_data)
    return UpstreamCall(
        method="POST",
        url=request.target_url,
        headers={
            "Authorization": f"Bearer {request.token}",
            "User-Agent": config.upload_user_agent,
        },
        files=[
            ("file", (request.filename, content, infer_mime_type(request.filename))),
            ("file_name", (None, request.filename)),
        ],
    )


async def upload(raw_body: bytes, send: Sender, config: RelayConfig) -> NormalizedResponse:
    try:
        call = build_upload_call(parse_upload_request(raw_body), config)
        upstream = await send(call)
    except EnvelopeValidationError as exc:
        return NormalizedResponse(400, ErrorResponse(error=str(exc)).model_dump(exclude_none=True))
    except Exception as exc:  # noqa: BLE001
        logger.exception("upload_failed", extra={"operation": OPERATION})
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
