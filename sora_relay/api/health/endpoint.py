from datetime import datetime, timezone

from fastapi import APIRouter

from sora_relay.api.health.schema.response import HealthResponse

router = APIRouter(tags=["health"])


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=_utc_timestamp())
