from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from sora_relay.service.relay import relay

router = APIRouter(tags=["proxy"])


@router.post("/proxy")
async def proxy(request: Request) -> JSONResponse:
    result = await relay(await request.body(), request.app.state.sender)
    return JSONResponse(status_code=result.status_code, content=result.body)
