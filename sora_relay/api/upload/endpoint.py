from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from sora_relay.service.upload import upload as upload_image

router = APIRouter(tags=["upload"])


@router.post("/upload")
async def upload(request: Request) -> JSONResponse:
    state = request.app.state
    result = await upload_image(await request.body(), state.sender, state.relay_config)
    return JSONResponse(status_code=result.status_code, content=result.body)
