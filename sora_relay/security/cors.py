from typing import Mapping

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware


class PermissiveCorsMiddleware(BaseHTTPMiddleware):
    """Answer every preflight directly and stamp CORS headers on all responses."""

    def __init__(self, app, headers: Mapping[str, str]):
        super().__init__(app)
        self._headers = dict(headers)

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=self._headers)
        response = await call_next(request)
        for name, value in self._headers.items():
            response.headers[name] = value
        return response


async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Known paths hit with the wrong method are reported like unknown paths.
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"error": "Not Found"})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


def setup_cors(app: FastAPI, headers: Mapping[str, str]) -> None:
    app.add_middleware(PermissiveCorsMiddleware, headers=headers)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)
