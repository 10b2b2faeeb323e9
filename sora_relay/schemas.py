from typing import Any

from pydantic import BaseModel, Field


class RelayRequest(BaseModel):
    method: str | None = None
    url: str | None = None
    headers: dict[str, Any] | None = None
    body: Any = None

    def has_missing_fields(self) -> bool:
        return not self.method or not self.url


class UploadRequest(BaseModel):
    image_data: str | None = None
    filename: str | None = None
    token: str | None = None
    target_url: str | None = None

    def has_missing_fields(self) -> bool:
        return not (self.image_data and self.filename and self.token and self.target_url)


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None


class RawResponse(BaseModel):
    raw_response: str = Field(default="")
