from pydantic import BaseModel


class UploadResponse(BaseModel):
    message: str
    url: str


class DownloadResponse(BaseModel):
    url: str


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
    code: str | None = None
