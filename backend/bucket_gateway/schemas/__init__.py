from bucket_gateway.schemas.storage import DownloadResponse, ErrorResponse, UploadResponse

__all__ = [
    "UploadResponse",
    "DownloadResponse",
    "ErrorResponse",
]
