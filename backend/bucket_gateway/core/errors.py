from typing import Any

from botocore.exceptions import BotoCoreError, ClientError


class StorageError(Exception):
    """Raised when the object store rejects or fails a request."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    @classmethod
    def from_boto(cls, exc: BotoCoreError | ClientError) -> "StorageError":
        if isinstance(exc, ClientError):
            error = exc.response.get("Error", {})
            return cls(error.get("Message") or str(exc), error.get("Code"))
        return cls(str(exc), type(exc).__name__)


class ApiError(Exception):
    """An error rendered to the client as a JSON body with an ``error`` field."""

    def __init__(
        self,
        status_code: int,
        error: str,
        cause: StorageError | None = None,
    ) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.cause = cause

    def to_content(self) -> dict[str, Any]:
        content: dict[str, Any] = {"error": self.error}
        if self.cause is not None:
            content["details"] = self.cause.message
            content["code"] = self.cause.code
        return content
