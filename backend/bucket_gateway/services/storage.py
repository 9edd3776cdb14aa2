import asyncio
from pathlib import Path
from typing import Final
from urllib.parse import quote, urlsplit

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from bucket_gateway.core.config import Settings
from bucket_gateway.core.errors import StorageError

DOWNLOAD_URL_TTL: Final[int] = 60


class StorageService:
    """Thin wrapper over one S3-compatible bucket."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        session = boto3.session.Session()
        self.client = session.client(
            "s3",
            endpoint_url=str(settings.s3_endpoint) if settings.s3_endpoint else None,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region,
            config=Config(
                signature_version="s3v4",
                retries={"max_attempts": 1, "mode": "standard"},
            ),
        )
        self.bucket = settings.bucket_name

    async def list_keys(self) -> list[str]:
        def _list() -> list[str]:
            paginator = self.client.get_paginator("list_objects_v2")
            keys: list[str] = []
            for page in paginator.paginate(Bucket=self.bucket):
                keys.extend(item["Key"] for item in page.get("Contents", []))
            return keys

        try:
            return await asyncio.to_thread(_list)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError.from_boto(exc) from exc

    async def upload_file(self, path: Path, key: str) -> str:
        """Stream ``path`` to the bucket under ``key`` and return its location.

        The key is used as given; an existing object with the same key is
        replaced.
        """

        def _upload() -> None:
            with path.open("rb") as body:
                self.client.put_object(Bucket=self.bucket, Key=key, Body=body)

        try:
            await asyncio.to_thread(_upload)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError.from_boto(exc) from exc
        return self.object_location(key)

    def object_location(self, key: str) -> str:
        quoted_key = quote(key)
        endpoint = self.client.meta.endpoint_url.rstrip("/")
        if self.settings.s3_endpoint:
            return f"{endpoint}/{self.bucket}/{quoted_key}"
        parts = urlsplit(endpoint)
        return f"{parts.scheme}://{self.bucket}.{parts.netloc}/{quoted_key}"

    def create_presigned_get(self, key: str, expires_in: int = DOWNLOAD_URL_TTL) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError.from_boto(exc) from exc
