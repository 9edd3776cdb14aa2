from fastapi import Request

from bucket_gateway.core.config import Settings
from bucket_gateway.services.storage import StorageService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> StorageService:
    return request.app.state.storage
