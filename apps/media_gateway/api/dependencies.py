from fastapi import Depends, Request

from media_gateway.core import Settings
from media_gateway.services.proxy import ProxyRelay
from media_gateway.services.storage import ObjectStore
from media_gateway.services.upload import UploadService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


def get_upload_service(
    settings: Settings = Depends(get_app_settings),
    store: ObjectStore = Depends(get_object_store),
) -> UploadService:
    return UploadService(store, max_upload_bytes=settings.max_upload_bytes)


def get_proxy_relay(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> ProxyRelay:
    return ProxyRelay(request.app.state.http_client, settings)
