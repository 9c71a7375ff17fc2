import logging
from typing import Optional

from azure.core.exceptions import ResourceExistsError
from azure.identity import DefaultAzureCredential
from azure.storage.blob import BlobServiceClient, ContainerClient

from src.shared.config import Settings, get_settings
from src.specs.common.errors import ConfigurationError


def _get_service_client(settings: Settings) -> BlobServiceClient:
    if settings.blob_connection_string:
        return BlobServiceClient.from_connection_string(settings.blob_connection_string)
    if settings.blob_account_url:
        return BlobServiceClient(settings.blob_account_url, credential=DefaultAzureCredential())
    raise ConfigurationError(
        "PUBLIC_BLOB_CONNECTION_STRING or PUBLIC_BLOB_ACCOUNT_URL is required for media uploads"
    )


def get_media_container(settings: Optional[Settings] = None) -> ContainerClient:
    """Return the media container client, creating it with public blob access if missing."""
    settings = settings or get_settings()
    service = _get_service_client(settings)
    container_client = service.get_container_client(settings.media_container)
    try:
        container_client.create_container(public_access="blob")
        logging.getLogger("blog").info("Created media container '%s'", settings.media_container)
    except ResourceExistsError:
        pass
    return container_client
