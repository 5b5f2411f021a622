# blob_storage.py
import logging
import os
import uuid
from typing import Optional

from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.storage.blob.aio import BlobServiceClient
from fastapi import UploadFile
from pydantic import BaseModel

from app.config import AZURE_BLOB_CONTAINER_NAME, AZURE_STORAGE_CONNECTION_STRING

logger = logging.getLogger(__name__)


class MediaAsset(BaseModel):
    url: str
    storage_id: str
    duration: Optional[float] = None


def get_blob_service_client() -> BlobServiceClient:
    return BlobServiceClient.from_connection_string(AZURE_STORAGE_CONNECTION_STRING)


async def upload_media(file: UploadFile, kind: str = "video") -> MediaAsset:
    """Uploads a file to Azure Blob Storage and returns its URL and blob name."""
    file_extension = os.path.splitext(file.filename or "")[1]
    blob_name = f"{kind}/{uuid.uuid4()}{file_extension}"

    async with get_blob_service_client() as service_client:
        container_client = service_client.get_container_client(AZURE_BLOB_CONTAINER_NAME)
        try:
            await container_client.create_container()
        except ResourceExistsError:
            pass

        blob_client = container_client.get_blob_client(blob_name)
        file_content = await file.read()
        await blob_client.upload_blob(file_content, overwrite=True)
        url = blob_client.url

    logger.info("Uploaded %s (%d bytes) as %s", file.filename, len(file_content), blob_name)
    return MediaAsset(url=url, storage_id=blob_name)


async def delete_media(storage_id: str) -> bool:
    """Deletes a blob by name. A blob that is already gone counts as deleted."""
    async with get_blob_service_client() as service_client:
        blob_client = service_client.get_blob_client(AZURE_BLOB_CONTAINER_NAME, storage_id)
        try:
            await blob_client.delete_blob()
        except ResourceNotFoundError:
            logger.warning("Blob %s was already deleted", storage_id)
    return True
