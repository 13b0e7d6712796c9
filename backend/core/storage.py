"""
Object storage buckets for uploaded files (trip tickets, avatars).

Buckets map to Azure Blob Storage containers when
AZURE_STORAGE_CONNECTION_STRING is configured. Without it, files are written
through Django's default storage under MEDIA_ROOT/<bucket>/ so local
development and tests need no cloud account.
"""
import logging
import os
from typing import Optional

from django.conf import settings
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage backend rejects an operation"""


def azure_enabled() -> bool:
    return bool(getattr(settings, 'AZURE_STORAGE_CONNECTION_STRING', ''))


def get_blob_service_client():
    """Build an Azure BlobServiceClient from the configured connection string"""
    from azure.storage.blob import BlobServiceClient

    return BlobServiceClient.from_connection_string(settings.AZURE_STORAGE_CONNECTION_STRING)


def ensure_bucket(name: str, public: bool = True) -> bool:
    """
    Create the bucket if it does not exist yet.

    Returns True when the bucket was created by this call and False when it
    already existed. Raises StorageError for any other backend failure.
    """
    if azure_enabled():
        from azure.core.exceptions import AzureError, ResourceExistsError

        try:
            client = get_blob_service_client()
            client.create_container(name, public_access='blob' if public else None)
            logger.info(f"Created storage container '{name}' (public={public})")
            return True
        except ResourceExistsError:
            logger.info(f"Storage container '{name}' already exists")
            return False
        except AzureError as e:
            logger.error(f"Failed to create storage container '{name}': {str(e)}", exc_info=True)
            raise StorageError(str(e)) from e

    bucket_dir = os.path.join(settings.MEDIA_ROOT, name)
    if os.path.isdir(bucket_dir):
        return False
    try:
        os.makedirs(bucket_dir, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create local bucket directory {bucket_dir}: {str(e)}", exc_info=True)
        raise StorageError(str(e)) from e
    logger.info(f"Created local bucket directory {bucket_dir}")
    return True


def upload_file(bucket: str, path: str, file_obj, content_type: Optional[str] = None,
                cache_control: Optional[str] = None) -> str:
    """Store file_obj at <bucket>/<path> and return its public URL"""
    if azure_enabled():
        from azure.core.exceptions import AzureError
        from azure.storage.blob import ContentSettings

        try:
            blob_client = get_blob_service_client().get_blob_client(container=bucket, blob=path)
            blob_client.upload_blob(
                file_obj,
                overwrite=False,
                content_settings=ContentSettings(content_type=content_type, cache_control=cache_control),
            )
        except AzureError as e:
            logger.error(f"Upload to {bucket}/{path} failed: {str(e)}", exc_info=True)
            raise StorageError(str(e)) from e
        logger.info(f"Uploaded {bucket}/{path} to Azure")
        return blob_client.url

    try:
        saved_name = default_storage.save(f"{bucket}/{path}", file_obj)
    except OSError as e:
        logger.error(f"Upload to local storage {bucket}/{path} failed: {str(e)}", exc_info=True)
        raise StorageError(str(e)) from e
    logger.info(f"Uploaded {saved_name} to local storage")
    return default_storage.url(saved_name)
