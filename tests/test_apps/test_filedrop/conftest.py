"""Shared fixtures for filedrop app tests."""

from pathlib import Path
from typing import Final

import pytest
from django.core.files.base import ContentFile

from server.apps.filedrop.infrastructure.index import MetadataIndex
from server.apps.filedrop.infrastructure.storage import BlobStorage
from server.apps.filedrop.logic.transfer import TransferService

BASE_URL: Final = 'https://drop.example'
MAX_UPLOAD_SIZE: Final = 1024


@pytest.fixture
def blob_root(settings, tmp_path) -> Path:
    """Point the ``blobs`` storage and download links at test locations.

    Returns:
        Content root used by the configured blob storage.
    """
    root = tmp_path / 'blobs'
    settings.STORAGES = {
        **settings.STORAGES,
        'blobs': {
            'BACKEND': 'server.apps.filedrop.infrastructure.storage.BlobStorage',
            'OPTIONS': {'location': str(root)},
        },
    }
    settings.FILEDROP_BASE_URL = BASE_URL
    return root


@pytest.fixture
def blob_storage(blob_root) -> BlobStorage:
    """Blob storage writing under the test content root."""
    return BlobStorage(location=str(blob_root))


@pytest.fixture
def metadata_index(db) -> MetadataIndex:
    """Metadata index on the test database."""
    return MetadataIndex()


@pytest.fixture
def transfer_service(blob_storage, metadata_index) -> TransferService:
    """Transfer service wired to test storage and index."""
    return TransferService(
        blobs=blob_storage,
        index=metadata_index,
        base_url=f'{BASE_URL}/',
        max_upload_size=MAX_UPLOAD_SIZE,
    )


@pytest.fixture
def sample_file_content():
    """Sample file content for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'test file content', name='a.txt')
