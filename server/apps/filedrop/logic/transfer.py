"""Business logic for uploads and downloads."""

import logging
import unicodedata
import uuid
from dataclasses import dataclass
from typing import Any, final

from django.conf import settings
from django.core.files.base import File
from django.core.files.storage import storages
from django.urls import reverse

from server.apps.filedrop import addresses, identifiers
from server.apps.filedrop.exceptions import (
    FileRecordNotFoundError,
    UploadTooLargeError,
)
from server.apps.filedrop.infrastructure.index import MetadataIndex
from server.apps.filedrop.infrastructure.storage import BlobStorage

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class FileDownload:
    """Open blob plus the filename to offer for it."""

    identifier: uuid.UUID
    file: File
    filename: str


def clean_display_name(name: str | None) -> str | None:
    """Strip control characters from a display name.

    Quotes and non-ASCII characters are left alone, the response layer
    escapes them when building Content-Disposition.

    Args:
        name: Display name from the index or the request path.

    Returns:
        Cleaned name, or None if nothing printable is left.
    """
    if name is None:
        return None
    cleaned = ''.join(
        char for char in name
        if unicodedata.category(char) != 'Cc'
    )
    return cleaned or None


@final
class TransferService:
    """Upload and download protocols over a blob store and an index."""

    def __init__(
        self,
        blobs: BlobStorage,
        index: MetadataIndex,
        base_url: str,
        max_upload_size: int,
    ) -> None:
        """Initialize transfer service.

        Args:
            blobs: Storage holding the file bytes.
            index: Metadata index for the file records.
            base_url: Absolute URL prefix for download links.
            max_upload_size: Largest accepted upload in bytes.
        """
        self._blobs = blobs
        self._index = index
        self._base_url = base_url.rstrip('/')
        self._max_upload_size = max_upload_size

    @property
    def max_upload_size(self) -> int:
        """Largest accepted upload in bytes."""
        return self._max_upload_size

    def upload(
        self,
        content: Any,
        upload_address: addresses.IPAddress | str,
        name: str | None = None,
    ) -> str:
        """Store an upload and return its download URL.

        Ordering: the blob is written first, then the index record is
        inserted. If the blob write fails no record exists. If the insert
        fails the blob stays behind as an orphan that no URL points to.

        Args:
            content: File-like object with the uploaded bytes.
            upload_address: Client IP address.
            name: Optional display name for later downloads.

        Returns:
            Absolute download URL.

        Raises:
            UploadTooLargeError: If the content is larger than the cap.
            BlobIOError: If the blob cannot be written.
            IndexStorageError: If the record cannot be inserted.
        """
        size = getattr(content, 'size', None)
        if size is not None and size > self._max_upload_size:
            raise UploadTooLargeError(self._max_upload_size, size)

        identifier = identifiers.mint()
        logger.info('Accepting upload %s from %s', identifier, upload_address)

        # Step 1: Write blob first
        self._blobs.write_blob(identifier, content)

        # Step 2: Index record, the blob is orphaned if this fails
        try:
            self._index.insert(identifier, name, upload_address)
        except Exception:
            logger.warning('Orphaned blob left in storage: %s', identifier)
            raise

        return self.build_download_url(identifier)

    def download(
        self,
        identifier: uuid.UUID,
        display_name: str | None = None,
    ) -> FileDownload:
        """Open a stored file for download.

        Args:
            identifier: Parsed identifier from the request path.
            display_name: Optional name overriding the stored one for
                this response only.

        Returns:
            FileDownload with an open blob, the caller closes it.

        Raises:
            FileRecordNotFoundError: If no usable record exists.
            IndexStorageError: If the index cannot be queried.
            BlobIOError: If the record exists but its blob cannot be opened.
        """
        record = self._index.lookup(identifier)
        if record is None:
            logger.info('Download of unknown file: %s', identifier)
            raise FileRecordNotFoundError(identifiers.render(identifier))

        filename = (
            clean_display_name(display_name)
            or clean_display_name(record.name)
            or identifiers.render(identifier)
        )

        blob = self._blobs.open_blob(identifier)
        logger.info('Serving file %s as %r', identifier, filename)
        return FileDownload(identifier=identifier, file=blob, filename=filename)

    def build_download_url(self, identifier: uuid.UUID) -> str:
        """Build the absolute download URL for an identifier.

        Args:
            identifier: File identifier.

        Returns:
            Base URL joined with ``/fd/<identifier>``.
        """
        path = reverse(
            'filedrop:download',
            kwargs={'identifier': identifiers.render(identifier)},
        )
        return f'{self._base_url}{path}'


def get_transfer_service() -> TransferService:
    """Build a TransferService from the configured settings.

    Returns:
        TransferService wired to the ``blobs`` storage and default database.
    """
    return TransferService(
        blobs=storages['blobs'],  # type: ignore[arg-type]
        index=MetadataIndex(),
        base_url=settings.FILEDROP_BASE_URL,
        max_upload_size=settings.FILEDROP_MAX_UPLOAD_SIZE,
    )
