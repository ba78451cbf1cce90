"""Filesystem storage backend for uploaded blobs."""

import logging
import uuid
from typing import Any, final, override

from django.core.files.base import File
from django.core.files.storage import FileSystemStorage

from server.apps.filedrop import identifiers
from server.apps.filedrop.exceptions import BlobIOError

logger = logging.getLogger(__name__)


@final
class BlobStorage(FileSystemStorage):
    """Storage backend holding one file per identifier under the content root.

    Extends Django's FileSystemStorage with:
    - Identifier-keyed write and open helpers
    - Translation of filesystem failures into BlobIOError
    - Enhanced error logging
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file to the content root with error handling and logging.

        Args:
            name: Storage path for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage path used (may differ from name if conflicts).

        Raises:
            OSError: If writing to disk fails.
        """
        try:
            logger.info('Writing blob to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully wrote blob: %s', saved_name)
        except Exception:
            logger.exception('Failed to write blob to storage: %s', name)
            raise
        else:
            return saved_name

    def write_blob(self, identifier: uuid.UUID, content: Any) -> str:
        """Stream content into the blob named by identifier.

        No size limit is enforced here, callers cap uploads before
        handing the content over.

        Args:
            identifier: Identifier of the new file.
            content: File-like object positioned anywhere, it is rewound.

        Returns:
            Storage name of the written blob.

        Raises:
            BlobIOError: If the blob cannot be written under its own name.
        """
        name = identifiers.render(identifier)
        try:
            saved_name = self.save(name, content)
        except OSError as exc:
            raise BlobIOError(f'Cannot write blob {name}') from exc

        if saved_name != name:
            # Only possible if the content root already held this name
            logger.error('Blob %s was stored as %s', name, saved_name)
            raise BlobIOError(f'Blob name collision for {name}')
        return saved_name

    def open_blob(self, identifier: uuid.UUID) -> File:
        """Open the blob named by identifier for sequential reading.

        Args:
            identifier: Identifier of an indexed file.

        Returns:
            Open binary file, the caller closes it.

        Raises:
            BlobIOError: If the blob is missing or unreadable.
        """
        name = identifiers.render(identifier)
        try:
            return self.open(name, 'rb')
        except OSError as exc:
            # An indexed identifier without bytes means storage corruption
            logger.exception('Failed to open blob: %s', name)
            raise BlobIOError(f'Cannot open blob {name}') from exc
