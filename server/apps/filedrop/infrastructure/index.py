"""Metadata index backed by the ``file_index`` table."""

import logging
import uuid
from typing import final

from django.db import DatabaseError, transaction

from server.apps.filedrop import addresses, identifiers
from server.apps.filedrop.exceptions import IndexStorageError
from server.apps.filedrop.models import FileRecord

logger = logging.getLogger(__name__)


@final
class MetadataIndex:
    """Single source of truth for which identifiers exist.

    Records are inserted once and never changed, so there is no update or
    delete path and no locking beyond the database's own transactions.
    """

    def __init__(self, using: str = 'default') -> None:
        """Initialize index on a database alias.

        Args:
            using: Django database alias holding the ``file_index`` table.
        """
        self._using = using

    def insert(
        self,
        identifier: uuid.UUID,
        name: str | None,
        upload_address: addresses.IPAddress | str,
    ) -> FileRecord:
        """Insert the record for a freshly written blob.

        Args:
            identifier: Identifier of the new file.
            name: Optional display name.
            upload_address: Uploader IP address.

        Returns:
            Created FileRecord instance.

        Raises:
            IndexStorageError: If the database rejects the insert.
        """
        try:
            with transaction.atomic(using=self._using):
                record = FileRecord.objects.using(self._using).create(
                    identifier=identifier,
                    name=name,
                    upload_address=addresses.encode(upload_address),
                )
        except DatabaseError as exc:
            logger.exception(
                'Failed to insert index record: %s',
                identifiers.render(identifier),
            )
            raise IndexStorageError('Cannot write file index') from exc

        logger.info('Index record created: %s', record)
        return record

    def lookup(self, identifier: uuid.UUID) -> FileRecord | None:
        """Point lookup by identifier.

        A record whose stored address cannot be decoded is reported as
        absent rather than as a fault.

        Args:
            identifier: Parsed identifier.

        Returns:
            FileRecord, or None if no usable record exists.

        Raises:
            IndexStorageError: If the database cannot be queried.
        """
        try:
            record = (
                FileRecord.objects
                .using(self._using)
                .filter(identifier=identifier)
                .first()
            )
        except DatabaseError as exc:
            logger.exception(
                'Failed to query index record: %s',
                identifiers.render(identifier),
            )
            raise IndexStorageError('Cannot read file index') from exc

        if record is None:
            return None

        if record.get_upload_address() is None:
            logger.warning('Index record with corrupt address: %s', record)
            return None
        return record
