"""Database models for filedrop app."""

from typing import Final, final, override

from django.db import models

from server.apps.filedrop import addresses, identifiers

# Packed IPv6 length, IPv4 rows use 4 of them
_UPLOAD_ADDRESS_MAX_LENGTH: Final = 16


@final
class FileRecord(models.Model):
    """Index row for one uploaded file.

    The identifier names the blob on disk and is the capability token in
    download URLs. Rows are written once at upload time and never updated
    or deleted.
    """

    identifier = models.UUIDField(
        primary_key=True,
        editable=False,
    )

    # Display name supplied by the uploader, if any
    name = models.TextField(
        null=True,
        blank=True,
        help_text='Filename suggested in Content-Disposition',
    )

    upload_address = models.BinaryField(
        max_length=_UPLOAD_ADDRESS_MAX_LENGTH,
        help_text='Packed uploader IP: 4 bytes IPv4, 16 bytes IPv6',
    )

    class Meta:
        """Model metadata."""

        db_table = 'file_index'
        verbose_name = 'File record'  # type: ignore[mutable-override]
        verbose_name_plural = 'File records'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return identifiers.render(self.identifier)

    def get_upload_address(self) -> addresses.IPAddress | None:
        """Decode the stored uploader address.

        Returns:
            Address object, or None if the stored bytes are corrupt.
        """
        return addresses.decode(self.upload_address)
