"""Exceptions for filedrop app.

Every fallible operation of the drop raises one of these. The HTTP layer
maps each class to a status code, see ``server.apps.filedrop.views``.
"""


class FileDropError(Exception):
    """Base class for all file drop failures."""

    #: Plain-text body sent back to the client.
    message = 'SIGSEGV: Segmentation fault\n'


class InvalidIdentifierError(FileDropError):
    """Raised when a path segment is not a well-formed file identifier."""

    message = 'EINVAL: invalid argument\n'

    def __init__(self, text: str) -> None:
        """Initialize InvalidIdentifierError.

        Args:
            text: The rejected identifier text.
        """
        self.text = text
        super().__init__(f'Invalid file identifier: {text!r}')


class FileRecordNotFoundError(FileDropError):
    """Raised when no usable index record exists for an identifier."""

    message = 'ENOENT: No such file or directory\n'


class InvalidFormError(FileDropError):
    """Raised when an upload body has the wrong shape for its route."""

    message = 'EINVAL: Invalid argument\n'


class UploadTooLargeError(FileDropError):
    """Raised when an upload exceeds the configured size cap."""

    message = 'ENOSPC: No space left on device\n'

    def __init__(self, max_bytes: int, received_bytes: int) -> None:
        """Initialize UploadTooLargeError.

        Args:
            max_bytes: Configured upload size cap in bytes.
            received_bytes: Bytes seen (or announced) when the cap tripped.
        """
        self.max_bytes = max_bytes
        self.received_bytes = received_bytes
        super().__init__(
            f'Upload too large: {received_bytes} bytes '
            f'(limit: {max_bytes} bytes)',
        )


class IndexStorageError(FileDropError):
    """Raised when the metadata index cannot be read or written."""

    message = 'EROFS: Read-only file system\n'


class BlobIOError(FileDropError):
    """Raised when blob bytes cannot be written or opened."""

    message = 'EIO: I/O error\n'
