"""File identifier minting, parsing and rendering.

A file identifier is a random version-4 UUID. Its only textual form is the
canonical 36 character, lower-case, 8-4-4-4-12 hyphenated one, which is
also the blob name on disk and the path segment in download URLs.
"""

import re
import string
import uuid
from typing import Final

from server.apps.filedrop.exceptions import InvalidIdentifierError

_ALLOWED_CHARS: Final = frozenset(string.ascii_letters + string.digits + '-')

_CANONICAL_PATTERN: Final = re.compile(
    r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}',
    re.IGNORECASE,
)


def mint() -> uuid.UUID:
    """Generate a fresh random file identifier.

    Returns:
        New version-4 UUID drawn from the OS random source.
    """
    return uuid.uuid4()


def parse(text: str) -> uuid.UUID:
    """Parse untrusted identifier text.

    Any character outside ASCII letters, digits and hyphens is rejected
    before structural parsing, so percent escapes, slashes and control
    characters never reach the index or the filesystem.

    Args:
        text: Identifier text, typically a URL path segment.

    Returns:
        Parsed identifier.

    Raises:
        InvalidIdentifierError: If text is not a canonical identifier.
    """
    if not text or not _ALLOWED_CHARS.issuperset(text):
        raise InvalidIdentifierError(text)

    if _CANONICAL_PATTERN.fullmatch(text) is None:
        raise InvalidIdentifierError(text)

    return uuid.UUID(text)


def render(identifier: uuid.UUID) -> str:
    """Render identifier in canonical lower-case hyphenated form."""
    return str(identifier)
