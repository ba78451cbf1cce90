"""Uploader address encoding for the metadata index.

Addresses are stored in their packed network-order form: 4 bytes for IPv4
and 16 bytes for IPv6. IPv4-mapped IPv6 peers keep their 16 byte form.
"""

import ipaddress
import logging
from typing import Final

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

_IPV4_LENGTH: Final = 4
_IPV6_LENGTH: Final = 16

logger = logging.getLogger(__name__)


def encode(address: IPAddress | str) -> bytes:
    """Pack an address for storage.

    Args:
        address: Address object or its textual form.

    Returns:
        Packed address, 4 or 16 bytes long.

    Raises:
        ValueError: If address text is not a valid IP address.
    """
    return ipaddress.ip_address(address).packed


def decode(packed: bytes | memoryview) -> IPAddress | None:
    """Unpack a stored address.

    Args:
        packed: Bytes read from the index, some database backends hand
            binary columns back as memoryview.

    Returns:
        Address object, or None when the length matches neither family.
    """
    packed = bytes(packed)
    if len(packed) == _IPV4_LENGTH:
        return ipaddress.IPv4Address(packed)
    if len(packed) == _IPV6_LENGTH:
        return ipaddress.IPv6Address(packed)

    logger.warning('Undecodable upload address of %d bytes', len(packed))
    return None
