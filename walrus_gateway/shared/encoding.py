"""Identifier encodings shared by the resolution pipeline.

Blob ids and blob hashes are Move ``u256`` values. The registry hands them out
as decimal strings, the aggregator expects the BCS bytes (32 bytes,
little-endian) in URL-safe Base64. Object ids can also travel as base-36 DNS
labels.
"""

import base64
import hashlib
import re
from typing import Any, Optional

from loguru import logger

SUI_ADDRESS_LENGTH = 32
U256_BYTE_LENGTH = 32

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

_DECIMAL_RE = re.compile(r"^\d+$")
_BASE36_RE = re.compile(r"^[0-9a-z]+$")
_OBJECT_ID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def base64_url_safe_encode(data: bytes) -> str:
    """Base64 encode ``data`` and make it URL safe.

    ``/`` becomes ``_``, ``+`` becomes ``-`` and the ``=`` padding is dropped.
    """
    encoded = base64.b64encode(data).decode("ascii")
    return encoded.replace("/", "_").replace("+", "-").replace("=", "")


def u256_to_bytes(value: Any) -> bytes:
    """Serialize an unsigned 256-bit integer the way BCS does (little-endian).

    Raises:
        ValueError: value is negative, not an integer or does not fit in 256 bits
        OverflowError: value does not fit in 256 bits
    """
    number = int(value)
    if number < 0:
        raise ValueError(f"u256 cannot be negative: {value}")
    return number.to_bytes(U256_BYTE_LENGTH, "little")


def normalize_blob_id(raw: Any) -> str:
    """Return the aggregator form of a blob id.

    Decimal strings are treated as ``u256`` and re-encoded, anything else is
    assumed to be canonical already. When serialization fails the raw value is
    returned as-is; callers must treat it as best effort.
    """
    if isinstance(raw, str) and _DECIMAL_RE.match(raw):
        try:
            return base64_url_safe_encode(u256_to_bytes(raw))
        except (ValueError, OverflowError) as e:
            logger.warning(f"Error converting blob_id {raw}: {e}")
            return str(raw)
    return str(raw)


def sha256_digest(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def is_valid_object_id(value: Optional[str]) -> bool:
    """Check for a full-length ``0x``-prefixed Sui object id."""
    return bool(value) and bool(_OBJECT_ID_RE.match(value))


def normalize_object_id(value: str) -> str:
    """Lower-case an object id and left-pad it to the full address length."""
    hex_part = value.lower()
    if hex_part.startswith("0x"):
        hex_part = hex_part[2:]
    return "0x" + hex_part.rjust(SUI_ADDRESS_LENGTH * 2, "0")


def base36_decode(value: str) -> bytes:
    """Decode a base-36 string into bytes.

    Leading ``0`` characters stand for leading zero bytes, like base-x does.

    Raises:
        ValueError: value is empty or holds characters outside ``0-9a-z``
    """
    if not value or not _BASE36_RE.match(value):
        raise ValueError(f"Not a base36 string: {value!r}")
    leading_zeros = len(value) - len(value.lstrip("0"))
    rest = value[leading_zeros:]
    if not rest:
        return b"\x00" * leading_zeros
    number = int(rest, 36)
    return b"\x00" * leading_zeros + number.to_bytes((number.bit_length() + 7) // 8, "big")


def base36_encode(data: bytes) -> str:
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "0" * leading_zeros + "".join(reversed(digits))


def subdomain_to_object_id(subdomain: str) -> Optional[str]:
    """Convert a base-36 subdomain into a hex object id.

    Returns None unless the label decodes to exactly one Sui address.
    """
    try:
        decoded = base36_decode(subdomain.lower())
    except ValueError:
        return None
    if len(decoded) != SUI_ADDRESS_LENGTH:
        return None
    return "0x" + decoded.hex()


def object_id_to_subdomain(object_id: str) -> str:
    """Encode a hex object id as a base-36 subdomain label."""
    return base36_encode(bytes.fromhex(normalize_object_id(object_id)[2:]))


__all__ = [
    "SUI_ADDRESS_LENGTH",
    "base64_url_safe_encode",
    "u256_to_bytes",
    "normalize_blob_id",
    "sha256_digest",
    "is_valid_object_id",
    "normalize_object_id",
    "base36_decode",
    "base36_encode",
    "subdomain_to_object_id",
    "object_id_to_subdomain",
]
