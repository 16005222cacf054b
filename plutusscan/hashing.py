"""
PlutusScan hex and script hash helpers.

All hashes handled by PlutusScan are script hashes: 28 bytes rendered as
56 lowercase hexadecimal characters, no prefix.
"""

import re
from typing import Iterable, List, Type

from .errors import EncodingError, ErrorKind, PlutusScanError

SCRIPT_HASH_BYTES = 28
SCRIPT_HASH_HEX_LENGTH = SCRIPT_HASH_BYTES * 2

HEX_PATTERN = re.compile(r'^[0-9a-f]*$')


def strip_hex(value: str) -> str:
    """Remove an optional 0x prefix and all whitespace, lowercase the rest."""
    cleaned = "".join(value.split())
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    return cleaned.lower()


def normalize_hex(
    value: str,
    field: str = "value",
    allow_empty: bool = True,
    error_cls: Type[PlutusScanError] = EncodingError,
) -> str:
    """
    Normalize a user supplied hex string.

    Strips an optional 0x prefix and whitespace, lowercases, and validates
    that what remains is an even number of hex digits.

    Raises:
        error_cls with kind MALFORMED_HEX on odd length or non-hex characters
    """
    if not isinstance(value, str):
        raise error_cls(ErrorKind.MALFORMED_HEX, "must be a hex string", field)

    cleaned = strip_hex(value)

    if not HEX_PATTERN.match(cleaned):
        raise error_cls(ErrorKind.MALFORMED_HEX, f"not a hex string: {value!r}", field)
    if len(cleaned) % 2:
        raise error_cls(ErrorKind.MALFORMED_HEX, f"odd number of hex digits ({len(cleaned)})", field)
    if not cleaned and not allow_empty:
        raise error_cls(ErrorKind.MALFORMED_HEX, "must not be empty", field)

    return cleaned


def is_script_hash(value: str) -> bool:
    """True when value is exactly 56 hex characters."""
    return (
        isinstance(value, str)
        and len(value) == SCRIPT_HASH_HEX_LENGTH
        and HEX_PATTERN.match(value.lower()) is not None
    )


def require_script_hash(
    value: str,
    field: str = "script_hash",
    error_cls: Type[PlutusScanError] = EncodingError,
) -> str:
    """
    Validate and lowercase a script hash.

    Never truncates or pads: anything that is not 56 hex characters is
    rejected with INVALID_HASH_LENGTH.
    """
    cleaned = normalize_hex(value, field, allow_empty=False, error_cls=error_cls)
    if len(cleaned) != SCRIPT_HASH_HEX_LENGTH:
        raise error_cls(
            ErrorKind.INVALID_HASH_LENGTH,
            f"expected {SCRIPT_HASH_HEX_LENGTH} hex characters, got {len(cleaned)}",
            field,
        )
    return cleaned


def dedupe_hashes(values: Iterable[str]) -> List[str]:
    """Lowercase and deduplicate, keeping first-seen order."""
    seen = set()
    out = []
    for v in values:
        if not v:
            continue
        key = v.strip().lower()
        if key and key not in seen:
            seen.add(key)
            out.append(key)
    return out
