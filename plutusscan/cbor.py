"""
PlutusScan Canonical CBOR Encoding

Deterministic CBOR (RFC 8949) for the subset of major types carried in
verification metadata and script parameters.

Rules:
- Arguments 0-23 are folded into the initial byte
- Larger arguments use the shortest 1/2/4/8 byte big-endian form
- Negative integers encode -1 - n under major type 1
- Output is lowercase hex with no separators

The primitive encoders never emit indefinite-length items. The Plutus data
framing helpers at the bottom of this module do, because the on-chain
registry parser expects exactly the framing produced by Cardano tooling:
non-empty lists are indefinite arrays and byte strings longer than 64 bytes
are split into 64 byte chunks.
"""

from typing import Sequence, Tuple, Union

from .errors import EncodingError, ErrorKind
from .hashing import normalize_hex

# Major types
MAJOR_UNSIGNED = 0
MAJOR_NEGATIVE = 1
MAJOR_BYTES = 2
MAJOR_TEXT = 3
MAJOR_ARRAY = 4
MAJOR_MAP = 5
MAJOR_TAG = 6
MAJOR_SIMPLE = 7

MAX_HEAD_ARGUMENT = 0xFFFFFFFFFFFFFFFF

# (additional info, argument width in bytes)
_HEAD_WIDTHS = ((24, 1), (25, 2), (26, 4), (27, 8))

INDEFINITE_ARRAY = "9f"
INDEFINITE_BYTES = "5f"
BREAK = "ff"
EMPTY_ARRAY = "80"

PLUTUS_BYTES_CHUNK = 64


def encode_head(major: int, argument: int) -> str:
    """Encode a major type and argument using the shortest form."""
    if argument < 0 or argument > MAX_HEAD_ARGUMENT:
        raise EncodingError(
            ErrorKind.MALFORMED_INTEGER,
            f"argument {argument} outside the 64-bit CBOR range",
        )

    if argument <= 23:
        return f"{(major << 5) | argument:02x}"

    for info, width in _HEAD_WIDTHS:
        if argument < 1 << (8 * width):
            return f"{(major << 5) | info:02x}{argument:0{width * 2}x}"

    # unreachable: MAX_HEAD_ARGUMENT fits the 8 byte form
    raise EncodingError(ErrorKind.MALFORMED_INTEGER, f"cannot encode argument {argument}")


def _require_int(n) -> int:
    # bool is an int subclass but never a valid literal here
    if isinstance(n, bool) or not isinstance(n, int):
        raise EncodingError(ErrorKind.MALFORMED_INTEGER, f"not an integer: {n!r}")
    return n


def encode_unsigned_int(n: int) -> str:
    """Encode a non-negative integer (major type 0)."""
    n = _require_int(n)
    if n < 0:
        raise EncodingError(ErrorKind.MALFORMED_INTEGER, f"negative value {n} for unsigned encoding")
    return encode_head(MAJOR_UNSIGNED, n)


def encode_signed_int(n: int) -> str:
    """Encode any integer, choosing major type 0 or 1 by sign."""
    n = _require_int(n)
    if n >= 0:
        return encode_head(MAJOR_UNSIGNED, n)
    return encode_head(MAJOR_NEGATIVE, -1 - n)


def encode_byte_string(data: Union[bytes, str]) -> str:
    """
    Encode a definite-length byte string (major type 2).

    Accepts raw bytes or a hex string (optional 0x prefix and whitespace
    are tolerated).
    """
    if isinstance(data, (bytes, bytearray)):
        payload = bytes(data).hex()
    else:
        payload = normalize_hex(data, "bytes")
    return encode_head(MAJOR_BYTES, len(payload) // 2) + payload


# ============================================================
# Plutus data framing
# ============================================================

def encode_plutus_bytes(data: Union[bytes, str]) -> str:
    """Byte string as Plutus data: chunked past 64 bytes."""
    if isinstance(data, (bytes, bytearray)):
        payload = bytes(data).hex()
    else:
        payload = normalize_hex(data, "bytes")

    chunk_hex = PLUTUS_BYTES_CHUNK * 2
    if len(payload) <= chunk_hex:
        return encode_byte_string(payload)

    chunks = [
        encode_byte_string(payload[i:i + chunk_hex])
        for i in range(0, len(payload), chunk_hex)
    ]
    return INDEFINITE_BYTES + "".join(chunks) + BREAK


def encode_plutus_list(items: Sequence[str]) -> str:
    """Wrap already-encoded items in a Plutus data list."""
    if not items:
        return EMPTY_ARRAY
    return INDEFINITE_ARRAY + "".join(items) + BREAK


def encode_plutus_map(entries: Sequence[Tuple[str, str]]) -> str:
    """
    Wrap already-encoded (key, value) pairs in a definite-length map.

    Entries are written in the order given; callers own canonical ordering.
    """
    return encode_head(MAJOR_MAP, len(entries)) + "".join(k + v for k, v in entries)


def constructor_tag(alternative: int) -> int:
    """CBOR tag for a Plutus constructor alternative (compact forms only)."""
    if 0 <= alternative <= 6:
        return 121 + alternative
    if 7 <= alternative <= 127:
        return 1280 + (alternative - 7)
    return 102


def encode_constructor(alternative: int, fields: Sequence[str]) -> str:
    """Encode a Plutus constructor over already-encoded fields."""
    alternative = _require_int(alternative)
    if alternative < 0:
        raise EncodingError(ErrorKind.MALFORMED_INTEGER, f"negative constructor alternative {alternative}")

    tag = constructor_tag(alternative)
    if tag != 102:
        return encode_head(MAJOR_TAG, tag) + encode_plutus_list(fields)

    # general form: 102([alternative, fields])
    return (
        encode_head(MAJOR_TAG, 102)
        + encode_head(MAJOR_ARRAY, 2)
        + encode_unsigned_int(alternative)
        + encode_plutus_list(fields)
    )


# ============================================================
# Shape checks
# ============================================================

def initial_byte(encoded_hex: str) -> Tuple[int, int]:
    """Return (major type, additional info) of the first encoded byte."""
    first = int(encoded_hex[:2], 16)
    return first >> 5, first & 0x1F


def looks_like_cbor(encoded_hex: str) -> bool:
    """
    Shallow check that a hex string starts like a CBOR data item.

    Only the initial byte is inspected: the major type must be one a
    parameter can carry (0-6) and the additional info must not be reserved.
    Indefinite lengths are accepted for strings, arrays and maps.
    """
    if len(encoded_hex) < 2:
        return False
    try:
        major, info = initial_byte(encoded_hex)
    except ValueError:
        return False

    if major > MAJOR_TAG:
        return False
    if info <= 27:
        return True
    return info == 31 and major in (MAJOR_BYTES, MAJOR_TEXT, MAJOR_ARRAY, MAJOR_MAP)
