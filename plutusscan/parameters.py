"""
PlutusScan Parameter Value Encoding

Turns raw user input for a validator parameter slot into canonical CBOR
hex, under the policy chosen by schema classification.
"""

import logging
import re
from typing import Optional

from .cbor import encode_byte_string, encode_signed_int, looks_like_cbor
from .errors import EncodingError, ErrorKind
from .hashing import SCRIPT_HASH_HEX_LENGTH, normalize_hex, require_script_hash
from .schema import ParameterClass, ParameterSchema

logger = logging.getLogger(__name__)

DECIMAL_PATTERN = re.compile(r'^[+-]?[0-9]+$')


def parse_integer(raw_value: str) -> int:
    """Parse a base-10 integer literal; no floats, no hex."""
    text = raw_value.strip().replace("_", "")
    if not DECIMAL_PATTERN.match(text):
        raise EncodingError(ErrorKind.MALFORMED_INTEGER, f"not a base-10 integer: {raw_value!r}")
    return int(text)


def encode_parameter_value(
    raw_value: str,
    classification: ParameterClass,
    passthrough: bool = False,
    hash_like: bool = False,
) -> str:
    """
    Encode one parameter value to canonical CBOR hex.

    Args:
        raw_value: The user's input string
        classification: Policy from schema classification
        passthrough: Caller asserts raw_value is already canonical CBOR hex
        hash_like: Slot is a byte array expected to hold a 28 byte hash;
            other lengths are logged, not rejected

    Returns:
        Lowercase CBOR hex

    Raises:
        EncodingError: MISSING_VALUE, MALFORMED_INTEGER, MALFORMED_HEX or
            UNRECOGNIZED_BINARY_SHAPE
    """
    if raw_value is None or not str(raw_value).strip():
        raise EncodingError(ErrorKind.MISSING_VALUE, "parameter value is required")

    if passthrough:
        return normalize_hex(raw_value, "value", allow_empty=False)

    if classification == ParameterClass.INTEGER:
        return encode_signed_int(parse_integer(raw_value))

    if classification == ParameterClass.BYTE_ARRAY:
        payload = normalize_hex(raw_value, "value")
        if hash_like and len(payload) != SCRIPT_HASH_HEX_LENGTH:
            logger.warning(
                "%s: byte array of %d hex characters where a %d character hash was expected",
                ErrorKind.INVALID_HASH_LENGTH.value, len(payload), SCRIPT_HASH_HEX_LENGTH,
            )
        return encode_byte_string(payload)

    try:
        encoded = normalize_hex(raw_value, "value", allow_empty=False)
    except EncodingError as e:
        raise EncodingError(
            ErrorKind.MALFORMED_HEX,
            f"complex types require CBOR hex; enable passthrough mode and provide valid CBOR hex ({e.message})",
        )
    if not looks_like_cbor(encoded):
        raise EncodingError(
            ErrorKind.UNRECOGNIZED_BINARY_SHAPE,
            "value does not look like canonical CBOR; enable passthrough mode if this is intentional",
        )
    return encoded


def encode_for_schema(raw_value: str, schema: Optional[ParameterSchema], passthrough: bool = False) -> str:
    """Encode a value for a declared slot; a missing schema is treated as opaque."""
    if schema is None:
        return encode_parameter_value(raw_value, ParameterClass.OPAQUE_BINARY, passthrough)
    return encode_parameter_value(raw_value, schema.classification, passthrough, schema.hash_like)


def encode_script_hash_reference(script_hash: str) -> str:
    """Encode another validator's hash as a parameter (a 28 byte CBOR byte string)."""
    return encode_byte_string(require_script_hash(script_hash, "reference"))
