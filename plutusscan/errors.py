"""
PlutusScan error kinds.

Encoding errors are local: they are returned to the per-validator
resolution step and never abort a whole resolution. Metadata errors are
fatal for an encode-and-submit operation and must surface before any
transaction is built.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Error and warning kinds shared by the codec, resolver and metadata encoder."""
    MALFORMED_INTEGER = "MALFORMED_INTEGER"
    MALFORMED_HEX = "MALFORMED_HEX"
    INVALID_HASH_LENGTH = "INVALID_HASH_LENGTH"
    UNRECOGNIZED_BINARY_SHAPE = "UNRECOGNIZED_BINARY_SHAPE"
    UNRESOLVED_REFERENCE = "UNRESOLVED_REFERENCE"
    RESOLUTION_BUDGET_EXHAUSTED = "RESOLUTION_BUDGET_EXHAUSTED"
    MISSING_VALUE = "MISSING_VALUE"
    PARAMETERIZATION_FAILED = "PARAMETERIZATION_FAILED"
    MALFORMED_METADATA = "MALFORMED_METADATA"
    MALFORMED_BLUEPRINT = "MALFORMED_BLUEPRINT"


class PlutusScanError(ValueError):
    """Base error carrying an ErrorKind."""

    def __init__(self, kind: ErrorKind, message: str, field: Optional[str] = None):
        self.kind = kind
        self.message = message
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)

    def to_dict(self) -> Dict[str, Any]:
        d = {"kind": self.kind.value, "message": self.message}
        if self.field:
            d["field"] = self.field
        return d


class EncodingError(PlutusScanError):
    """Primitive codec or parameter value encoder rejected its input."""
    pass


class MetadataError(PlutusScanError):
    """Verification metadata cannot be encoded or chunked."""
    pass


class BlueprintError(PlutusScanError):
    """Build manifest is not a readable blueprint."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(ErrorKind.MALFORMED_BLUEPRINT, message, field)
