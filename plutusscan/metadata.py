"""
PlutusScan Verification Metadata

Canonical encoding of the verification record published to the script
registry, and the helpers that turn it into transaction metadata.

Encoding rules (must match the registry backend byte for byte):
1. The record is constructor alternative `compiler_type` over five fields:
   source URL (UTF-8), commit (hex bytes), source path (UTF-8, "" if
   absent), compiler version (UTF-8), parameter map
2. The parameter map is keyed by 28 byte script hashes, sorted by
   case-insensitive comparison of the hex keys
3. Each map value is a list of parameters; each parameter is carried as a
   byte string wrapping its already-encoded CBOR, never re-encoded
4. The hex output is split into 128 character chunks and attached under
   label 1984 as raw bytes

Any malformed field is fatal: MetadataError is raised before anything is
chunked or attached.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .cbor import encode_constructor, encode_plutus_bytes, encode_plutus_list, encode_plutus_map
from .errors import ErrorKind, MetadataError
from .hashing import HEX_PATTERN, normalize_hex, require_script_hash
from .source import is_valid_commit_hash

logger = logging.getLogger(__name__)

METADATA_LABEL = 1984
DEFAULT_CHUNK_SIZE = 128

# Registry fee estimate, lovelace
BASE_FEE = 170000
FEE_PER_BYTE = 44


class CompilerType(int, Enum):
    """Compiler family, encoded as the record's constructor alternative."""
    AIKEN = 0
    HELIOS = 1
    SCALUS = 2
    OPSHIN = 3
    PLUTARCH = 4
    PLINTH = 5
    PLUTUS = 6
    PLUTS = 7

    @classmethod
    def from_name(cls, name: str) -> "CompilerType":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise MetadataError(ErrorKind.MALFORMED_METADATA, f"unknown compiler type: {name}", "compiler_type")


@dataclass(frozen=True)
class VerificationMetadata:
    """
    One registry record.

    `parameters` maps a script hash to its ordered, already-encoded
    parameter values (CBOR hex). Built once per submission.
    """
    source_url: str
    commit_hash: str
    compiler_version: str
    parameters: Mapping[str, List[str]] = field(default_factory=dict)
    source_path: Optional[str] = None
    compiler_type: CompilerType = CompilerType.AIKEN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_url": self.source_url,
            "commit_hash": self.commit_hash,
            "source_path": self.source_path or "",
            "compiler_version": self.compiler_version,
            "compiler_type": self.compiler_type.name,
            "parameters": {k: list(v) for k, v in self.parameters.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VerificationMetadata':
        compiler_type = data.get("compiler_type", CompilerType.AIKEN)
        if isinstance(compiler_type, str):
            compiler_type = CompilerType.from_name(compiler_type)
        return cls(
            source_url=data.get("source_url", ""),
            commit_hash=data.get("commit_hash", ""),
            compiler_version=data.get("compiler_version", ""),
            parameters=data.get("parameters") or {},
            source_path=data.get("source_path"),
            compiler_type=CompilerType(compiler_type),
        )


# ============================================================
# Canonical container encoder
# ============================================================

def _utf8_field(value: Optional[str], name: str) -> str:
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise MetadataError(ErrorKind.MALFORMED_METADATA, "must be a string", name)
    return encode_plutus_bytes(value.encode("utf-8"))


def _canonical_parameter_map(parameters: Mapping[str, List[str]]) -> str:
    if not isinstance(parameters, Mapping):
        raise MetadataError(ErrorKind.MALFORMED_METADATA, "must be a mapping", "parameters")

    entries: Dict[str, List[str]] = {}
    for key, values in parameters.items():
        script_hash = require_script_hash(key, "parameters", error_cls=MetadataError)
        if script_hash in entries:
            raise MetadataError(
                ErrorKind.MALFORMED_METADATA,
                f"script hash {script_hash} appears more than once",
                "parameters",
            )
        if isinstance(values, str) or not isinstance(values, (list, tuple)):
            raise MetadataError(
                ErrorKind.MALFORMED_METADATA,
                f"parameters for {script_hash} must be a list",
                "parameters",
            )
        entries[script_hash] = [
            normalize_hex(v, f"parameters.{script_hash}", allow_empty=False, error_cls=MetadataError)
            for v in values
        ]

    # keys are already lowercase, so plain ordering is the case-insensitive one
    return encode_plutus_map([
        (encode_plutus_bytes(key), encode_plutus_list([encode_plutus_bytes(v) for v in entries[key]]))
        for key in sorted(entries)
    ])


def encode_verification_metadata(metadata: VerificationMetadata) -> str:
    """
    Encode a verification record as lowercase CBOR hex.

    The output depends only on the record's content: parameter maps with
    the same entries encode identically whatever their insertion order.

    Raises:
        MetadataError: non-hex commit, malformed script hash key, or a
            parameter value that is not hex
    """
    commit = normalize_hex(metadata.commit_hash, "commit_hash", allow_empty=False, error_cls=MetadataError)
    if not is_valid_commit_hash(commit):
        logger.warning("Commit reference has non-standard length: %d hex characters", len(commit))

    fields = [
        _utf8_field(metadata.source_url, "source_url"),
        encode_plutus_bytes(commit),
        _utf8_field(metadata.source_path, "source_path"),
        _utf8_field(metadata.compiler_version, "compiler_version"),
        _canonical_parameter_map(metadata.parameters),
    ]
    encoded = encode_constructor(int(metadata.compiler_type), fields)
    logger.debug("Encoded verification metadata: %d bytes", len(encoded) // 2)
    return encoded


# ============================================================
# Chunking and transaction metadata
# ============================================================

def chunk_metadata(encoded_hex: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[str]:
    """
    Split hex into chunk_size character pieces; the last holds the rest.

    No padding is added and empty input gives an empty list.
    """
    if not isinstance(encoded_hex, str) or not HEX_PATTERN.match(encoded_hex.lower()):
        raise MetadataError(ErrorKind.MALFORMED_HEX, "metadata must be a hex string", "metadata")
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0 or chunk_size % 2:
        raise MetadataError(
            ErrorKind.MALFORMED_METADATA,
            f"chunk size must be a positive even number of hex characters, got {chunk_size!r}",
            "chunk_size",
        )
    return [encoded_hex[i:i + chunk_size] for i in range(0, len(encoded_hex), chunk_size)]


def to_transaction_metadata(chunks: List[str]) -> Dict[int, List[bytes]]:
    """Attach chunks under the registry label, each as raw bytes."""
    try:
        return {METADATA_LABEL: [bytes.fromhex(c) for c in chunks]}
    except ValueError as e:
        raise MetadataError(ErrorKind.MALFORMED_HEX, f"chunk is not whole hex bytes: {e}", "chunks")


def estimate_registry_fee(encoded_hex: str) -> int:
    """Rough fee in lovelace for a transaction carrying this metadata."""
    return BASE_FEE + FEE_PER_BYTE * (len(encoded_hex) // 2)


@dataclass
class RegistrySubmission:
    """Everything a wallet needs to publish one verification record."""
    hex: str
    chunks: List[str]
    transaction_metadata: Dict[int, List[bytes]]
    estimated_fee: int

    @property
    def size_bytes(self) -> int:
        return len(self.hex) // 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hex": self.hex,
            "size_bytes": self.size_bytes,
            "chunks": list(self.chunks),
            "label": METADATA_LABEL,
            "estimated_fee": self.estimated_fee,
        }


def build_submission(metadata: VerificationMetadata, chunk_size: int = DEFAULT_CHUNK_SIZE) -> RegistrySubmission:
    """Encode, chunk and attach a record; fails before producing anything on bad input."""
    encoded = encode_verification_metadata(metadata)
    chunks = chunk_metadata(encoded, chunk_size)
    return RegistrySubmission(
        hex=encoded,
        chunks=chunks,
        transaction_metadata=to_transaction_metadata(chunks),
        estimated_fee=estimate_registry_fee(encoded),
    )


def build_parameter_map(validators, result) -> Dict[str, List[str]]:
    """
    Registry parameter map from a resolution result.

    Keys are unparameterized hashes, which is what the registry looks
    parameters up by. Validators without a complete parameter list from the
    final pass are left out.
    """
    parameters: Dict[str, List[str]] = {}
    for validator in validators:
        encoded = result.encoded_parameters.get(validator.id)
        if not encoded:
            continue
        parameters[validator.unparameterized_hash.lower()] = list(encoded)
    return parameters
