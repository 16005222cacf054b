"""
PlutusScan

Version: 0.4.0

Canonical encoding and parameter resolution for Cardano smart contract
verification records.

PlutusScan verifies that compiled validators match a published source
commit and encodes the result as registry metadata that must match the
registry backend byte for byte:
    encode(url, commit, path, compiler version, {script hash: [params]}) -> CBOR hex

Pipeline:
- Blueprint: validators, parameter schemas and compiled code from plutus.json
- Resolution: bounded multi-pass computation of parameterized hashes,
  with validators referencing each other's hashes
- Encoding: canonical CBOR container with sorted script hash keys
- Chunking: 64 byte pieces attached under transaction metadata label 1984

Usage:
    from plutusscan import (
        ParameterInput,
        VerificationMetadata,
        build_parameter_map,
        build_submission,
        load_blueprint,
        resolve,
    )

    validators = load_blueprint("plutus.json")

    # apply_params is the external primitive:
    #   (compiled_code, [cbor hex], PlutusVersion) -> script hash
    result = resolve(validators, {
        "payment.recurring": [ParameterInput(reference_to="payment.settings")],
    }, apply_params)

    if result.converged:
        metadata = VerificationMetadata(
            source_url="https://github.com/org/repo",
            commit_hash="35f1a0d51c8663782ab052f869d5c82b756e8615",
            compiler_version="v1.1.3",
            parameters=build_parameter_map(validators, result),
        )
        submission = build_submission(metadata)
        # submission.transaction_metadata -> {1984: [bytes, ...]}
"""

__version__ = "0.4.0"

# Errors
from .errors import (
    ErrorKind,
    PlutusScanError,
    EncodingError,
    MetadataError,
    BlueprintError,
)

# Hex helpers
from .hashing import (
    SCRIPT_HASH_HEX_LENGTH,
    normalize_hex,
    is_script_hash,
    require_script_hash,
)

# Primitive codec
from .cbor import (
    encode_unsigned_int,
    encode_signed_int,
    encode_byte_string,
)

# Schemas and parameter encoding
from .schema import (
    ParameterClass,
    ParameterSchema,
    Primitive,
    Reference,
    ListOf,
    MapOf,
    SumOf,
    classify,
    parse_type,
)
from .parameters import (
    encode_parameter_value,
    encode_for_schema,
)

# Blueprint
from .blueprint import (
    PlutusVersion,
    ValidatorId,
    Validator,
    get_blueprint_reader,
    read_blueprint,
    load_blueprint,
)

# Resolution
from .resolver import (
    MAX_RESOLUTION_PASSES,
    ParameterInput,
    ResolutionState,
    ResolutionResult,
    ResolutionWarning,
    resolve,
    load_parameterizer,
)

# Metadata
from .metadata import (
    METADATA_LABEL,
    DEFAULT_CHUNK_SIZE,
    CompilerType,
    VerificationMetadata,
    RegistrySubmission,
    encode_verification_metadata,
    chunk_metadata,
    to_transaction_metadata,
    estimate_registry_fee,
    build_parameter_map,
    build_submission,
)

# Verification
from .verifier import (
    VerificationOutcome,
    HashComparison,
    parse_expected_hashes,
    compare_hashes,
    verify_resolution,
)
from .source import (
    VcsType,
    ParsedSourceUrl,
    parse_source_url,
    is_valid_commit_hash,
)


__all__ = [
    "__version__",

    # Errors
    "ErrorKind",
    "PlutusScanError",
    "EncodingError",
    "MetadataError",
    "BlueprintError",

    # Hex
    "SCRIPT_HASH_HEX_LENGTH",
    "normalize_hex",
    "is_script_hash",
    "require_script_hash",

    # Codec
    "encode_unsigned_int",
    "encode_signed_int",
    "encode_byte_string",

    # Schemas
    "ParameterClass",
    "ParameterSchema",
    "Primitive",
    "Reference",
    "ListOf",
    "MapOf",
    "SumOf",
    "classify",
    "parse_type",
    "encode_parameter_value",
    "encode_for_schema",

    # Blueprint
    "PlutusVersion",
    "ValidatorId",
    "Validator",
    "get_blueprint_reader",
    "read_blueprint",
    "load_blueprint",

    # Resolution
    "MAX_RESOLUTION_PASSES",
    "ParameterInput",
    "ResolutionState",
    "ResolutionResult",
    "ResolutionWarning",
    "resolve",
    "load_parameterizer",

    # Metadata
    "METADATA_LABEL",
    "DEFAULT_CHUNK_SIZE",
    "CompilerType",
    "VerificationMetadata",
    "RegistrySubmission",
    "encode_verification_metadata",
    "chunk_metadata",
    "to_transaction_metadata",
    "estimate_registry_fee",
    "build_parameter_map",
    "build_submission",

    # Verification
    "VerificationOutcome",
    "HashComparison",
    "parse_expected_hashes",
    "compare_hashes",
    "verify_resolution",
    "VcsType",
    "ParsedSourceUrl",
    "parse_source_url",
    "is_valid_commit_hash",
]
