#!/usr/bin/env python3
"""
PlutusScan Command Line Interface

Usage:
    plutusscan encode-param --value <value> [--type integer|bytes|opaque] [--passthrough]
    plutusscan encode-metadata --file <metadata.json> [--output <file>]
    plutusscan chunk --hex <hex> [--size 128]
    plutusscan inspect-blueprint --blueprint <plutus.json>
    plutusscan resolve --blueprint <plutus.json> --inputs <inputs.json> --parameterizer <pkg.mod:func>
    plutusscan compare --actual <hashes> --expected <hashes>
    plutusscan demo
"""

import argparse
import json
import logging
import os
import sys

from plutusscan.errors import PlutusScanError

TYPE_CHOICES = {
    "integer": "INTEGER",
    "bytes": "BYTE_ARRAY",
    "opaque": "OPAQUE_BINARY",
}

DEMO_METADATA = {
    "source_url": "http://github.com/easy1staking-com/cardano-recurring-payment",
    "commit_hash": "35f1a0d51c8663782ab052f869d5c82b756e8615",
    "source_path": "",
    "compiler_version": "v1.1.3",
    "parameters": {
        "e513498211e006e0fa7679e7c51ef09fd0b53904b7bfa5d9fb3dd01b": [
            "d8799f58208c198e942f1f7a60e704aa1651333b45bccd51653259204e4dac38b559844dd800ff"
        ],
        "39b875da204d886d1ea0c4ae193281b819236efa36ab0b711bb3977e": [
            "66d403abc1d6f1206b74c64204766e46601b88747575f6a0a02142a0"
        ],
    },
}


def load_json(path: str):
    """Load JSON from file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json(data, path: str):
    """Save JSON to file."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def _text_or_file(value: str) -> str:
    """Treat value as a file path when one exists, else as literal text."""
    if value and os.path.isfile(value):
        with open(value, "r", encoding="utf-8") as f:
            return f.read()
    return value or ""


def cmd_encode_param(args):
    """Encode a single parameter value."""
    from plutusscan.parameters import encode_parameter_value, encode_for_schema
    from plutusscan.schema import ParameterClass, ParameterSchema

    if args.schema:
        schema = ParameterSchema.from_dict({"schema": json.loads(_text_or_file(args.schema))})
        encoded = encode_for_schema(args.value, schema, args.passthrough)
        print(f"type: {schema.type_name} ({schema.classification.value})", file=sys.stderr)
    else:
        classification = ParameterClass(TYPE_CHOICES[args.type])
        encoded = encode_parameter_value(args.value, classification, args.passthrough)

    print(encoded)
    return 0


def cmd_encode_metadata(args):
    """Encode verification metadata and chunk it for the registry."""
    from plutusscan.metadata import VerificationMetadata, build_submission

    metadata = VerificationMetadata.from_dict(load_json(args.file))
    submission = build_submission(metadata, args.size)

    if args.output:
        save_json(submission.to_dict(), args.output)
        print(f"Submission saved to: {args.output}")
    else:
        print(json.dumps(submission.to_dict(), indent=2))

    print(f"\n✓ {submission.size_bytes} bytes in {len(submission.chunks)} chunks", file=sys.stderr)
    print(f"  Estimated fee: {submission.estimated_fee} lovelace", file=sys.stderr)
    return 0


def cmd_chunk(args):
    """Split hex into registry sized chunks."""
    from plutusscan.metadata import chunk_metadata

    for chunk in chunk_metadata(_text_or_file(args.hex).strip(), args.size):
        print(chunk)
    return 0


def cmd_inspect_blueprint(args):
    """List validators and parameter slots of a blueprint."""
    from plutusscan.blueprint import load_blueprint
    from plutusscan.schema import suggests_reference

    validators = load_blueprint(args.blueprint, args.compiler_version)

    if args.json:
        print(json.dumps([v.to_dict() for v in validators], indent=2))
        return 0

    for v in validators:
        print(f"{v.id}  [{', '.join(v.purposes)}]  {v.plutus_version.value}")
        print(f"  hash: {v.unparameterized_hash}")
        for i, p in enumerate(v.parameters):
            hint = "  (reference?)" if suggests_reference(p.title) else ""
            print(f"  param {i}: {p.title or '(untitled)'}: {p.type_name} -> {p.classification.value}{hint}")
    print(f"\n{len(validators)} validators", file=sys.stderr)
    return 0


def cmd_resolve(args):
    """Resolve parameterized hashes and the registry parameter map."""
    from plutusscan.blueprint import load_blueprint
    from plutusscan.metadata import build_parameter_map
    from plutusscan.resolver import load_parameterizer, resolve

    validators = load_blueprint(args.blueprint, args.compiler_version)
    inputs = load_json(args.inputs)
    parameterizer = load_parameterizer(args.parameterizer)

    result = resolve(validators, inputs, parameterizer, args.max_passes)

    output = result.to_dict()
    output["parameter_map"] = build_parameter_map(validators, result)

    if args.output:
        save_json(output, args.output)
        print(f"Resolution saved to: {args.output}")
    else:
        print(json.dumps(output, indent=2))

    if result.converged and not result.warnings:
        print(f"\n✓ Converged after {result.passes_used} passes", file=sys.stderr)
        return 0

    if result.converged:
        print(f"\n✓ Converged after {result.passes_used} passes, with warnings", file=sys.stderr)
    else:
        print(f"\n✗ Did not converge after {result.passes_used} passes", file=sys.stderr)
    for w in result.warnings:
        print(f"  - {w.validator or '*'}: {w.kind.value} {w.message}", file=sys.stderr)
    return 0 if result.converged else 1


def cmd_compare(args):
    """Compare produced hashes against expected hashes."""
    from plutusscan.verifier import compare_hashes, parse_expected_hashes

    comparison = compare_hashes(
        parse_expected_hashes(_text_or_file(args.actual)),
        parse_expected_hashes(_text_or_file(args.expected)),
    )
    print(json.dumps(comparison.to_dict(), indent=2))

    if comparison.verified:
        print(f"\n✓ {comparison.outcome.value}", file=sys.stderr)
        return 0
    print(f"\n✗ {comparison.outcome.value}", file=sys.stderr)
    for h in comparison.unmatched_expected:
        print(f"  missing: {h}", file=sys.stderr)
    return 1


def cmd_demo(args):
    """Encode the registry interoperability record."""
    from plutusscan.metadata import VerificationMetadata, build_submission

    print("=" * 60)
    print("PlutusScan Registry Encoding Demonstration")
    print("=" * 60)

    metadata = VerificationMetadata.from_dict(DEMO_METADATA)
    submission = build_submission(metadata)

    print(f"\nSource:   {metadata.source_url}")
    print(f"Commit:   {metadata.commit_hash}")
    print(f"Compiler: {metadata.compiler_version}")
    print(f"Scripts:  {len(metadata.parameters)}")

    print("\n" + "-" * 60)
    print(f"Encoded ({submission.size_bytes} bytes)")
    print("-" * 60)
    print(submission.hex)

    print("\n" + "-" * 60)
    print(f"Chunks (label {list(submission.transaction_metadata)[0]})")
    print("-" * 60)
    for i, chunk in enumerate(submission.chunks):
        print(f"  [{i}] {chunk}")

    print(f"\nEstimated fee: {submission.estimated_fee} lovelace")
    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def build_parser() -> argparse.ArgumentParser:
    from plutusscan.metadata import DEFAULT_CHUNK_SIZE
    from plutusscan.resolver import MAX_RESOLUTION_PASSES

    parser = argparse.ArgumentParser(
        prog="plutusscan",
        description="PlutusScan smart contract verification CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  plutusscan demo                                    Encode the sample registry record
  plutusscan encode-param -v 42 -t integer
  plutusscan encode-metadata -f metadata.json -o submission.json
  plutusscan inspect-blueprint -b plutus.json
  plutusscan resolve -b plutus.json -i inputs.json -p mylib.uplc:apply_params
  plutusscan compare -a resolved.txt -e "spend: 39b875da..."
        """
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # encode-param
    param_parser = subparsers.add_parser("encode-param", help="Encode a parameter value")
    param_parser.add_argument("-v", "--value", required=True, help="Raw parameter value")
    param_parser.add_argument("-t", "--type", choices=sorted(TYPE_CHOICES), default="opaque",
                              help="Encoding policy (ignored with --schema)")
    param_parser.add_argument("-s", "--schema", help="Blueprint schema JSON (text or file)")
    param_parser.add_argument("--passthrough", action="store_true", help="Value is already CBOR hex")

    # encode-metadata
    meta_parser = subparsers.add_parser("encode-metadata", help="Encode verification metadata")
    meta_parser.add_argument("-f", "--file", required=True, help="Metadata JSON file")
    meta_parser.add_argument("-o", "--output", help="Output file for submission")
    meta_parser.add_argument("--size", type=int, default=DEFAULT_CHUNK_SIZE, help="Chunk size in hex characters")

    # chunk
    chunk_parser = subparsers.add_parser("chunk", help="Chunk encoded hex")
    chunk_parser.add_argument("-x", "--hex", required=True, help="Hex text or file")
    chunk_parser.add_argument("--size", type=int, default=DEFAULT_CHUNK_SIZE, help="Chunk size in hex characters")

    # inspect-blueprint
    inspect_parser = subparsers.add_parser("inspect-blueprint", help="List blueprint validators")
    inspect_parser.add_argument("-b", "--blueprint", required=True, help="plutus.json file")
    inspect_parser.add_argument("-c", "--compiler-version", help="Compiler version, e.g. v1.1.3")
    inspect_parser.add_argument("--json", action="store_true", help="Print JSON")

    # resolve
    resolve_parser = subparsers.add_parser("resolve", help="Resolve parameterized hashes")
    resolve_parser.add_argument("-b", "--blueprint", required=True, help="plutus.json file")
    resolve_parser.add_argument("-i", "--inputs", required=True, help="Parameter inputs JSON file")
    resolve_parser.add_argument("-p", "--parameterizer", required=True,
                                help="Parameterization function, package.module:function")
    resolve_parser.add_argument("-c", "--compiler-version", help="Compiler version, e.g. v1.1.3")
    resolve_parser.add_argument("-m", "--max-passes", type=int, default=MAX_RESOLUTION_PASSES, help="Pass budget")
    resolve_parser.add_argument("-o", "--output", help="Output file for resolution")

    # compare
    compare_parser = subparsers.add_parser("compare", help="Compare hashes")
    compare_parser.add_argument("-a", "--actual", required=True, help="Produced hashes (text or file)")
    compare_parser.add_argument("-e", "--expected", required=True, help="Expected hashes (text or file)")

    # demo
    subparsers.add_parser("demo", help="Run demonstration")

    return parser


COMMANDS = {
    "encode-param": cmd_encode_param,
    "encode-metadata": cmd_encode_metadata,
    "chunk": cmd_chunk,
    "inspect-blueprint": cmd_inspect_blueprint,
    "resolve": cmd_resolve,
    "compare": cmd_compare,
    "demo": cmd_demo,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        return command(args)
    except PlutusScanError as e:
        print(f"✗ {e.kind.value}: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
