#!/usr/bin/env python3
"""
PlutusScan Example - Complete Registry Submission Flow

This example walks a parameterized blueprint from plutus.json to the
chunked transaction metadata a wallet attaches under label 1984.

Run with: python examples/registry_submission_example.py
"""

import hashlib
import json
from pathlib import Path
from typing import List

from plutusscan import (
    ParameterInput,
    PlutusVersion,
    VerificationMetadata,
    build_parameter_map,
    build_submission,
    load_blueprint,
    parse_source_url,
    resolve,
    verify_resolution,
)

BLUEPRINT = Path(__file__).resolve().parent.parent / "tests" / "fixtures" / "plutus.json"


def simulate_parameterizer(compiled_code: str, params: List[str], version: PlutusVersion) -> str:
    """
    Simulate applying parameters to a compiled validator.

    In production, this would:
    1. Decode the UPLC program from compiled_code
    2. Apply each CBOR encoded parameter as a Data constant
    3. Hash the resulting script with the Plutus version prefix
    """
    payload = compiled_code + "|" + ",".join(params) + version.value
    return hashlib.blake2b(payload.encode(), digest_size=28).hexdigest()


def main():
    print("=" * 70)
    print("PlutusScan Registry Submission - Example")
    print("=" * 70)

    # =========================================================================
    # STEP 1: Read the blueprint
    # =========================================================================

    print(f"\n[STEP 1] Reading blueprint {BLUEPRINT.name}...")

    validators = load_blueprint(BLUEPRINT, "v1.1.3")
    for v in validators:
        slots = ", ".join(p.type_name for p in v.parameters) or "none"
        print(f"  {v.id}: {v.unparameterized_hash[:16]}...  params: {slots}")

    # =========================================================================
    # STEP 2: Resolve parameterized hashes
    # =========================================================================

    print("\n[STEP 2] Resolving parameters...")

    inputs = {
        "settings.settings": [ParameterInput(value="42")],
        "payment.recurring": [ParameterInput(reference_to="settings.settings")],
    }
    result = resolve(validators, inputs, simulate_parameterizer)

    print(f"  Converged: {result.converged} after {result.passes_used} passes")
    for v in validators:
        print(f"  {v.id}: {result.final_hash(v.id)}")
    for w in result.warnings:
        print(f"  ⚠️  {w.validator}: {w.kind.value} {w.message}")

    # =========================================================================
    # STEP 3: Compare with on-chain expectations
    # =========================================================================

    print("\n[STEP 3] Comparing with expected hashes...")

    expected = [result.final_hash("payment.recurring")]
    comparison = verify_resolution(validators, result, expected)
    print(f"  Outcome: {comparison.outcome.value}")

    # =========================================================================
    # STEP 4: Encode the verification record
    # =========================================================================

    print("\n[STEP 4] Encoding verification metadata...")

    source_url = "https://github.com/easy1staking-com/cardano-recurring-payment"
    source = parse_source_url(source_url)
    print(f"  Source: {source.vcs_type.value} {source.org_or_group}/{source.repo}")

    metadata = VerificationMetadata(
        source_url=source_url,
        commit_hash="35f1a0d51c8663782ab052f869d5c82b756e8615",
        compiler_version="v1.1.3",
        parameters=build_parameter_map(validators, result),
    )
    submission = build_submission(metadata)

    print(f"  Encoded: {submission.size_bytes} bytes")
    print(f"  Chunks: {len(submission.chunks)}")
    print(f"  Estimated fee: {submission.estimated_fee} lovelace")

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    print("\n" + "-" * 70)
    print("SUBMISSION")
    print("-" * 70)
    print(json.dumps(submission.to_dict(), indent=2))

    print("\n" + "=" * 70)
    print("Example Complete")
    print("=" * 70)


if __name__ == "__main__":
    main()
