"""
PlutusScan Verification Report

Compares the script hashes produced by a build (after parameter
resolution) against the hashes a user expects to see on chain.

Outcomes:
- MATCH: every expected hash was produced
- MISMATCH: at least one expected hash was not produced
- NO_EXPECTATIONS: nothing to compare against

Comparison is case-insensitive and ignores duplicates.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List

from .blueprint import Validator
from .hashing import dedupe_hashes

_SEPARATORS = re.compile(r'[\n,]')


class VerificationOutcome(str, Enum):
    MATCH = "MATCH"
    MISMATCH = "MISMATCH"
    NO_EXPECTATIONS = "NO_EXPECTATIONS"


@dataclass
class HashComparison:
    """Result of comparing actual and expected hashes."""
    outcome: VerificationOutcome
    matched: List[str] = field(default_factory=list)
    unmatched_actual: List[str] = field(default_factory=list)
    unmatched_expected: List[str] = field(default_factory=list)

    @property
    def verified(self) -> bool:
        return self.outcome == VerificationOutcome.MATCH

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "matched": self.matched,
            "unmatched_actual": self.unmatched_actual,
            "unmatched_expected": self.unmatched_expected,
        }


def parse_expected_hashes(text: str) -> List[str]:
    """
    Parse user supplied expected hashes.

    Accepts a JSON array of hashes, a JSON object (its values are the
    hashes), or plain text with one hash per line or comma. A "label: hash"
    line keeps only the hash.
    """
    if not text or not text.strip():
        return []

    stripped = text.strip()
    if stripped[0] in "[{":
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return dedupe_hashes(str(v) for v in parsed if isinstance(v, str))
        if isinstance(parsed, dict):
            return dedupe_hashes(str(v) for v in parsed.values() if isinstance(v, str))

    values = []
    for line in _SEPARATORS.split(stripped):
        line = line.strip()
        if ":" in line:
            line = line.rsplit(":", 1)[1].strip()
        values.append(line)
    return dedupe_hashes(values)


def compare_hashes(actual: Iterable[str], expected: Iterable[str]) -> HashComparison:
    """Compare two hash collections."""
    actual_list = dedupe_hashes(actual)
    expected_list = dedupe_hashes(expected)

    if not expected_list:
        return HashComparison(
            outcome=VerificationOutcome.NO_EXPECTATIONS,
            unmatched_actual=actual_list,
        )

    actual_set = set(actual_list)
    expected_set = set(expected_list)
    matched = [h for h in expected_list if h in actual_set]
    unmatched_expected = [h for h in expected_list if h not in actual_set]
    unmatched_actual = [h for h in actual_list if h not in expected_set]

    return HashComparison(
        outcome=VerificationOutcome.MISMATCH if unmatched_expected else VerificationOutcome.MATCH,
        matched=matched,
        unmatched_actual=unmatched_actual,
        unmatched_expected=unmatched_expected,
    )


def verify_resolution(validators: List[Validator], result, expected: Iterable[str]) -> HashComparison:
    """Compare the final hashes of a resolution (or unparameterized hashes) to expectations."""
    actual = []
    for v in validators:
        final = result.final_hash(v.id) if result is not None else None
        actual.append(final or v.unparameterized_hash)
    return compare_hashes(actual, expected)
