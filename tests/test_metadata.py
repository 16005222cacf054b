"""
PlutusScan Verification Metadata Tests

The registry interoperability vector must encode byte for byte.
"""

import unittest

from plutusscan import (
    METADATA_LABEL,
    CompilerType,
    ErrorKind,
    MetadataError,
    VerificationMetadata,
    build_submission,
    chunk_metadata,
    encode_verification_metadata,
    estimate_registry_fee,
    to_transaction_metadata,
)

HASH_A = "e513498211e006e0fa7679e7c51ef09fd0b53904b7bfa5d9fb3dd01b"
HASH_B = "39b875da204d886d1ea0c4ae193281b819236efa36ab0b711bb3977e"
PARAM_A = "d8799f58208c198e942f1f7a60e704aa1651333b45bccd51653259204e4dac38b559844dd800ff"
PARAM_B = "66d403abc1d6f1206b74c64204766e46601b88747575f6a0a02142a0"

EXPECTED_HEX = (
    "d8799f583c687474703a2f2f6769746875622e636f6d2f65617379317374616b696e672d636f6d2f"
    "63617264616e6f2d726563757272696e672d7061796d656e745435f1a0d51c8663782ab052f869d5"
    "c82b756e8615404676312e312e33a2581c39b875da204d886d1ea0c4ae193281b819236efa36ab0b"
    "711bb3977e9f581c66d403abc1d6f1206b74c64204766e46601b88747575f6a0a02142a0ff581ce5"
    "13498211e006e0fa7679e7c51ef09fd0b53904b7bfa5d9fb3dd01b9f5827d8799f58208c198e942f"
    "1f7a60e704aa1651333b45bccd51653259204e4dac38b559844dd800ffffff"
)

EXPECTED_CHUNKS = [
    "d8799f583c687474703a2f2f6769746875622e636f6d2f65617379317374616b696e672d636f6d2f63617264616e6f2d726563757272696e672d7061796d656e",
    "745435f1a0d51c8663782ab052f869d5c82b756e8615404676312e312e33a2581c39b875da204d886d1ea0c4ae193281b819236efa36ab0b711bb3977e9f581c",
    "66d403abc1d6f1206b74c64204766e46601b88747575f6a0a02142a0ff581ce513498211e006e0fa7679e7c51ef09fd0b53904b7bfa5d9fb3dd01b9f5827d879",
    "9f58208c198e942f1f7a60e704aa1651333b45bccd51653259204e4dac38b559844dd800ffffff",
]


def fixture_metadata(parameters=None, **overrides) -> VerificationMetadata:
    fields = dict(
        source_url="http://github.com/easy1staking-com/cardano-recurring-payment",
        commit_hash="35f1a0d51c8663782ab052f869d5c82b756e8615",
        source_path="",
        compiler_version="v1.1.3",
        parameters=parameters if parameters is not None else {HASH_A: [PARAM_A], HASH_B: [PARAM_B]},
    )
    fields.update(overrides)
    return VerificationMetadata(**fields)


class TestInteropVector(unittest.TestCase):
    """Registry backend compatibility."""

    def test_exact_encoding(self):
        encoded = encode_verification_metadata(fixture_metadata())
        self.assertEqual(encoded, EXPECTED_HEX)
        self.assertEqual(len(encoded) // 2, 231)

    def test_exact_chunks(self):
        self.assertEqual(chunk_metadata(EXPECTED_HEX, 128), EXPECTED_CHUNKS)

    def test_missing_path_same_as_empty(self):
        self.assertEqual(encode_verification_metadata(fixture_metadata(source_path=None)), EXPECTED_HEX)

    def test_submission(self):
        submission = build_submission(fixture_metadata())
        self.assertEqual(submission.hex, EXPECTED_HEX)
        self.assertEqual(submission.chunks, EXPECTED_CHUNKS)
        self.assertEqual(
            submission.transaction_metadata,
            {METADATA_LABEL: [bytes.fromhex(c) for c in EXPECTED_CHUNKS]},
        )
        self.assertEqual(submission.estimated_fee, 170000 + 44 * 231)
        self.assertEqual(submission.to_dict()["label"], 1984)


class TestCanonicalOrdering(unittest.TestCase):

    def test_insertion_order_irrelevant(self):
        forward = fixture_metadata({HASH_A: [PARAM_A], HASH_B: [PARAM_B]})
        backward = fixture_metadata({HASH_B: [PARAM_B], HASH_A: [PARAM_A]})
        self.assertEqual(encode_verification_metadata(forward), encode_verification_metadata(backward))

    def test_key_case_irrelevant(self):
        upper = fixture_metadata({HASH_A.upper(): [PARAM_A], HASH_B: [PARAM_B]})
        self.assertEqual(encode_verification_metadata(upper), EXPECTED_HEX)

    def test_repeatable(self):
        metadata = fixture_metadata()
        self.assertEqual(encode_verification_metadata(metadata), encode_verification_metadata(metadata))


class TestContainerFraming(unittest.TestCase):

    def test_empty_parameter_map(self):
        encoded = encode_verification_metadata(fixture_metadata({}))
        self.assertTrue(encoded.startswith("d8799f"))
        self.assertTrue(encoded.endswith("a0ff"))

    def test_empty_parameter_list(self):
        encoded = encode_verification_metadata(fixture_metadata({HASH_B: []}))
        self.assertTrue(encoded.endswith("a1581c" + HASH_B + "80ff"))

    def test_compiler_type_alternative(self):
        encoded = encode_verification_metadata(fixture_metadata(compiler_type=CompilerType.HELIOS))
        self.assertTrue(encoded.startswith("d87a9f"))
        self.assertEqual(encoded[4:], EXPECTED_HEX[4:])

    def test_from_dict(self):
        metadata = VerificationMetadata.from_dict(fixture_metadata().to_dict())
        self.assertEqual(encode_verification_metadata(metadata), EXPECTED_HEX)


class TestFatalErrors(unittest.TestCase):
    """Malformed records never produce output."""

    def test_non_hex_commit(self):
        with self.assertRaises(MetadataError) as ctx:
            encode_verification_metadata(fixture_metadata(commit_hash="not-a-commit"))
        self.assertEqual(ctx.exception.kind, ErrorKind.MALFORMED_HEX)

    def test_short_commit_only_warns(self):
        with self.assertLogs("plutusscan.metadata", level="WARNING"):
            encoded = encode_verification_metadata(fixture_metadata(commit_hash="35f1a0d5"))
        self.assertTrue(encoded.startswith("d8799f"))

    def test_bad_key_length(self):
        with self.assertRaises(MetadataError) as ctx:
            encode_verification_metadata(fixture_metadata({HASH_A[:54]: [PARAM_A]}))
        self.assertEqual(ctx.exception.kind, ErrorKind.INVALID_HASH_LENGTH)

    def test_non_hex_parameter(self):
        with self.assertRaises(MetadataError) as ctx:
            encode_verification_metadata(fixture_metadata({HASH_A: ["xyz"]}))
        self.assertEqual(ctx.exception.kind, ErrorKind.MALFORMED_HEX)

    def test_duplicate_key_by_case(self):
        with self.assertRaises(MetadataError):
            encode_verification_metadata(fixture_metadata({HASH_A: [PARAM_A], HASH_A.upper(): [PARAM_A]}))

    def test_parameters_must_be_list(self):
        with self.assertRaises(MetadataError):
            encode_verification_metadata(fixture_metadata({HASH_A: PARAM_A}))

    def test_unknown_compiler_type(self):
        with self.assertRaises(MetadataError):
            CompilerType.from_name("solidity")


class TestChunker(unittest.TestCase):

    def test_480_characters(self):
        data = "ab" * 240
        chunks = chunk_metadata(data, 128)
        self.assertEqual([len(c) for c in chunks], [128, 128, 128, 96])
        self.assertEqual("".join(chunks), data)

    def test_empty(self):
        self.assertEqual(chunk_metadata(""), [])

    def test_exact_multiple(self):
        self.assertEqual([len(c) for c in chunk_metadata("00" * 128)], [128, 128])

    def test_invalid_size(self):
        for size in (0, -128, 127):
            with self.subTest(size=size):
                with self.assertRaises(MetadataError):
                    chunk_metadata("00", size)

    def test_non_hex_rejected(self):
        with self.assertRaises(MetadataError):
            chunk_metadata("zz")

    def test_transaction_metadata(self):
        self.assertEqual(to_transaction_metadata(["00ff", "10"]), {1984: [b"\x00\xff", b"\x10"]})
        with self.assertRaises(MetadataError):
            to_transaction_metadata(["abc"])

    def test_fee_estimate(self):
        self.assertEqual(estimate_registry_fee(""), 170000)
        self.assertEqual(estimate_registry_fee("00" * 100), 174400)


if __name__ == "__main__":
    unittest.main()
