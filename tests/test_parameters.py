"""
PlutusScan Parameter Value Encoding Tests
"""

import unittest

from plutusscan import EncodingError, ErrorKind, ParameterClass, ParameterSchema
from plutusscan.parameters import (
    encode_for_schema,
    encode_parameter_value,
    encode_script_hash_reference,
    parse_integer,
)

SCRIPT_HASH = "66d403abc1d6f1206b74c64204766e46601b88747575f6a0a02142a0"


class TestIntegerPolicy(unittest.TestCase):

    def test_positive_and_negative(self):
        self.assertEqual(encode_parameter_value("42", ParameterClass.INTEGER), "182a")
        self.assertEqual(encode_parameter_value("-1", ParameterClass.INTEGER), "20")
        self.assertEqual(encode_parameter_value(" 1_000 ", ParameterClass.INTEGER), "1903e8")

    def test_non_numeric_rejected(self):
        for bad in ("abc", "1.5", "0x10", "1e3"):
            with self.subTest(value=bad):
                with self.assertRaises(EncodingError) as ctx:
                    encode_parameter_value(bad, ParameterClass.INTEGER)
                self.assertEqual(ctx.exception.kind, ErrorKind.MALFORMED_INTEGER)

    def test_parse_integer(self):
        self.assertEqual(parse_integer("+7"), 7)
        self.assertEqual(parse_integer("-300"), -300)


class TestByteArrayPolicy(unittest.TestCase):

    def test_hex_normalized(self):
        self.assertEqual(encode_parameter_value("0xABCD", ParameterClass.BYTE_ARRAY), "42abcd")
        self.assertEqual(encode_parameter_value(" ab cd ", ParameterClass.BYTE_ARRAY), "42abcd")

    def test_script_hash(self):
        self.assertEqual(encode_parameter_value(SCRIPT_HASH, ParameterClass.BYTE_ARRAY), "581c" + SCRIPT_HASH)

    def test_non_hex_rejected(self):
        with self.assertRaises(EncodingError) as ctx:
            encode_parameter_value("hello", ParameterClass.BYTE_ARRAY)
        self.assertEqual(ctx.exception.kind, ErrorKind.MALFORMED_HEX)

    def test_hash_length_logged_not_rejected(self):
        with self.assertLogs("plutusscan.parameters", level="WARNING") as logs:
            encoded = encode_parameter_value("abcd", ParameterClass.BYTE_ARRAY, hash_like=True)
        self.assertEqual(encoded, "42abcd")
        self.assertIn("INVALID_HASH_LENGTH", logs.output[0])


class TestOpaquePolicy(unittest.TestCase):

    def test_cbor_accepted_unchanged(self):
        value = "d8799f58208c198e942f1f7a60e704aa1651333b45bccd51653259204e4dac38b559844dd800ff"
        self.assertEqual(encode_parameter_value(value, ParameterClass.OPAQUE_BINARY), value)

    def test_unrecognized_shape_points_to_passthrough(self):
        with self.assertRaises(EncodingError) as ctx:
            encode_parameter_value("f6", ParameterClass.OPAQUE_BINARY)
        self.assertEqual(ctx.exception.kind, ErrorKind.UNRECOGNIZED_BINARY_SHAPE)
        self.assertIn("passthrough", ctx.exception.message)

    def test_non_hex_points_to_passthrough(self):
        with self.assertRaises(EncodingError) as ctx:
            encode_parameter_value("not cbor", ParameterClass.OPAQUE_BINARY)
        self.assertEqual(ctx.exception.kind, ErrorKind.MALFORMED_HEX)
        self.assertIn("passthrough", ctx.exception.message)


class TestPassthrough(unittest.TestCase):

    def test_returned_unchanged(self):
        self.assertEqual(encode_parameter_value("F6", ParameterClass.INTEGER, passthrough=True), "f6")

    def test_still_validates_hex(self):
        with self.assertRaises(EncodingError):
            encode_parameter_value("xyz", ParameterClass.OPAQUE_BINARY, passthrough=True)


class TestMissingValue(unittest.TestCase):

    def test_empty_rejected(self):
        for value in ("", "   ", None):
            with self.subTest(value=value):
                with self.assertRaises(EncodingError) as ctx:
                    encode_parameter_value(value, ParameterClass.INTEGER)
                self.assertEqual(ctx.exception.kind, ErrorKind.MISSING_VALUE)


class TestSchemaDriven(unittest.TestCase):

    def test_uses_schema_classification(self):
        schema = ParameterSchema.from_dict({"schema": {"$ref": "#/definitions/Int"}})
        self.assertEqual(encode_for_schema("10", schema), "0a")

    def test_missing_schema_is_opaque(self):
        self.assertEqual(encode_for_schema("d87980", None), "d87980")

    def test_reference_encoding(self):
        self.assertEqual(encode_script_hash_reference(SCRIPT_HASH.upper()), "581c" + SCRIPT_HASH)
        with self.assertRaises(EncodingError) as ctx:
            encode_script_hash_reference("abcd")
        self.assertEqual(ctx.exception.kind, ErrorKind.INVALID_HASH_LENGTH)


if __name__ == "__main__":
    unittest.main()
