"""
PlutusScan Blueprint Reader Tests
"""

import json
import tempfile
import unittest
from pathlib import Path

from plutusscan import BlueprintError, ParameterClass, PlutusVersion, ValidatorId
from plutusscan.blueprint import (
    AikenV1_0Reader,
    AikenV1_1Reader,
    get_blueprint_reader,
    index_validators,
    load_blueprint,
    read_blueprint,
)

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    with open(FIXTURES / name, "r", encoding="utf-8") as f:
        return json.load(f)


class TestPlutusVersion(unittest.TestCase):

    def test_spellings(self):
        self.assertEqual(PlutusVersion.from_string("v2"), PlutusVersion.V2)
        self.assertEqual(PlutusVersion.from_string("PlutusV3"), PlutusVersion.V3)
        self.assertEqual(PlutusVersion.from_string("plutus_v1"), PlutusVersion.V1)
        self.assertEqual(PlutusVersion.from_string("3"), PlutusVersion.V3)

    def test_default(self):
        self.assertEqual(PlutusVersion.from_string(None), PlutusVersion.V3)
        self.assertEqual(PlutusVersion.from_string("v9", PlutusVersion.V2), PlutusVersion.V2)


class TestValidatorId(unittest.TestCase):

    def test_str_and_parse(self):
        vid = ValidatorId("payment", "recurring")
        self.assertEqual(str(vid), "payment.recurring")
        self.assertEqual(ValidatorId.parse("payment.recurring"), vid)
        self.assertIs(ValidatorId.parse(vid), vid)

    def test_parse_rejects_bare_name(self):
        with self.assertRaises(ValueError):
            ValidatorId.parse("recurring")


class TestReaderSelection(unittest.TestCase):

    def test_versions(self):
        self.assertIsInstance(get_blueprint_reader("v1.1.3"), AikenV1_1Reader)
        self.assertIsInstance(get_blueprint_reader("1.2.0"), AikenV1_1Reader)
        self.assertIsInstance(get_blueprint_reader(None), AikenV1_1Reader)
        self.assertIsInstance(get_blueprint_reader("v2.0.0"), AikenV1_1Reader)
        self.assertIsInstance(get_blueprint_reader("v1.0.29-alpha"), AikenV1_0Reader)
        self.assertIsInstance(get_blueprint_reader("1.0.21"), AikenV1_0Reader)


class TestModuleTitles(unittest.TestCase):
    """Titles of the form module.name.purpose."""

    def setUp(self):
        self.validators = read_blueprint(load_fixture("plutus.json"), "v1.1.3")
        self.by_id = index_validators(self.validators)

    def test_grouped_by_module_and_name(self):
        self.assertEqual(
            set(self.by_id),
            {
                ValidatorId("settings", "settings"),
                ValidatorId("payment", "recurring"),
                ValidatorId("always", "always"),
            },
        )

    def test_purposes_collected(self):
        self.assertEqual(self.by_id[ValidatorId("payment", "recurring")].purposes, ("spend", "withdraw"))
        self.assertEqual(self.by_id[ValidatorId("settings", "settings")].purposes, ("mint", "spend"))

    def test_fields(self):
        payment = self.by_id[ValidatorId("payment", "recurring")]
        self.assertEqual(payment.unparameterized_hash, "e513498211e006e0fa7679e7c51ef09fd0b53904b7bfa5d9fb3dd01b")
        self.assertEqual(payment.plutus_version, PlutusVersion.V3)
        self.assertEqual(len(payment.parameters), 1)
        self.assertEqual(payment.parameters[0].title, "settings_script_hash")
        self.assertEqual(payment.parameters[0].classification, ParameterClass.BYTE_ARRAY)
        self.assertFalse(self.by_id[ValidatorId("always", "always")].requires_parameters)

    def test_incomplete_entries_skipped(self):
        with self.assertLogs("plutusscan.blueprint", level="WARNING") as logs:
            read_blueprint(load_fixture("plutus.json"))
        output = "\n".join(logs.output)
        self.assertIn("missing fields", output)
        self.assertIn("INVALID_HASH_LENGTH", output)

    def test_to_dict(self):
        d = self.by_id[ValidatorId("settings", "settings")].to_dict()
        self.assertEqual(d["validator"], "settings.settings")
        self.assertEqual(d["parameters"][0]["classification"], "INTEGER")


class TestAlphaTitles(unittest.TestCase):
    """v1.0 alpha titles of the form name.purpose, grouped by hash."""

    def test_grouped_by_hash(self):
        validators = read_blueprint(load_fixture("plutus_alpha.json"), "v1.0.29-alpha+16fb02e")
        self.assertEqual(len(validators), 1)
        oneshot = validators[0]
        self.assertEqual(oneshot.id, ValidatorId("oneshot", "oneshot"))
        self.assertEqual(oneshot.purposes, ("mint", "spend"))
        self.assertEqual(oneshot.plutus_version, PlutusVersion.V2)
        self.assertEqual(oneshot.parameters[0].classification, ParameterClass.OPAQUE_BINARY)


class TestMalformedBlueprints(unittest.TestCase):

    def test_validators_not_list(self):
        with self.assertRaises(BlueprintError):
            read_blueprint({"validators": {}})

    def test_not_an_object(self):
        with self.assertRaises(BlueprintError):
            read_blueprint([])

    def test_load_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "plutus.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(BlueprintError):
                load_blueprint(path)

    def test_load_file(self):
        validators = load_blueprint(FIXTURES / "plutus.json")
        self.assertEqual(len(validators), 3)

    def test_duplicate_ids(self):
        validators = read_blueprint(load_fixture("plutus.json"))
        with self.assertRaises(BlueprintError):
            index_validators(validators + validators[:1])


if __name__ == "__main__":
    unittest.main()
