"""
PlutusScan Blueprint Reader

Loads validators from a compiler build manifest (plutus.json, CIP-57).

Two title layouts exist in the wild:
- v1.1 and later: "module.name.purpose", one entry per purpose, grouped
  here by module.name
- v1.0 alpha: "name.purpose", grouped here by script hash

Validators are immutable once loaded.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

from .errors import BlueprintError, ErrorKind
from .hashing import is_script_hash
from .schema import ParameterSchema

logger = logging.getLogger(__name__)


class PlutusVersion(str, Enum):
    """Plutus ledger language version of a compiled script."""
    V1 = "V1"
    V2 = "V2"
    V3 = "V3"

    @classmethod
    def from_string(cls, version: Optional[str], default: "PlutusVersion" = None) -> "PlutusVersion":
        """Parse "v2", "PlutusV3", "plutus_v1", "3"; unknown values fall back to default (V3)."""
        default = default or cls.V3
        if not version:
            return default
        normalized = str(version).upper().replace("PLUTUS", "").replace("_", "")
        return {
            "V1": cls.V1, "1": cls.V1,
            "V2": cls.V2, "2": cls.V2,
            "V3": cls.V3, "3": cls.V3,
        }.get(normalized, default)


class ValidatorId(NamedTuple):
    """Unique validator identity: module name and validator name."""
    module: str
    name: str

    def __str__(self) -> str:
        return f"{self.module}.{self.name}"

    @classmethod
    def parse(cls, value: Union[str, "ValidatorId"]) -> "ValidatorId":
        if isinstance(value, ValidatorId):
            return value
        module, sep, name = str(value).partition(".")
        if not sep or not module or not name:
            raise ValueError(f"Invalid validator id '{value}': expected module.name")
        return cls(module, name)


@dataclass(frozen=True)
class Validator:
    """A compiled validator as produced by the build."""
    id: ValidatorId
    compiled_code: str
    unparameterized_hash: str
    plutus_version: PlutusVersion = PlutusVersion.V3
    purposes: Tuple[str, ...] = field(default_factory=tuple)
    parameters: Tuple[ParameterSchema, ...] = field(default_factory=tuple)

    @property
    def requires_parameters(self) -> bool:
        return len(self.parameters) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "validator": str(self.id),
            "module": self.id.module,
            "name": self.id.name,
            "purposes": list(self.purposes),
            "hash": self.unparameterized_hash,
            "plutus_version": self.plutus_version.value,
            "parameters": [p.to_dict() for p in self.parameters],
        }


@dataclass
class _Entry:
    title: str
    hash: str
    compiled_code: str
    parameters: Tuple[ParameterSchema, ...]


class BlueprintReader(ABC):
    """Reader for one blueprint title layout."""

    default_plutus_version = PlutusVersion.V3

    @abstractmethod
    def supports(self, compiler_version: Optional[str]) -> bool:
        pass

    @abstractmethod
    def read(self, data: Dict[str, Any]) -> List[Validator]:
        pass

    def _plutus_version(self, data: Dict[str, Any]) -> PlutusVersion:
        preamble = data.get("preamble") or {}
        version = PlutusVersion.from_string(preamble.get("plutusVersion"), self.default_plutus_version)
        logger.debug("Detected Plutus version: %s", version.value)
        return version

    def _entries(self, data: Dict[str, Any]) -> List[_Entry]:
        if not isinstance(data, dict):
            raise BlueprintError("blueprint must be a JSON object")
        validators = data.get("validators")
        if not isinstance(validators, list):
            raise BlueprintError("validators field is not an array", "validators")

        entries = []
        for v in validators:
            if not isinstance(v, dict):
                logger.warning("Skipping non-object validator entry")
                continue
            title = v.get("title") or ""
            script_hash = (v.get("hash") or "").lower()
            compiled_code = v.get("compiledCode") or ""

            if not title or not script_hash or not compiled_code:
                logger.warning(
                    "Skipping validator with missing fields: title=%s, hash=%s, compiledCode present=%s",
                    title, script_hash, bool(compiled_code),
                )
                continue
            if not is_script_hash(script_hash):
                logger.warning(
                    "%s: skipping validator %s with hash of %d characters",
                    ErrorKind.INVALID_HASH_LENGTH.value, title, len(script_hash),
                )
                continue

            params = v.get("parameters") or []
            if not isinstance(params, list):
                raise BlueprintError(f"parameters of {title} is not an array", "parameters")
            entries.append(_Entry(
                title=title,
                hash=script_hash,
                compiled_code=compiled_code,
                parameters=tuple(ParameterSchema.from_dict(p) for p in params if isinstance(p, dict)),
            ))
        return entries


class AikenV1_1Reader(BlueprintReader):
    """
    Titles "module.name.purpose"; grouped by module.name.

    Used for 1.1.x and 1.2.x and for any version no other reader claims.
    """

    VERSION_PATTERN = re.compile(r'^1\.[12]\.\d+')

    def supports(self, compiler_version: Optional[str]) -> bool:
        if compiler_version and not self.VERSION_PATTERN.match(compiler_version.lower().lstrip("v")):
            logger.debug("Unknown compiler version %s, reading as module.name.purpose", compiler_version)
        return True

    def read(self, data: Dict[str, Any]) -> List[Validator]:
        entries = self._entries(data)
        plutus_version = self._plutus_version(data)
        grouped: Dict[ValidatorId, Dict[str, Any]] = {}

        for entry in entries:
            parts = entry.title.split(".")
            if len(parts) < 3:
                logger.warning("Invalid validator title format (expected module.name.purpose): %s", entry.title)
                continue
            vid = ValidatorId(parts[0], parts[1])
            group = grouped.setdefault(vid, {"entry": entry, "purposes": []})
            group["purposes"].append(parts[2])

        validators = [
            Validator(
                id=vid,
                compiled_code=g["entry"].compiled_code,
                unparameterized_hash=g["entry"].hash,
                plutus_version=plutus_version,
                purposes=tuple(g["purposes"]),
                parameters=g["entry"].parameters,
            )
            for vid, g in grouped.items()
        ]
        logger.info("Parsed %d validators from blueprint", len(validators))
        return validators


class AikenV1_0Reader(BlueprintReader):
    """Alpha titles "name.purpose"; grouped by script hash, module = name."""

    VERSION_PATTERN = re.compile(r'^1\.0\.\d+(-alpha.*)?$')
    default_plutus_version = PlutusVersion.V2

    def supports(self, compiler_version: Optional[str]) -> bool:
        if not compiler_version:
            return False
        return bool(self.VERSION_PATTERN.match(compiler_version.lower().lstrip("v")))

    def read(self, data: Dict[str, Any]) -> List[Validator]:
        entries = self._entries(data)
        plutus_version = self._plutus_version(data)
        grouped: Dict[str, Dict[str, Any]] = {}

        for entry in entries:
            parts = entry.title.split(".")
            if len(parts) < 2:
                logger.warning("Invalid validator title format for v1.0.x (expected name.purpose): %s", entry.title)
                continue
            group = grouped.setdefault(entry.hash, {"entry": entry, "name": parts[0], "purposes": []})
            group["purposes"].append(parts[1])

        validators = [
            Validator(
                id=ValidatorId(g["name"], g["name"]),
                compiled_code=g["entry"].compiled_code,
                unparameterized_hash=script_hash,
                plutus_version=plutus_version,
                purposes=tuple(g["purposes"]),
                parameters=g["entry"].parameters,
            )
            for script_hash, g in grouped.items()
        ]
        logger.info("Parsed %d unique validators from blueprint (v1.0.x alpha)", len(validators))
        return validators


# Alpha first: the v1.1 reader also accepts an unknown version
READERS: List[BlueprintReader] = [AikenV1_0Reader(), AikenV1_1Reader()]


def get_blueprint_reader(compiler_version: Optional[str] = None) -> BlueprintReader:
    """Pick the reader for a compiler version (e.g. "v1.1.3")."""
    for reader in READERS:
        if reader.supports(compiler_version):
            return reader
    raise BlueprintError(f"No blueprint reader for compiler version: {compiler_version}")


def read_blueprint(data: Dict[str, Any], compiler_version: Optional[str] = None) -> List[Validator]:
    """Read validators from an already parsed blueprint document."""
    return get_blueprint_reader(compiler_version).read(data)


def load_blueprint(path: Union[str, Path], compiler_version: Optional[str] = None) -> List[Validator]:
    """Read validators from a plutus.json file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise BlueprintError(f"invalid JSON in {path}: {e}")
    return read_blueprint(data, compiler_version)


def index_validators(validators: List[Validator]) -> Dict[ValidatorId, Validator]:
    """Key validators by identity; duplicate identities are an error."""
    index: Dict[ValidatorId, Validator] = {}
    for v in validators:
        if v.id in index:
            raise BlueprintError(f"Duplicate validator id: {v.id}")
        index[v.id] = v
    return index
