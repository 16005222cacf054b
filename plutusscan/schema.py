"""
PlutusScan Parameter Schemas

Blueprint parameter schemas are JSON objects whose shape is only implied by
which keys are present. They are parsed once into a closed set of variants:

    Primitive(name) | Reference(path) | ListOf(item) | MapOf(keys, values) | SumOf(alternatives)

and classified into one of three encoding policies. Classification is
deliberately shallow: anything that is not confidently an integer or a byte
array is OPAQUE_BINARY, and the caller must supply the value already encoded.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class ParameterClass(str, Enum):
    """Encoding policy for a parameter slot."""
    INTEGER = "INTEGER"
    BYTE_ARRAY = "BYTE_ARRAY"
    OPAQUE_BINARY = "OPAQUE_BINARY"


@dataclass(frozen=True)
class Primitive:
    name: str
    title: Optional[str] = None


@dataclass(frozen=True)
class Reference:
    path: str
    title: Optional[str] = None


@dataclass(frozen=True)
class ListOf:
    item: "ParameterType"
    title: Optional[str] = None


@dataclass(frozen=True)
class MapOf:
    keys: "ParameterType"
    values: "ParameterType"
    title: Optional[str] = None


@dataclass(frozen=True)
class SumOf:
    alternatives: Tuple["ParameterType", ...] = field(default_factory=tuple)
    title: Optional[str] = None


ParameterType = Union[Primitive, Reference, ListOf, MapOf, SumOf]


@dataclass(frozen=True)
class ParameterSchema:
    """A validator parameter slot as declared in the blueprint."""
    type: ParameterType
    title: Optional[str] = None

    @property
    def type_name(self) -> str:
        return type_name(self.type)

    @property
    def classification(self) -> ParameterClass:
        return classify(self.type)

    @property
    def hash_like(self) -> bool:
        return is_hash_like(self.type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "type": self.type_name,
            "classification": self.classification.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParameterSchema':
        """Build from a blueprint parameter entry ({"title": ..., "schema": {...}})."""
        return cls(type=parse_type(data.get("schema")), title=data.get("title"))


UNKNOWN = Primitive("unknown")

BYTE_ARRAY_KEYWORDS = ("byte", "hash", "policy", "address")
HASH_KEYWORDS = ("hash", "policy")
REFERENCE_TITLE_KEYWORDS = ("hash", "validator", "script", "policy")


def parse_type(node: Any) -> ParameterType:
    """
    Parse a blueprint schema node into a ParameterType.

    Unrecognised shapes become Primitive("unknown"), which classifies as
    OPAQUE_BINARY.
    """
    if not isinstance(node, dict):
        return UNKNOWN

    title = node.get("title")

    if "$ref" in node:
        return Reference(path=str(node["$ref"]), title=title)

    data_type = node.get("dataType")
    if data_type == "list" or (data_type is None and "items" in node):
        items = node.get("items")
        # tuples are declared as a list of item schemas
        if isinstance(items, list):
            return ListOf(item=SumOf(tuple(parse_type(i) for i in items)), title=title)
        return ListOf(item=parse_type(items), title=title)

    if data_type == "map" or (data_type is None and "keys" in node and "values" in node):
        return MapOf(keys=parse_type(node.get("keys")), values=parse_type(node.get("values")), title=title)

    if data_type:
        return Primitive(name=str(data_type), title=title)

    any_of = node.get("anyOf")
    if isinstance(any_of, list) and any_of:
        return SumOf(alternatives=tuple(parse_type(alt) for alt in any_of), title=title)

    return UNKNOWN


def reference_name(path: str) -> str:
    """Final segment of a JSON pointer reference, with ~1 and ~0 unescaped."""
    last = path.split("/")[-1]
    cleaned = last.replace("~1", "/").replace("~0", "~")
    return cleaned.split("/")[-1]


def type_name(t: ParameterType) -> str:
    """Human readable type name used for display and classification."""
    if isinstance(t, Primitive):
        if t.name in ("map", "constructor", "list"):
            return f"{t.name} (CBOR)"
        return t.name
    if isinstance(t, Reference):
        return reference_name(t.path)
    if isinstance(t, ListOf):
        return f"List<{type_name(t.item)}>"
    if isinstance(t, MapOf):
        return "map (CBOR)"
    if isinstance(t, SumOf):
        if t.alternatives and t.alternatives[0].title:
            return t.alternatives[0].title
        return "constructor (CBOR)"
    return "unknown"


def _name_class(name: str) -> ParameterClass:
    lowered = name.lower()
    if lowered == "integer" or "int" in lowered:
        return ParameterClass.INTEGER
    if any(k in lowered for k in BYTE_ARRAY_KEYWORDS):
        return ParameterClass.BYTE_ARRAY
    return ParameterClass.OPAQUE_BINARY


def classify(t: ParameterType) -> ParameterClass:
    """
    Total classification of a parameter type into an encoding policy.

    Primitives and references are matched by name (case-insensitive keyword
    match on the final reference segment). Lists, maps and sums are always
    OPAQUE_BINARY.
    """
    if isinstance(t, Primitive):
        if t.name in ("map", "constructor", "list"):
            return ParameterClass.OPAQUE_BINARY
        return _name_class(t.name.lstrip("#"))
    if isinstance(t, Reference):
        return _name_class(reference_name(t.path))
    return ParameterClass.OPAQUE_BINARY


def is_hash_like(t: ParameterType) -> bool:
    """Byte arrays whose name says they carry a 28 byte script or policy hash."""
    if classify(t) != ParameterClass.BYTE_ARRAY:
        return False
    lowered = type_name(t).lower()
    return any(k in lowered for k in HASH_KEYWORDS)


def suggests_reference(title: Optional[str]) -> bool:
    """True when a slot title reads like it takes another validator's hash."""
    if not title:
        return False
    lowered = title.lower()
    return any(k in lowered for k in REFERENCE_TITLE_KEYWORDS)
