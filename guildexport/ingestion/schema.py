"""Structural schemas for classifying untyped API payloads.

A schema describes the *shape* of a JSON-like value: which fields an object
must have, what element type an array holds, and which scalar type a leaf
carries. Matching never looks at values beyond their type, so a schema can
only tell datasets apart by structure.

Schema nodes:
    ANY                   matches anything, including None
    TypeTag.NUMBER ...    scalar type check (numeric strings count as numbers)
    ObjectShape({...})    dict with at least these fields
    IndexedMapShape(s)    dict keyed by numeric ids, every value matching `s`
    ArrayOf(s)            list of any length, every element matching `s`
    ArrayTuple(a, b, ...) list of exactly this length, matched positionally

Example:
    >>> schema = ObjectShape({"id": TypeTag.NUMBER, "title": TypeTag.STRING})
    >>> validate_schema({"id": "42", "title": "Knights", "icon": {}}, schema)
    True
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from guildexport.shared.utils import is_numeric_like


class _Missing:
    """Marker for an absent value (JavaScript ``undefined``)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


class TypeTag(str, Enum):
    """Scalar type tags, keyed by the one-letter codes of the catalog notation."""

    NUMBER = "n"
    STRING = "s"
    BOOLEAN = "b"
    INTEGER = "i"
    UNDEFINED = "u"
    FUNCTION = "f"
    SYMBOL = "y"
    NULL = "_"


class Schema:
    """Base class of all schema nodes."""

    def matches(self, target) -> bool:
        raise NotImplementedError


class Wildcard(Schema):
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def matches(self, target) -> bool:
        return True

    def __repr__(self) -> str:
        return "ANY"


ANY = Wildcard()


@dataclass(frozen=True)
class ObjectShape(Schema):
    fields: Mapping

    def matches(self, target) -> bool:
        if not isinstance(target, dict):
            return False
        return all(
            key in target and validate_schema(target[key], child)
            for key, child in self.fields.items()
        )


@dataclass(frozen=True)
class IndexedMapShape(Schema):
    """Dict keyed by numeric ids (user ids, attempt ids)."""

    child: object

    def matches(self, target) -> bool:
        if not isinstance(target, dict):
            return False
        for key, value in target.items():
            if not is_numeric_like(key):
                return False
            if not validate_schema(value, self.child):
                return False
        return True


@dataclass(frozen=True)
class ArrayOf(Schema):
    element: object

    def matches(self, target) -> bool:
        if not isinstance(target, list):
            return False
        return all(validate_schema(item, self.element) for item in target)


class ArrayTuple(Schema):
    def __init__(self, *elements) -> None:
        self.elements = tuple(elements)

    def matches(self, target) -> bool:
        if not isinstance(target, list) or len(target) != len(self.elements):
            return False
        return all(validate_schema(item, child) for item, child in zip(target, self.elements))

    def __eq__(self, other) -> bool:
        return isinstance(other, ArrayTuple) and self.elements == other.elements

    def __hash__(self) -> int:
        return hash(self.elements)

    def __repr__(self) -> str:
        return f"ArrayTuple{self.elements!r}"


def infer_type_tag(value) -> TypeTag | None:
    """Type tag of a scalar value, or None for dicts, lists and unknown types."""
    if value is MISSING:
        return TypeTag.UNDEFINED
    if value is None:
        return TypeTag.NULL
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, (int, float)):
        return TypeTag.NUMBER
    if isinstance(value, str):
        return TypeTag.NUMBER if is_numeric_like(value) else TypeTag.STRING
    if isinstance(value, (dict, list)):
        return None
    if callable(value):
        return TypeTag.FUNCTION
    return None


def validate_schema(target, schema) -> bool:
    """Check whether `target` conforms structurally to `schema`.

    Rules, in order:
        1. ANY matches everything.
        2. None matches every scalar tag.
        3. Scalar tags compare against the inferred tag of `target`.
        4. Structural schemas need a dict or list target, with dict/list
           agreeing between target and schema.
    """
    if schema is ANY:
        return True
    if isinstance(schema, TypeTag):
        if target is None:
            return True
        return infer_type_tag(target) is schema
    if not isinstance(target, (dict, list)):
        return False
    if isinstance(schema, Schema):
        return schema.matches(target)
    raise TypeError(f"Unsupported schema node: {schema!r}")
