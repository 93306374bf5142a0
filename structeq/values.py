"""
structeq.values — The closed set of value shapes the engine understands.

Every Python value handed to the comparison engine is classified into
exactly one Shape, and the engine keeps one handler per Shape:

    None                          → NONE       (no value)
    bool                          → BOOL
    numbers.Integral              → INT
    numbers.Real                  → FLOAT
    numbers.Complex               → COMPLEX
    str / bytes / bytearray       → STRING
    tuple                         → ARRAY      (fixed size, length is part of the type)
    list                          → SEQUENCE   (variable length, may be absent)
    Mapping                       → MAPPING
    set / frozenset               → SET
    dataclass / namedtuple / obj  → RECORD
    Ref                           → REF
    Tagged                        → TAGGED
    function / method / partial   → CALLABLE
    anything else                 → OPAQUE     (compared with ==)

Python has no spelling for an explicit pointer or for a union that
remembers its declared type, so this module provides two small
wrappers for them: Ref and Tagged.
"""

import dataclasses
import functools
import numbers
import types
from collections.abc import Mapping, Set
from enum import Enum, auto
from typing import Any, Iterator


# ═══════════════════════════════════════════════════════════════════
#  SHAPES
# ═══════════════════════════════════════════════════════════════════

class Shape(Enum):
    """Structural category of a value, used to select a comparison handler."""
    NONE = auto()
    BOOL = auto()
    INT = auto()
    FLOAT = auto()
    COMPLEX = auto()
    STRING = auto()
    ARRAY = auto()
    SEQUENCE = auto()
    MAPPING = auto()
    SET = auto()
    RECORD = auto()
    REF = auto()
    TAGGED = auto()
    CALLABLE = auto()
    OPAQUE = auto()


# Shapes whose two sides carry an object identity worth remembering in
# the cycle guard.
REFERENCE_SHAPES = frozenset({
    Shape.SEQUENCE,
    Shape.MAPPING,
    Shape.RECORD,
    Shape.REF,
    Shape.TAGGED,
})

_CALLABLE_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.MethodWrapperType,
    types.WrapperDescriptorType,
    types.MethodDescriptorType,
    functools.partial,
)


# ═══════════════════════════════════════════════════════════════════
#  EXPLICIT WRAPPERS
# ═══════════════════════════════════════════════════════════════════

@dataclasses.dataclass(eq=False, slots=True)
class Ref:
    """
    An explicit reference to another value.

    Two Refs pointing at the very same object are equivalent without
    looking at the target.  Otherwise the targets are compared, at the
    same depth as the Refs themselves.  A Ref whose target is None is a
    nil reference.

    Refs are mutable so that reference cycles can be built:

        a = Ref()
        b = Ref(a)
        a.target = b
    """
    target: Any = None


@dataclasses.dataclass(eq=False, slots=True)
class Tagged:
    """
    A tagged union: a declared tag plus the concrete value it holds.

    The tag plays the role of the union's static type, so two Tagged
    values with different tags are a type mismatch.  A Tagged holding
    None holds no concrete value.

    Examples:
        Tagged("error", None)                 # no error
        Tagged("error", ValueError("boom"))
        Tagged("shape", Circle(radius=2.0))
    """
    tag: str
    value: Any = None

    def __post_init__(self):
        if not isinstance(self.tag, str) or not self.tag:
            raise ValueError(f"Tagged.tag must be a non-empty string, got {self.tag!r}")


# ═══════════════════════════════════════════════════════════════════
#  CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════

def _is_namedtuple(value: Any) -> bool:
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def _is_plain_object(value: Any) -> bool:
    """An instance with a __dict__ that keeps object's identity equality."""
    # Exceptions keep their args outside __dict__.
    if isinstance(value, (type, types.ModuleType, BaseException)):
        return False
    if not hasattr(value, "__dict__"):
        return False
    return type(value).__eq__ is object.__eq__


def shape_of(value: Any) -> Shape:
    """
    Classify a value into its Shape.

    The order of the checks matters: bool is a subclass of int, a
    namedtuple is a tuple, and Ref/Tagged are dataclasses.
    """
    if value is None:
        return Shape.NONE
    if isinstance(value, Ref):
        return Shape.REF
    if isinstance(value, Tagged):
        return Shape.TAGGED
    if isinstance(value, bool):
        return Shape.BOOL
    if isinstance(value, numbers.Integral):
        return Shape.INT
    if isinstance(value, numbers.Real):
        return Shape.FLOAT
    if isinstance(value, numbers.Complex):
        return Shape.COMPLEX
    if isinstance(value, (str, bytes, bytearray)):
        return Shape.STRING
    if isinstance(value, tuple):
        return Shape.RECORD if _is_namedtuple(value) else Shape.ARRAY
    if isinstance(value, list):
        return Shape.SEQUENCE
    if isinstance(value, Mapping):
        return Shape.MAPPING
    if isinstance(value, Set):
        return Shape.SET
    if isinstance(value, _CALLABLE_TYPES):
        return Shape.CALLABLE
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return Shape.RECORD
    if _is_plain_object(value):
        return Shape.RECORD
    return Shape.OPAQUE


def type_identity(value: Any) -> Any:
    """
    The runtime type of a value as far as equivalence is concerned.

    Fixed-size arrays carry their length and tagged unions carry their
    tag, so (1, 2) and (1, 2, 3) are different types just like
    Tagged("a", 1) and Tagged("b", 1).
    """
    if type(value) is tuple:
        return (tuple, len(value))
    if isinstance(value, Tagged):
        return (Tagged, value.tag)
    return type(value)


def describe_type(value: Any) -> str:
    """Human-readable type description used in type-mismatch diffs."""
    if value is None:
        return "None"
    if type(value) is tuple:
        return f"tuple[{len(value)}]"
    if isinstance(value, Tagged):
        return f"Tagged[{value.tag}]"
    return type(value).__qualname__


# ═══════════════════════════════════════════════════════════════════
#  RECORDS
# ═══════════════════════════════════════════════════════════════════

_MISSING = object()


def record_fields(value: Any) -> Iterator[tuple[str, Any]]:
    """
    Yield (name, value) pairs of a record in declaration order.

    Dataclass fields that were never set (init=False without a default)
    are skipped.
    """
    if _is_namedtuple(value):
        yield from zip(type(value)._fields, value)
        return
    if dataclasses.is_dataclass(value):
        for field in dataclasses.fields(value):
            attr = getattr(value, field.name, _MISSING)
            if attr is not _MISSING:
                yield field.name, attr
        return
    yield from vars(value).items()


def is_public(name: str) -> bool:
    """Underscore-prefixed attributes are non-public by convention."""
    return not name.startswith("_")
