"""
Tests for structeq.values — shape classification and the explicit
Ref / Tagged wrappers.
"""

import functools
import os
import sys
from collections import OrderedDict, namedtuple
from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction
from types import MappingProxyType

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from structeq.values import (
    REFERENCE_SHAPES,
    Ref,
    Shape,
    Tagged,
    describe_type,
    is_public,
    record_fields,
    shape_of,
    type_identity,
)


@dataclass
class Pair:
    left: int
    right: int


@dataclass
class Lazy:
    name: str
    cache: dict = field(init=False)


Coord = namedtuple("Coord", "lat lon")


class Plain:
    def __init__(self):
        self.b = 2
        self.a = 1


class WithEq:
    def __eq__(self, other):
        return isinstance(other, WithEq)


def _function():
    return None


# ═══════════════════════════════════════════════════════════════════
#  CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════

class TestShapeOf:

    @pytest.mark.parametrize("value,expected", [
        (None, Shape.NONE),
        (True, Shape.BOOL),
        (0, Shape.INT),
        (2 ** 100, Shape.INT),
        (0.5, Shape.FLOAT),
        (Fraction(1, 3), Shape.FLOAT),
        (1j, Shape.COMPLEX),
        ("s", Shape.STRING),
        (b"s", Shape.STRING),
        (bytearray(b"s"), Shape.STRING),
        ((), Shape.ARRAY),
        ((1, 2), Shape.ARRAY),
        ([], Shape.SEQUENCE),
        ({}, Shape.MAPPING),
        (OrderedDict(), Shape.MAPPING),
        (MappingProxyType({}), Shape.MAPPING),
        (set(), Shape.SET),
        (frozenset(), Shape.SET),
        (Pair(1, 2), Shape.RECORD),
        (Coord(1.0, 2.0), Shape.RECORD),
        (Plain(), Shape.RECORD),
        (Ref(), Shape.REF),
        (Tagged("t"), Shape.TAGGED),
        (_function, Shape.CALLABLE),
        (lambda: None, Shape.CALLABLE),
        (len, Shape.CALLABLE),
        ("".join, Shape.CALLABLE),
        (functools.partial(int, base=2), Shape.CALLABLE),
        (Decimal("1.5"), Shape.OPAQUE),
        (WithEq(), Shape.OPAQUE),
        (ValueError("x"), Shape.OPAQUE),
        (Pair, Shape.OPAQUE),
        (sys, Shape.OPAQUE),
    ])
    def test_shapes(self, value, expected):
        assert shape_of(value) is expected

    def test_bound_method(self):
        assert shape_of(Plain().__init__) is Shape.CALLABLE

    def test_numpy_scalars(self):
        np = pytest.importorskip("numpy")
        assert shape_of(np.int32(1)) is Shape.INT
        assert shape_of(np.float32(1)) is Shape.FLOAT
        assert shape_of(np.complex64(1)) is Shape.COMPLEX

    def test_reference_shapes(self):
        assert Shape.SEQUENCE in REFERENCE_SHAPES
        assert Shape.RECORD in REFERENCE_SHAPES
        assert Shape.ARRAY not in REFERENCE_SHAPES
        assert Shape.INT not in REFERENCE_SHAPES


class TestTypes:

    def test_tuple_length_is_part_of_identity(self):
        assert type_identity((1, 2)) == type_identity((3, 4))
        assert type_identity((1, 2)) != type_identity((1, 2, 3))

    def test_tag_is_part_of_identity(self):
        assert type_identity(Tagged("a", 1)) == type_identity(Tagged("a", "x"))
        assert type_identity(Tagged("a", 1)) != type_identity(Tagged("b", 1))

    def test_namedtuple_identity_is_its_class(self):
        assert type_identity(Coord(1, 2)) is Coord

    @pytest.mark.parametrize("value,expected", [
        (None, "None"),
        (1, "int"),
        ((1, 2, 3), "tuple[3]"),
        (Tagged("error"), "Tagged[error]"),
        (Pair(1, 2), "Pair"),
        (Coord(1, 2), "Coord"),
    ])
    def test_describe_type(self, value, expected):
        assert describe_type(value) == expected


# ═══════════════════════════════════════════════════════════════════
#  RECORDS
# ═══════════════════════════════════════════════════════════════════

class TestRecordFields:

    def test_dataclass_declaration_order(self):
        assert list(record_fields(Pair(1, 2))) == [("left", 1), ("right", 2)]

    def test_unset_dataclass_field_skipped(self):
        assert list(record_fields(Lazy("x"))) == [("name", "x")]

    def test_namedtuple(self):
        assert list(record_fields(Coord(1.0, 2.0))) == [("lat", 1.0), ("lon", 2.0)]

    def test_plain_object_insertion_order(self):
        assert list(record_fields(Plain())) == [("b", 2), ("a", 1)]

    @pytest.mark.parametrize("name,expected", [
        ("name", True),
        ("Name", True),
        ("_name", False),
        ("__name", False),
    ])
    def test_is_public(self, name, expected):
        assert is_public(name) is expected


# ═══════════════════════════════════════════════════════════════════
#  WRAPPERS
# ═══════════════════════════════════════════════════════════════════

class TestWrappers:

    def test_ref_defaults_to_nil(self):
        assert Ref().target is None

    def test_ref_is_mutable(self):
        r = Ref()
        r.target = 1
        assert r.target == 1

    def test_ref_identity_equality(self):
        assert Ref(1) != Ref(1)

    def test_cyclic_ref_repr(self):
        a = Ref()
        b = Ref(a)
        a.target = b
        assert "..." in repr(a)

    def test_tagged_defaults_to_empty(self):
        assert Tagged("error").value is None

    @pytest.mark.parametrize("tag", ["", None, 3])
    def test_tagged_rejects_bad_tags(self, tag):
        with pytest.raises(ValueError):
            Tagged(tag)
