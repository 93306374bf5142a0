"""
structeq.core — Structural equivalence with bounded diff reports
================================================================

§1  WHAT IT DOES
────────────────

equal(a, b) walks two values in lock-step and returns the list of
places where they diverge, rather than a single True/False:

    equal((1, 2, 3), (1, 2, 4))           → ["tuple[2]: 3 != 4"]
    equal({1: "one"}, {1: "one", 2: "two"}) → ["dict[2]: <no key> != 'two'"]
    equal([1.0, 2.0], [1.0, 2.0 + 1e-12])   → []

An empty list means the two values are equivalent.


§2  EQUIVALENCE, NOT EQUALITY
─────────────────────────────

The comparison is driven by a Comparer, which decides how lenient to be:

    • NaN is equivalent to NaN.
    • Floats (and the parts of complex numbers) are compared after
      rounding their mantissas to `float_precision` bits.
    • Underscore-prefixed record attributes are skipped unless
      `compare_unexported` is set.
    • An absent list (None) may or may not be equivalent to [], and the
      same for an absent dict and {}.
    • Anything deeper than `max_depth` is assumed equivalent.
    • At most `max_diffs` diffs are reported.

Values of different runtime types never descend further: the pair
produces one diff naming the two types.  1 and 1.0, True and 1, a list
and a tuple, or tuples of different lengths are all type mismatches.


§3  THE WALK
────────────

For each pair (a, b) at depth d:

    1.  d > max_depth                     → equivalent, stop
    2.  one side None                     → absent-value rules
    3.  type_identity(a) ≠ type_identity(b) → one diff, stop
    4.  reference-bearing shape:
            a is b                        → equivalent, stop
            (id pair, type) seen before   → equivalent, stop
            otherwise remember the pair
    5.  dispatch on shape_of(a)

Containers push a path segment before descending into a child and pop
it right after, so the path always mirrors the nesting.  Records,
arrays, lists and mappings count as one level of depth; Ref and Tagged
unwrapping does not.

Step 4 is what makes self-referential structures terminate: each pair
of objects is descended into at most once.


§4  ORDERING
────────────

Mapping and set iteration order decides the order in which their
diffs are reported, never which diffs are reported.
"""

import logging
from dataclasses import dataclass
from reprlib import Repr
from typing import Any, Optional

from .tolerance import FloatTolerance
from .values import (
    REFERENCE_SHAPES,
    Shape,
    describe_type,
    is_public,
    record_fields,
    shape_of,
    type_identity,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  CONFIGURATION
# ═══════════════════════════════════════════════════════════════════

_SWITCHES = ("compare_unexported", "nil_maps_empty", "nil_sequences_empty")
_LIMITS = ("float_precision", "max_depth", "max_diffs")


@dataclass(frozen=True, slots=True)
class Comparer:
    """
    How equivalence is judged.

    Attributes:
        compare_unexported:  compare underscore-prefixed record attributes.
        float_precision:     mantissa bits used for float and complex
                             comparison; zero or less means exact equality.
        max_depth:           depth below which values are assumed
                             equivalent; zero or less means unbounded.
        max_diffs:           maximum number of diffs reported; zero or
                             less means unbounded.
        nil_maps_empty:      an absent mapping is equivalent to {}.
        nil_sequences_empty: an absent list is equivalent to [].

    Comparers are immutable.  Derive variants with dataclasses.replace:

        strict = dataclasses.replace(comparer, float_precision=0)
    """
    compare_unexported: bool = False
    float_precision: int = 34  # close to 1e-10
    max_depth: int = 0
    max_diffs: int = 10
    nil_maps_empty: bool = False
    nil_sequences_empty: bool = False

    def __post_init__(self):
        for name in _SWITCHES:
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise TypeError(f"Comparer.{name} must be a bool, got {value!r}")
        for name in _LIMITS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"Comparer.{name} must be an int, got {value!r}")

    def equal(self, a: Any, b: Any) -> list["Diff"]:
        """
        Compare two values and return the differences between them.

        An empty list means a and b are equivalent under this Comparer.
        """
        if a is None and b is None:
            return []

        state = _CompareState(self)
        if a is None or b is None:
            state.append(NIL if a is None else a, NIL if b is None else b)
            return state.diffs

        logger.debug("comparing %s with %s using %r", describe_type(a), describe_type(b), self)
        state.compare(a, b, 0)
        logger.debug("comparison finished with %d diff(s)", len(state.diffs))
        return state.diffs


# ═══════════════════════════════════════════════════════════════════
#  DIFFS
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Diff:
    """
    A single point of divergence.

    `left` and `right` render the two conflicting values (or markers
    such as <no key>), and `path` locates them from the root, e.g.
    "Order.items[2]['sku']".  The path is empty at the root.
    """
    left: str
    right: str
    path: str = ""

    def describe(self) -> str:
        """Render the diff for humans: "<path>: <left> != <right>"."""
        if self.path:
            return f"{self.path}: {self.left} != {self.right}"
        return f"{self.left} != {self.right}"

    def __str__(self) -> str:
        return self.describe()


class _Marker:
    """Text that renders verbatim in a diff, without quotes."""
    __slots__ = ("text",)

    def __init__(self, text: str):
        self.text = text

    def __repr__(self) -> str:
        return self.text


NIL = _Marker("<nil>")
NO_VALUE = _Marker("<no value>")
NO_KEY = _Marker("<no key>")

_reprs = Repr()
_reprs.maxstring = 80
_reprs.maxother = 120
_reprs.maxlist = _reprs.maxtuple = _reprs.maxdict = _reprs.maxset = 8


def _render(value: Any) -> str:
    return _reprs.repr(value)


def _equals(a: Any, b: Any) -> bool:
    """
    a == b reduced to a bool.

    Array types (numpy and friends) compare element-wise; the pair is
    equal only when every element is.
    """
    result = a == b
    if isinstance(result, bool):
        return result
    if hasattr(result, "all"):
        return bool(result.all())
    return bool(result)


# ═══════════════════════════════════════════════════════════════════
#  TRAVERSAL
# ═══════════════════════════════════════════════════════════════════

class _CompareState:
    """
    Mutable state of one top-level comparison.

    Holds the diffs found so far, the path stack, the visited pairs of
    the cycle guard and the float tolerance.  A fresh state is built for
    every call and never shared.
    """

    def __init__(self, comparer: Comparer):
        self.comparer = comparer
        self.diffs: list[Diff] = []
        self._path: list[str] = []
        # Visited pairs are held until the call returns so that their ids
        # cannot be reused by objects created during the walk.
        self._visited: dict[tuple[int, int, type], tuple[Any, Any]] = {}
        self._floats: Optional[FloatTolerance] = None
        if comparer.float_precision > 0:
            self._floats = FloatTolerance(comparer.float_precision)

        self._handlers = {
            Shape.BOOL: self._compare_scalar,
            Shape.INT: self._compare_scalar,
            Shape.STRING: self._compare_scalar,
            Shape.OPAQUE: self._compare_scalar,
            Shape.FLOAT: self._compare_float,
            Shape.COMPLEX: self._compare_complex,
            Shape.ARRAY: self._compare_array,
            Shape.SEQUENCE: self._compare_sequence,
            Shape.MAPPING: self._compare_mapping,
            Shape.SET: self._compare_set,
            Shape.RECORD: self._compare_record,
            Shape.REF: self._compare_ref,
            Shape.TAGGED: self._compare_tagged,
            Shape.CALLABLE: self._compare_callable,
        }

    # ── bookkeeping ──────────────────────────────────────────────

    def push(self, owner: Any, segment: str):
        # The outermost segment names the container it belongs to.
        if not self._path:
            self._path.append(type(owner).__name__ + segment)
        else:
            self._path.append(segment)

    def pop(self):
        self._path.pop()

    def append(self, left: Any, right: Any):
        self.diffs.append(Diff(left=_render(left), right=_render(right), path="".join(self._path)))
        if len(self.diffs) == self.comparer.max_diffs:
            logger.debug("diff limit of %d reached at %r", self.comparer.max_diffs, self.diffs[-1].path)

    def full(self) -> bool:
        limit = self.comparer.max_diffs
        return limit > 0 and len(self.diffs) >= limit

    def _mismatch(self, left: Any, right: Any) -> bool:
        self.append(left, right)
        return not self.full()

    # ── dispatch ─────────────────────────────────────────────────

    def compare(self, a: Any, b: Any, depth: int) -> bool:
        """
        Compare a and b, recording diffs.

        Returns False once the diff limit has been reached, telling the
        caller to stop visiting siblings.
        """
        max_depth = self.comparer.max_depth
        if max_depth > 0 and depth > max_depth:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("depth %d exceeds max_depth at %r, assuming equivalent", depth, "".join(self._path))
            return True

        if a is None or b is None:
            return self._compare_absent(a, b)

        if type_identity(a) != type_identity(b):
            return self._mismatch(_Marker(describe_type(a)), _Marker(describe_type(b)))

        shape = shape_of(a)
        if shape in REFERENCE_SHAPES:
            if a is b:
                return True
            first, second = sorted((id(a), id(b)))
            visit = (first, second, type(a))
            if visit in self._visited:
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("revisiting %s pair at %r, assuming equivalent", describe_type(a), "".join(self._path))
                return True
            self._visited[visit] = (a, b)

        return self._handlers[shape](a, b, depth)

    # ── absent values ────────────────────────────────────────────

    def _compare_absent(self, a: Any, b: Any) -> bool:
        if a is None and b is None:
            return True

        present = b if a is None else a
        shape = shape_of(present)
        if shape is Shape.SEQUENCE:
            return self._compare_nil_container(a, b, self.comparer.nil_sequences_empty)
        if shape is Shape.MAPPING:
            return self._compare_nil_container(a, b, self.comparer.nil_maps_empty)

        kind = _Marker(describe_type(present))
        if a is None:
            return self._mismatch(NIL, kind)
        return self._mismatch(kind, NIL)

    def _compare_nil_container(self, a: Any, b: Any, nil_is_empty: bool) -> bool:
        present = b if a is None else a
        if nil_is_empty and len(present) == 0:
            return True
        absent = _Marker(f"<nil {type(present).__name__}>")
        if a is None:
            return self._mismatch(absent, present)
        return self._mismatch(present, absent)

    # ── scalars ──────────────────────────────────────────────────

    def _compare_scalar(self, a: Any, b: Any, depth: int) -> bool:
        if a is b:
            return True
        if not _equals(a, b):
            return self._mismatch(a, b)
        return True

    def _floats_equal(self, x, y) -> bool:
        x_nan = x != x
        y_nan = y != y
        if x_nan or y_nan:
            return x_nan and y_nan
        if self._floats is None:
            return x == y
        return self._floats.equal(x, y)

    def _compare_float(self, a, b, depth: int) -> bool:
        if not self._floats_equal(a, b):
            return self._mismatch(a, b)
        return True

    def _compare_complex(self, a, b, depth: int) -> bool:
        if not (self._floats_equal(a.real, b.real) and self._floats_equal(a.imag, b.imag)):
            return self._mismatch(a, b)
        return True

    def _compare_callable(self, a, b, depth: int) -> bool:
        # Callables have no structure to compare; only the same object matches.
        if a is b:
            return True
        return self._mismatch(a, b)

    # ── containers ───────────────────────────────────────────────

    def _compare_array(self, a: tuple, b: tuple, depth: int) -> bool:
        for i, (x, y) in enumerate(zip(a, b)):
            self.push(a, f"[{i}]")
            self.compare(x, y, depth + 1)
            self.pop()
            if self.full():
                return False
        return True

    def _compare_sequence(self, a: list, b: list, depth: int) -> bool:
        for i in range(max(len(a), len(b))):
            self.push(a, f"[{i}]")
            if i >= len(b):
                self.append(a[i], NO_VALUE)
            elif i >= len(a):
                self.append(NO_VALUE, b[i])
            else:
                self.compare(a[i], b[i], depth + 1)
            self.pop()
            if self.full():
                return False
        return True

    def _compare_mapping(self, a, b, depth: int) -> bool:
        for key, value in a.items():
            self.push(a, f"[{_render(key)}]")
            if key in b:
                self.compare(value, b[key], depth + 1)
            else:
                self.append(value, NO_KEY)
            self.pop()
            if self.full():
                return False

        for key, value in b.items():
            if key in a:
                continue
            self.push(a, f"[{_render(key)}]")
            self.append(NO_KEY, value)
            self.pop()
            if self.full():
                return False
        return True

    def _compare_set(self, a, b, depth: int) -> bool:
        for member in a - b:
            self.push(a, f"[{_render(member)}]")
            self.append(member, NO_KEY)
            self.pop()
            if self.full():
                return False

        for member in b - a:
            self.push(a, f"[{_render(member)}]")
            self.append(NO_KEY, member)
            self.pop()
            if self.full():
                return False
        return True

    def _compare_record(self, a, b, depth: int) -> bool:
        fields_a = dict(record_fields(a))
        fields_b = dict(record_fields(b))
        names = list(fields_a) + [name for name in fields_b if name not in fields_a]

        for name in names:
            if not self.comparer.compare_unexported and not is_public(name):
                continue
            self.push(a, "." + name)
            if name not in fields_b:
                self.append(fields_a[name], NO_VALUE)
            elif name not in fields_a:
                self.append(NO_VALUE, fields_b[name])
            else:
                self.compare(fields_a[name], fields_b[name], depth + 1)
            self.pop()
            if self.full():
                return False
        return True

    # ── wrappers ─────────────────────────────────────────────────

    def _compare_ref(self, a, b, depth: int) -> bool:
        if a.target is b.target:
            return True
        return self.compare(a.target, b.target, depth)

    def _compare_tagged(self, a, b, depth: int) -> bool:
        if a.value is None and b.value is None:
            return True
        if a.value is None:
            return self._mismatch(_Marker(f"<nil {a.tag}>"), b.value)
        if b.value is None:
            return self._mismatch(a.value, _Marker(f"<nil {b.tag}>"))
        return self.compare(a.value, b.value, depth)


# ═══════════════════════════════════════════════════════════════════
#  DEFAULT CONFIGURATION
# ═══════════════════════════════════════════════════════════════════

# The Comparer used by equal().  It is process-wide and unsynchronized:
# an application may replace it once at start-up, e.g.
#
#     structeq.core.config = Comparer(max_diffs=50)
#
# but must not swap it while comparisons are running.  Libraries should
# build their own Comparer instead.
config = Comparer()


def equal(a: Any, b: Any) -> list[Diff]:
    """Compare two values using the default Comparer (`config`)."""
    return config.equal(a, b)
