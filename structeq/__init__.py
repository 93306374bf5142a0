"""
Structural Equivalence (structeq)
=================================

Compare two Python values and get back WHERE they differ, not just
whether they do.

    equal((1, 2, 3), (1, 2, 4))              → ["tuple[2]: 3 != 4"]
    equal({"a": [1, 2]}, {"a": [1]})         → ["dict['a'][1]: 2 != <no value>"]
    equal(float("nan"), float("nan"))        → []

The walk understands records (dataclasses, namedtuples, plain objects),
tuples, lists, mappings, sets, explicit references and tagged unions,
numbers and strings.  It:
  • treats NaN as equivalent to NaN
  • compares floats at a configurable mantissa precision
  • terminates on self-referential structures
  • stops after a configurable number of diffs

All knobs live on a Comparer:

    comparer = Comparer(max_diffs=0, float_precision=0)
    for d in comparer.equal(expected, actual):
        print(d)
"""

import logging

from structeq.core import (
    Comparer,
    Diff,
    equal,
)
from structeq.values import (
    Ref,
    Shape,
    Tagged,
    describe_type,
    shape_of,
)
from structeq.tolerance import round_mantissa

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "Comparer", "Diff", "equal",
    "Ref", "Tagged", "Shape", "shape_of", "describe_type",
    "round_mantissa",
]
