"""
Clasp parse results: outcomes, schemas, records and tagged variants.

Overview
- Outcome
  • Immutable value-or-fault pair returned by every parse call.
  • Truthy on success; unwrap() returns the value or raises the fault.

- Field / Schema
  • The shape of an aggregate result: an ordered list of (name, value type)
    pairs, compared structurally.
  • record_type(schema) is the namedtuple class holding one parsed record;
    structurally equal schemas share one record class.

- Union / Variant / either
  • Command layers produce a Variant(index, command, value) out of a Union of
    variant shapes.
  • either() widens a union with another shape, folding duplicates.

Quick example
    >>> schema = Schema((Field("width", INTEGER), Field("height", INTEGER)))
    >>> record_type(schema)(30, 20)
    Record(width=30, height=20)
"""
import collections
import functools

from .utils import Unset, mirror


class Outcome:
    """
    The result of one parse call: exactly one of a value or a fault.

    Outcomes are never mutated after construction; use success() and failure()
    to build them.
    """
    __slots__ = ("_value", "_fault")

    value = mirror("value")
    fault = mirror("fault")

    def __init__(self, value=Unset, fault=Unset, /):
        if (value is Unset) == (fault is Unset):
            raise TypeError("outcome must hold exactly one of a value or a fault")
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_fault", fault)

    @classmethod
    def success(cls, value, /):
        return cls(value, Unset)

    @classmethod
    def failure(cls, fault, /):
        if not isinstance(fault, BaseException):
            raise TypeError("outcome fault must be an exception")
        return cls(Unset, fault)

    @property
    def ok(self):
        return self._fault is Unset

    def unwrap(self):
        """
        Return the parsed value, or raise the fault carried by this outcome.
        """
        if self._fault is not Unset:
            raise self._fault
        return self._value

    def map(self, function, /):
        """
        Transform the value of a successful outcome; faults pass through untouched.
        """
        if self._fault is not Unset:
            return self
        return Outcome.success(function(self._value))

    def __setattr__(self, name, value):
        raise AttributeError(f"outcome attribute {name!r} is read-only")

    def __bool__(self):
        return self.ok

    def __eq__(self, other):
        if not isinstance(other, Outcome):
            return NotImplemented
        return self._value == other._value and self._fault == other._fault

    def __hash__(self):
        return hash((self._value, self._fault))

    def __repr__(self):
        if self.ok:
            return f"Outcome.success({self._value!r})"
        return f"Outcome.failure({self._fault!r})"

    def __rich_repr__(self):
        if self.ok:
            yield "value", self._value
        else:
            yield "fault", self._fault


Field = collections.namedtuple("Field", ("name", "type"))


class Schema:
    """
    Ordered list of record fields, compared structurally.
    """
    __slots__ = ("_fields",)

    fields = mirror("fields")

    def __init__(self, fields=(), /):
        fields = tuple(fields)
        for field in fields:
            if not isinstance(field, Field):
                raise TypeError("schema fields must be Field instances")
        object.__setattr__(self, "_fields", fields)

    @property
    def names(self):
        return tuple(field.name for field in self._fields)

    def __add__(self, other):
        if not isinstance(other, Schema):
            return NotImplemented
        return Schema(self._fields + other._fields)

    def __iter__(self):
        return iter(self._fields)

    def __len__(self):
        return len(self._fields)

    def __setattr__(self, name, value):
        raise AttributeError(f"schema attribute {name!r} is read-only")

    def __eq__(self, other):
        if not isinstance(other, Schema):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self):
        return hash(self._fields)

    def __repr__(self):
        return "Schema(%s)" % ", ".join(f"{name}: {getattr(type, 'name', type)}" for name, type in self._fields)


@functools.cache
def record_type(schema, /):
    """
    Return the record class for a schema (a namedtuple, one field per entry).
    """
    if not isinstance(schema, Schema):
        raise TypeError("record_type() argument must be a schema")
    return collections.namedtuple("Record", schema.names)


class Union:
    """
    Ordered tuple of variant shapes produced by a command layer.

    Two commands with structurally equal parsers keep one variant each; folding
    only happens through either().
    """
    __slots__ = ("_variants",)

    variants = mirror("variants")

    def __init__(self, variants=(), /):
        object.__setattr__(self, "_variants", tuple(variants))

    def __iter__(self):
        return iter(self._variants)

    def __len__(self):
        return len(self._variants)

    def __getitem__(self, index):
        return self._variants[index]

    def __setattr__(self, name, value):
        raise AttributeError(f"union attribute {name!r} is read-only")

    def __eq__(self, other):
        if not isinstance(other, Union):
            return NotImplemented
        return self._variants == other._variants

    def __hash__(self):
        return hash(self._variants)

    def __repr__(self):
        return "Union(%s)" % ", ".join(map(repr, self._variants))


Variant = collections.namedtuple("Variant", ("index", "command", "value"))


def either(left, right, /):
    """
    Widen `left` with the shape(s) of `right`.

    - left must be a Union; right is a Union (each of its variants is folded in
      turn) or a single shape.
    - A shape already present in the widened union (structural equality) is
      folded into the first equal variant instead of being appended.

    Returns
    - (union, mapping): the widened union, and for each variant of `right` (or
      the single shape) the index it takes in the widened union.
    """
    if not isinstance(left, Union):
        raise TypeError("either() first argument must be a union")
    variants = list(left)
    mapping = []
    for shape in (right if isinstance(right, Union) else (right,)):
        if shape in variants:
            mapping.append(variants.index(shape))
        else:
            mapping.append(len(variants))
            variants.append(shape)
    return Union(variants), tuple(mapping)


__all__ = (
    # Classes
    "Outcome",
    "Field",
    "Schema",
    "Union",
    "Variant",

    # Functions
    "record_type",
    "either",
)
