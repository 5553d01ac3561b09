"""
Clasp value codecs.

A codec turns the text matched for an argument into a typed value and back.
The parser layers only rely on four members:

- name: the type name shown in help hints and conversion faults.
- parse(text): the decoded value, or Unset when the text is malformed.
- to_string(value): the canonical text of a value (used by help output).
- convert(value): an explicit cast applied to declared defaults and implicit
  values; raises TypeError when the value cannot be converted.

Built-in codecs
- int    → "-?[0-9]+" only (no sign '+', no whitespace, no underscores).
- float  → decimal/scientific notation with an optional '-', or inf/infinity/nan.
- bool   → exactly "true" or "false".
- str    → any text, including the empty string.
- list[T] → space separated elements, each decoded by T; runs of spaces are
  ignored and an empty text is an empty list.

Any object implementing the members above can be given wherever a value type
is expected.
"""
import functools
import re
import types
import typing
from collections.abc import Hashable, Iterable

from .utils import Unset


class Codec:
    """
    Base class for value codecs.

    Subclasses define `name`, `parse` and `to_string`; `convert` defaults to
    the identity. Codecs are stateless and compare by type (and element codec
    for lists), so schemas built from them compare structurally.
    """
    name = "value"

    def parse(self, text, /):
        raise NotImplementedError

    def to_string(self, value, /):
        raise NotImplementedError

    def convert(self, value, /):
        return value

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


class IntegerCodec(Codec):
    name = "int"

    def parse(self, text, /):
        if re.fullmatch(r"-?[0-9]+", text, re.ASCII) is None:
            return Unset
        return int(text)

    def to_string(self, value, /):
        return str(value)

    def convert(self, value, /):
        if isinstance(value, str) or not isinstance(value, int | float):
            raise TypeError(f"cannot convert {value!r} to int")
        return int(value)


class FloatCodec(Codec):
    name = "float"

    def parse(self, text, /):
        if re.fullmatch(r"-?(inf|infinity|nan)", text, re.IGNORECASE):
            return float(text)
        if re.fullmatch(r"-?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][-+]?[0-9]+)?", text, re.ASCII) is None:
            return Unset
        return float(text)

    def to_string(self, value, /):
        return repr(float(value))

    def convert(self, value, /):
        if isinstance(value, str) or not isinstance(value, int | float):
            raise TypeError(f"cannot convert {value!r} to float")
        return float(value)


class BooleanCodec(Codec):
    name = "bool"

    def parse(self, text, /):
        match text:
            case "true":
                return True
            case "false":
                return False
        return Unset

    def to_string(self, value, /):
        return "true" if value else "false"

    def convert(self, value, /):
        if not isinstance(value, int):
            raise TypeError(f"cannot convert {value!r} to bool")
        return bool(value)


class StringCodec(Codec):
    name = "str"

    def parse(self, text, /):
        return text

    def to_string(self, value, /):
        return value

    def convert(self, value, /):
        if not isinstance(value, str):
            raise TypeError(f"cannot convert {value!r} to str")
        return value


class ListCodec(Codec):
    """
    Space separated list of values decoded by an element codec.

    An element that fails to decode fails the whole list.
    """

    def __init__(self, element, /):
        self.element = element
        self.name = f"list[{element.name}]"

    def parse(self, text, /):
        values = []
        for part in filter(None, text.split(" ")):
            if (value := self.element.parse(part)) is Unset:
                return Unset
            values.append(value)
        return values

    def to_string(self, value, /):
        return " ".join(map(self.element.to_string, value))

    def convert(self, value, /):
        if isinstance(value, str) or not isinstance(value, Iterable):
            raise TypeError(f"cannot convert {value!r} to {self.name}")
        return list(map(self.element.convert, value))

    def __eq__(self, other):
        return type(self) is type(other) and self.element == other.element

    def __hash__(self):
        return hash((type(self), self.element))


INTEGER = IntegerCodec()
FLOAT = FloatCodec()
BOOLEAN = BooleanCodec()
STRING = StringCodec()

_builtins = {
    int: INTEGER,
    float: FLOAT,
    bool: BOOLEAN,
    str: STRING,
}


def _is_codec(object):
    return all(callable(getattr(object, member, None)) for member in ("parse", "to_string")) and \
        isinstance(getattr(object, "name", None), str)


@functools.cache
def _resolve(value_type):
    if (codec := _builtins.get(value_type)) is not None:
        return codec
    if typing.get_origin(value_type) is list and len(arguments := typing.get_args(value_type)) == 1:
        return ListCodec(_resolve(arguments[0]))
    raise TypeError(f"no codec available for type {value_type!r}")


def codec_for(value_type, /):
    """
    Resolve the codec for a declared value type.

    Accepts int, float, bool, str, list[T] (for any supported T), or an object
    that already implements the codec members (name, parse, to_string) and is
    hashable. Anything else raises TypeError.
    """
    if not isinstance(value_type, type | types.GenericAlias) and _is_codec(value_type):
        try:
            hash(value_type)
        except TypeError:
            raise TypeError(f"custom codec {value_type.name!r} must be hashable") from None
        return value_type
    if not isinstance(value_type, Hashable):
        raise TypeError(f"no codec available for type {value_type!r}")
    return _resolve(value_type)


__all__ = (
    "Codec",
    "IntegerCodec",
    "FloatCodec",
    "BooleanCodec",
    "StringCodec",
    "ListCodec",
    "INTEGER",
    "FLOAT",
    "BOOLEAN",
    "STRING",
    "codec_for",
)
