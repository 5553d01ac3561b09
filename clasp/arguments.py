r"""
Clasp leaf descriptors and their capability pipeline.

Overview
- Leaves
  • Option(value_type, field): named option recognized by one or more patterns
    (e.g., -w/--width) as a bare mention ("-w") or an explicit value ("-w=30").
  • Flag(field): boolean switch, false when absent and true on a bare mention.
  • Argument(value_type, field, name=field): positional argument, matched purely
    by position.
  Each leaf produces exactly one field of the aggregate record.

- Capabilities (each decorating call returns a new leaf; leaves never mutate)
  • leaf["-w"] / leaf.pattern("-w", ...): add pattern aliases (options only).
  • leaf("text") / leaf.describe("text"): description shown in help.
  • leaf.default_to(value): value used when the leaf is absent.
  • leaf.implicitly(value): value used on a bare mention (options only).
  • leaf.check(predicate, message): validation step, evaluated in attachment order.
  • leaf.custom_parser(function): replacement decoder for the value text.
  • leaf.hint("text"): replacement for the type name in help.
  Patterns accumulate and checks accumulate; every other capability may be
  attached at most once.

Resolution
- resolve(text): implicit value on empty text (no decode, no validation), else
  decode (ConversionError on failure), then the validation chain (first failing
  check reports a ValidationError with its message).
- resolve_absent(): the default value when attached (no decode, no validation),
  else MissingOptionError / MissingArgumentError.

Validation highlights
- Fields must be identifiers, not keywords, and cannot start with an underscore.
- Patterns must match r"--?[^\W\d_](-?[^\W_]+)*" and be unique within an option.
- Default and implicit values must be convertible to the declared value type.

Quick example:
    >>> from clasp import Option, Argument, Flag
    >>> width = Option(int, "width")["-w"]["--width"]("Width of the window").default_to(1920)
    >>> verbose = Flag("verbose")["-v"]("Print more")
    >>> user = Argument(str, "user")("Owner of the window")
"""
import copy
import keyword
import re

from .codecs import codec_for
from .faults import (
    ConversionError,
    MissingArgumentError,
    MissingOptionError,
    ValidationError,
)
from .parsers import Parser, _indentation
from .results import Field, Outcome, Schema
from .utils import *

_COLUMN = 40


def _sanitize_field(cls, field, /):
    """
    Internal: validate the record field produced by a leaf.

    Raises
    - TypeError: when field is not a string.
    - ValueError: when field is not a usable record field name.
    """
    if not isinstance(field, str):
        raise TypeError(f"{cls.__typename__} field must be a string")
    elif not field.isidentifier() or keyword.iskeyword(field):
        raise ValueError(f"{cls.__typename__} field must be a valid identifier, got {field!r}")
    elif field.startswith("_"):
        raise ValueError(f"{cls.__typename__} field cannot start with an underscore")
    return field


def _sanitize_text(cls, capability, text, /):
    if not isinstance(text, str):
        raise TypeError(f"{cls.__typename__} {capability} must be a string")
    elif not (text := text.strip()):
        raise ValueError(f"{cls.__typename__} {capability} cannot be empty")
    return text


class Leaf(Parser):
    """
    Common base of Option and Argument.

    Holds the capability record shared by both leaf kinds and interprets it
    (decode, resolve, resolve_absent). The "_<capability>" attributes are Unset
    until the capability is attached.
    """
    __introspectable__ = (
        "field",
        "codec",
        "description",
        "default",
        "metavar",
        "checks",
        "decoder",
    )

    def __new__(cls, value_type, field, /):
        self = super().__new__(cls)
        self._field = _sanitize_field(cls, field)
        try:
            self._codec = codec_for(value_type)
        except TypeError:
            raise TypeError(f"{cls.__typename__} value type {value_type!r} is not supported") from None
        self._description = Unset
        self._default = Unset
        self._implicit = Unset
        self._metavar = Unset
        self._checks = ()
        self._decoder = Unset
        return self

    def __replace__(self, /, **changes):
        clone = object.__new__(type(self))
        clone.__dict__.update(self.__dict__)
        for name, value in changes.items():
            if "_" + name not in clone.__dict__:
                raise TypeError(f"{type(self).__typename__} has no capability {name!r}")
            setattr(clone, "_" + name, value)
        return clone

    def _convert(self, capability, value, /):
        if (convert := getattr(self._codec, "convert", None)) is None:
            return value
        try:
            return convert(value)
        except (TypeError, ValueError):
            raise TypeError(
                f"{type(self).__typename__} {capability} value {value!r} is not convertible to {self._codec.name}"
            ) from None

    def describe(self, description, /):
        if self._description is not Unset:
            raise TypeError(f"{type(self).__typename__} already has a description")
        return copy.replace(self, description=_sanitize_text(type(self), "description", description))

    def __call__(self, description, /):
        return self.describe(description)

    def default_to(self, value, /):
        if self._default is not Unset:
            raise TypeError(f"{type(self).__typename__} already has a default value")
        return copy.replace(self, default=self._convert("default", value))

    def check(self, predicate, message, /):
        if not callable(predicate):
            raise TypeError(f"{type(self).__typename__} check predicate must be callable")
        message = _sanitize_text(type(self), "check message", message)
        return copy.replace(self, checks=self._checks + ((predicate, message),))

    def custom_parser(self, function, /):
        """
        Decode value text with `function` instead of the codec.

        `function(text)` returns the value; returning None or Unset, or raising
        ValueError or TypeError, marks the text as malformed (ConversionError).
        """
        if not callable(function):
            raise TypeError(f"{type(self).__typename__} custom parser must be callable")
        if self._decoder is not Unset:
            raise TypeError(f"{type(self).__typename__} already has a custom parser")
        return copy.replace(self, decoder=function)

    def hint(self, text, /):
        if self._metavar is not Unset:
            raise TypeError(f"{type(self).__typename__} already has a hint")
        return copy.replace(self, metavar=_sanitize_text(type(self), "hint", text))

    @property
    def typename(self):
        """
        Name shown between angle brackets in help: the custom hint, else the codec name.
        """
        return coalesce(self._metavar, self._codec.name)

    @property
    def schema(self):
        return Schema((Field(self._field, self._codec),))

    def decode(self, text, /):
        """
        Decode the matched text, returning Unset when it is malformed.
        """
        if self._decoder is Unset:
            return self._codec.parse(text)
        try:
            value = self._decoder(text)
        except (ValueError, TypeError):
            return Unset
        return Unset if value is None else value

    def resolve(self, text, /):
        if not text and self._implicit is not Unset:
            return Outcome.success(copy.deepcopy(self._implicit))
        if (value := self.decode(text)) is Unset:
            return Outcome.failure(ConversionError.of(text, self._codec.name, argument=self._field))
        for predicate, message in self._checks:
            if not predicate(value):
                return Outcome.failure(ValidationError.of(
                    type(self).__typename__, self._label(), text, message, argument=self._field
                ))
        return Outcome.success(value)

    def resolve_absent(self):
        if self._default is not Unset:
            return Outcome.success(copy.deepcopy(self._default))
        return Outcome.failure(self._missing())

    def _label(self):
        raise NotImplementedError

    def _missing(self):
        raise NotImplementedError

    def _render(self, indentation, head, /):
        out = _indentation(type(self), indentation) + head
        if self._description is not Unset:
            out = pad(out, _COLUMN) + self._description
        if self._default is not Unset:
            out += "\n" + " " * _COLUMN + "By default: " + self._codec.to_string(self._default)
        if self._implicit is not Unset:
            out += "\n" + " " * _COLUMN + "Implicitly: " + self._codec.to_string(self._implicit)
        return out + "\n"


class Option(Leaf):
    """
    Named option recognized by its patterns.

    A token belongs to the option when it starts with one of its patterns and is
    either exactly the pattern (bare mention, empty value text) or continues
    with '=' followed by the value text. Patterns are tried in the order they
    were attached; the first match wins.
    """
    __introspectable__ = (
        "field",
        "codec",
        "patterns",
        "description",
        "default",
        "implicit",
        "metavar",
        "checks",
        "decoder",
    )

    def __new__(cls, value_type, field, /):
        self = super().__new__(cls, value_type, field)
        self._patterns = ()
        return self

    def pattern(self, *patterns):
        r"""
        Add one or more pattern aliases.

        Accepted forms: "-x", "-long", "-long-name", "--long" and "--long-name"
        (unicode letters are allowed).
        """
        if not patterns:
            raise TypeError(f"{type(self).__typename__} must specify at least one pattern")
        accumulated = list(self._patterns)
        for pattern in patterns:
            if not isinstance(pattern, str):
                raise TypeError(f"{type(self).__typename__} patterns must be strings")
            elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", pattern):
                raise ValueError(
                    f"{type(self).__typename__} patterns must be valid shell-style option names, got {pattern!r}"
                )
            elif pattern in accumulated:
                raise ValueError(f"{type(self).__typename__} patterns cannot contain duplicates")
            accumulated.append(pattern)
        return copy.replace(self, patterns=tuple(accumulated))

    def __getitem__(self, patterns):
        if isinstance(patterns, tuple):
            return self.pattern(*patterns)
        return self.pattern(patterns)

    def implicitly(self, value, /):
        if self._implicit is not Unset:
            raise TypeError(f"{type(self).__typename__} already has an implicit value")
        return copy.replace(self, implicit=self._convert("implicit", value))

    def match(self, token, /):
        """
        Return the value text carried by `token`, or Unset when it is not ours.
        """
        for pattern in self._patterns:
            if not token.startswith(pattern):
                continue
            rest = token[len(pattern):]
            if not rest:
                return ""
            if rest.startswith("="):
                return rest[1:]
        return Unset

    def _label(self):
        return ", ".join(self._patterns)

    def _missing(self):
        return MissingOptionError.of(self._patterns, argument=self._field)

    def _parse(self, tokens, /):
        from .compounds import CompoundOption
        return CompoundOption((self,))._parse(tokens)

    def to_string(self, indentation=0, /):
        return self._render(indentation, f"{self._label()} <{self.typename}>")


class Flag(Option):
    """
    Boolean switch: false when absent, true on a bare mention.

    Equivalent to Option(bool, field).default_to(False).implicitly(True); an
    explicit "-v=false" is still accepted.
    """

    def __new__(cls, field, /):
        self = super().__new__(cls, bool, field)
        self._default = False
        self._implicit = True
        return self


class Argument(Leaf):
    """
    Positional argument, resolved purely by position.

    `name` is the display name used in help and in missing-argument faults; it
    defaults to the field.
    """
    __introspectable__ = (
        "field",
        "name",
        "codec",
        "description",
        "default",
        "metavar",
        "checks",
        "decoder",
    )

    def __new__(cls, value_type, field, /, name=Unset):
        self = super().__new__(cls, value_type, field)
        self._name = _sanitize_text(cls, "name", coalesce(name, self._field))
        return self

    def _label(self):
        return self._name

    def _missing(self):
        return MissingArgumentError.of(self._name, argument=self._field)

    def _parse(self, tokens, /):
        from .compounds import CompoundArgument
        return CompoundArgument((self,))._parse(tokens)

    def to_string(self, indentation=0, /):
        return self._render(indentation, f"[{self._name}] <{self.typename}>")


__all__ = (
    # Classes
    "Leaf",
    "Option",
    "Flag",
    "Argument",
)
