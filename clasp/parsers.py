"""
Clasp parser contract and composition registry.

Every parser in clasp (leaves, aggregates, command layers) shares one contract:

- parse(tokens) -> Outcome
  Tokens are any iterable of strings. The outcome holds either the parsed value
  (a record, or a Variant for command layers) or exactly one fault. Parsing
  never raises for bad input; a non-string token is a caller bug and raises
  TypeError.
- to_string(indentation=0) -> str
  Deterministic help text for the declaration.
- schema
  The shape of a successful result (a Schema, or a Union for command layers).
- a | b
  Composition through the registry below. The aggregate and command modules
  register their composers at import time; the most recently registered
  composer is tried first.

ParserType (metaclass)
- Derives __typename__ from the class name ("CompoundOption" -> "compound-option")
  for declaration error messages.
- Exposes every name of __introspectable__ as a read-only property backed by
  "_<name>" (see utils.mirror).

Parser builds __repr__/__rich_repr__ from the same names.
"""
import re

from .logs import logger
from .utils import *


def _typename(name, /):
    # "CompoundOption" -> "compound-option"
    return re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()


class ParserType(type):
    """
    Metaclass of the parsers: a dashed __typename__ for messages, and one
    read-only property per name listed in the class's own __introspectable__.
    """

    def __new__(cls, name, bases, namespace, **options):
        namespace = dict(namespace, __typename__=_typename(name))
        for attribute in namespace.get("__introspectable__", ()):
            namespace[attribute] = mirror(attribute)
        return super().__new__(cls, name, bases, namespace, **options)


_composers = []


def composer(function, /):
    """
    Register a composition rule used by the `|` operator.

    A composer receives (left, right) and returns the combined parser, or
    NotImplemented when it does not handle the operand pair.
    """
    if not callable(function):
        raise TypeError("@composer must be applied to a callable")
    _composers.append(function)
    return function


def compose(left, right, /):
    """
    Combine two parsers with the most specific registered composer.

    Raises
    - TypeError: when no composer accepts the operand pair.
    """
    for function in reversed(_composers):
        if (result := function(left, right)) is not NotImplemented:
            return result
    raise TypeError(
        f"unsupported operand type(s) for |: {getattr(type(left), '__typename__', type(left).__name__)!r} "
        f"and {getattr(type(right), '__typename__', type(right).__name__)!r}"
    )


class Parser(metaclass=ParserType):
    """
    Base class of every clasp parser.

    Subclasses implement _parse(tokens) on a tuple of strings, to_string() and
    schema. Instances are immutable after construction and can be shared
    freely, including across threads.
    """
    __introspectable__ = ()

    def parse(self, tokens=(), /):
        """
        Parse a token list into an Outcome.

        Raises
        - TypeError: when tokens is a string or holds a non-string item.
        """
        if isinstance(tokens, str):
            raise TypeError(f"{type(self).__typename__} tokens must be an iterable of strings, not a string")
        tokens = tuple(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError(f"{type(self).__typename__} tokens must be strings")
        logger.debug("%s parsing %d token(s)", type(self).__typename__, len(tokens))
        return self._parse(tokens)

    def _parse(self, tokens, /):
        raise NotImplementedError

    def to_string(self, indentation=0, /):
        raise NotImplementedError

    @property
    def schema(self):
        raise NotImplementedError

    def __repr__(self):
        fields = ", ".join("%s=%r" % pair for pair in self.__rich_repr__())
        return f"{type(self).__typename__}({fields})"

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __str__(self):
        return self.to_string()

    def __or__(self, other):
        if not isinstance(other, Parser):
            return NotImplemented
        return compose(self, other)

    def __ror__(self, other):
        if not isinstance(other, Parser):
            return NotImplemented
        return compose(other, self)


def _indentation(cls, indentation, /):
    if not isinstance(indentation, int) or isinstance(indentation, bool):
        raise TypeError(f"{cls.__typename__} indentation must be an integer")
    if indentation < 0:
        raise ValueError(f"{cls.__typename__} indentation cannot be negative")
    return " " * indentation


__all__ = (
    # Classes
    "Parser",

    # Functions
    "compose",
    "composer",
)
