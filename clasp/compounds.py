"""
Clasp aggregate combinators.

What this module provides
- CompoundOption: unordered resolution of named options.
- CompoundArgument: ordered resolution of positional arguments.
- CompoundParser: positional arguments followed by options, split at the first
  token starting with '-'.

Each aggregate produces one record (see results.record_type) holding one field
per leaf, in declaration order (arguments first for CompoundParser).

Composition
- option | option         -> CompoundOption
- argument | argument     -> CompoundArgument
- any mix of the above    -> CompoundParser
Leaves and aggregates flatten, so `a | b | c` and `a | (b | c)` build the same
parser; arguments keep their left-to-right order.

Declaration checks
- Field names are unique across the whole aggregate.
- Every option carries at least one pattern.
- Positional arguments with a default are trailing: an argument without a
  default cannot follow one that has a default.
"""
from .arguments import Argument, Option
from .faults import MissingOptionError, TooManyArgumentsError, UnrecognizedArgumentError
from .logs import logger
from .parsers import Parser, _indentation, composer
from .results import Outcome, record_type
from .utils import *


def _sanitize_fields(cls, leaves, /):
    fields = set()
    for leaf in leaves:
        if leaf.field in fields:
            raise ValueError(f"{cls.__typename__} fields cannot contain duplicates, got {leaf.field!r} twice")
        fields.add(leaf.field)


def _first_failure(outcomes, /):
    for outcome in outcomes:
        if not outcome:
            return outcome
    return Unset


class CompoundOption(Parser):
    """
    Unordered collection of options.

    Algorithm
    - Tokens are scanned in input order. Each token is offered to every
      still-unresolved option in declaration order; the first one matching it
      records its resolution. A token matched only by options that are already
      resolved is ignored (the first mention of an option wins).
    - A token matched by no option fails the parse with UnrecognizedArgumentError.
    - Options never mentioned fall back to their default; the first one without
      a default (declaration order) reports MissingOptionError. Otherwise the
      first failed resolution (declaration order) is reported.
    """
    __introspectable__ = ("options",)

    def __new__(cls, options, /):
        self = super().__new__(cls)
        options = tuple(options)
        if not options:
            raise ValueError(f"{cls.__typename__} must contain at least one option")
        for option in options:
            if not isinstance(option, Option):
                raise TypeError(f"{cls.__typename__} members must be options")
            if not option.patterns:
                raise TypeError(f"{cls.__typename__} option {option.field!r} must have at least one pattern")
        _sanitize_fields(cls, options)
        self._options = options
        return self

    @property
    def schema(self):
        return sum((option.schema for option in self._options[1:]), self._options[0].schema)

    def _parse(self, tokens, /):
        slots = [Unset] * len(self._options)

        for token in tokens:
            recognized = False
            for index, option in enumerate(self._options):
                if (text := option.match(token)) is Unset:
                    continue
                recognized = True
                if slots[index] is Unset:
                    slots[index] = option.resolve(text)
                    break
            else:
                if not recognized:
                    return Outcome.failure(UnrecognizedArgumentError.of(token))
                logger.debug("%s ignoring repeated option %r", type(self).__typename__, token)

        for index, option in enumerate(self._options):
            if slots[index] is Unset:
                slots[index] = option.resolve_absent()

        for outcome in slots:
            if not outcome and isinstance(outcome.fault, MissingOptionError):
                return outcome
        if (failure := _first_failure(slots)) is not Unset:
            return failure
        return Outcome.success(record_type(self.schema)(*(outcome.unwrap() for outcome in slots)))

    def to_string(self, indentation=0, /):
        return "".join(option.to_string(indentation) for option in self._options)


class CompoundArgument(Parser):
    """
    Ordered collection of positional arguments.

    Given N arguments and M tokens: more tokens than arguments fails with
    TooManyArgumentsError; otherwise argument i resolves token i, or falls back
    to its default when i >= M. The first failure in index order is reported.
    """
    __introspectable__ = ("arguments",)

    def __new__(cls, arguments, /):
        self = super().__new__(cls)
        arguments = tuple(arguments)
        if not arguments:
            raise ValueError(f"{cls.__typename__} must contain at least one argument")
        defaulted = Unset
        for argument in arguments:
            if not isinstance(argument, Argument):
                raise TypeError(f"{cls.__typename__} members must be arguments")
            if argument._default is not Unset:
                defaulted = argument
            elif defaulted is not Unset:
                raise ValueError(
                    f"{cls.__typename__} argument {argument.name!r} without a default cannot follow "
                    f"argument {defaulted.name!r} with a default"
                )
        _sanitize_fields(cls, arguments)
        self._arguments = arguments
        return self

    @property
    def schema(self):
        return sum((argument.schema for argument in self._arguments[1:]), self._arguments[0].schema)

    def _parse(self, tokens, /):
        if len(tokens) > len(self._arguments):
            return Outcome.failure(TooManyArgumentsError.of(len(tokens), len(self._arguments)))

        outcomes = [
            argument.resolve(tokens[index]) if index < len(tokens) else argument.resolve_absent()
            for index, argument in enumerate(self._arguments)
        ]
        if (failure := _first_failure(outcomes)) is not Unset:
            return failure
        return Outcome.success(record_type(self.schema)(*(outcome.unwrap() for outcome in outcomes)))

    def to_string(self, indentation=0, /):
        return "".join(argument.to_string(indentation) for argument in self._arguments)


class CompoundParser(Parser):
    """
    Positional arguments followed by options.

    The token list is split at the first token starting with '-': everything
    before goes to the arguments, everything from there on to the options.
    Arguments resolve first, so their failures are reported before option
    failures. A negative number therefore starts the option part.
    """
    __introspectable__ = ("arguments", "options")

    def __new__(cls, arguments, options, /):
        self = super().__new__(cls)
        if not isinstance(arguments, CompoundArgument):
            raise TypeError(f"{cls.__typename__} arguments must be a compound-argument")
        if not isinstance(options, CompoundOption):
            raise TypeError(f"{cls.__typename__} options must be a compound-option")
        _sanitize_fields(cls, arguments._arguments + options._options)
        self._arguments = arguments
        self._options = options
        return self

    @property
    def schema(self):
        return self._arguments.schema + self._options.schema

    def _parse(self, tokens, /):
        split = next((index for index, token in enumerate(tokens) if token.startswith("-")), len(tokens))

        if not (arguments := self._arguments._parse(tokens[:split])):
            return arguments
        if not (options := self._options._parse(tokens[split:])):
            return options
        return Outcome.success(record_type(self.schema)(*arguments.unwrap(), *options.unwrap()))

    def to_string(self, indentation=0, /):
        spaces = _indentation(type(self), indentation)
        return (
            spaces + "Arguments:\n" +
            self._arguments.to_string(indentation + 2) +
            "\n" +
            spaces + "Options:\n" +
            self._options.to_string(indentation + 2)
        )


def _members(parser, /):
    """
    Internal: flatten a leaf or aggregate into its (arguments, options) leaves.
    """
    match parser:
        case Option():
            return (), (parser,)
        case Argument():
            return (parser,), ()
        case CompoundOption():
            return (), parser._options
        case CompoundArgument():
            return parser._arguments, ()
        case CompoundParser():
            return parser._arguments._arguments, parser._options._options
    return Unset


@composer
def _compose_aggregates(left, right, /):
    if (first := _members(left)) is Unset or (second := _members(right)) is Unset:
        return NotImplemented
    arguments = first[0] + second[0]
    options = first[1] + second[1]
    if not arguments:
        return CompoundOption(options)
    if not options:
        return CompoundArgument(arguments)
    return CompoundParser(CompoundArgument(arguments), CompoundOption(options))


__all__ = (
    # Classes
    "CompoundOption",
    "CompoundArgument",
    "CompoundParser",
)
