"""
Clasp command layer: route a token list to one of several parsers.

What this module provides
- Command(name, description, parser): a parser selected by a leading token
  equal to `name`.
- CommandSelector(commands): ordered, non-empty set of commands with distinct
  names; its result is a Variant(index, command, value).
- SharedOptions(parser) | command: options accepted before the command token
  (CommandWithSharedOptions, result record fields `shared` and `command`).
- command | parser: an implicit command, used when the first token names no
  command (CommandWithImplicitCommand).
- invoke(parser, prompt): process-level runner that parses argv (or a prompt)
  and surfaces faults the way a shell user expects.

Composition
- command | command, selectors included     -> CommandSelector
- SharedOptions(parser) | command           -> CommandWithSharedOptions
- CommandWithSharedOptions | command        -> one more command
- command or selector | any other parser    -> CommandWithImplicitCommand
- CommandWithImplicitCommand | command      -> one more explicit command
- CommandWithImplicitCommand | parser       -> parser composed into the fallback

Quick start
    from clasp import Command, Option, Argument, invoke

    open_window = Command("open-window", "Open a window", Option(int, "width")["-w"].default_to(1920))
    fetch_url = Command("fetch-url", "Fetch a resource", Option(str, "url")["--url"])

    if __name__ == "__main__":
        print(invoke(open_window | fetch_url))
"""
import functools
import shlex
import sys
from collections.abc import Iterable

from .arguments import Option
from .faults import ExpectedCommandError, UnrecognizedCommandError, trigger
from .logs import logger
from .parsers import Parser, _indentation, composer
from .results import Field, Outcome, Schema, Union, Variant, either, record_type
from .utils import *

_COLUMN = 25


def _sanitize_parser(cls, role, parser, /):
    if isinstance(parser, Option) and not parser.patterns:
        raise TypeError(f"{cls.__typename__} {role} option {parser.field!r} must have at least one pattern")
    return parser


class Command(Parser):
    """
    A named parser.

    A command only matches a token list whose first token equals its name
    (exact equality, never a prefix). Used on its own, it parses like a
    selector holding this single command.
    """
    __introspectable__ = ("name", "description", "parser")

    def __new__(cls, name, description, parser, /):
        self = super().__new__(cls)
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} name must be a string")
        elif not name or name != name.strip() or any(character.isspace() for character in name):
            raise ValueError(f"{cls.__typename__} name must be a non-empty word, got {name!r}")
        if not isinstance(description, str):
            raise TypeError(f"{cls.__typename__} description must be a string")
        if not isinstance(parser, Parser) or isinstance(parser, SharedOptions):
            raise TypeError(f"{cls.__typename__} parser must be a parser")
        self._name = name
        self._description = description.strip()
        self._parser = _sanitize_parser(cls, "parser", parser)
        return self

    def match(self, token, /):
        return token == self._name

    @property
    def schema(self):
        return Union((self._parser.schema,))

    def _parse(self, tokens, /):
        return CommandSelector((self,))._parse(tokens)

    def to_string(self, indentation=0, /):
        return pad(_indentation(type(self), indentation) + self._name, _COLUMN) + self._description + "\n"


class CommandSelector(Parser):
    """
    Ordered, non-empty set of commands with pairwise distinct names.

    Parsing
    - No token: ExpectedCommandError.
    - First token naming no command: UnrecognizedCommandError.
    - Otherwise the named command's parser receives the remaining tokens (the
      command token is stripped) and its value is tagged as
      Variant(index, name, value).
    """
    __introspectable__ = ("commands",)

    def __new__(cls, commands, /):
        self = super().__new__(cls)
        commands = tuple(commands)
        if not commands:
            raise ValueError(f"{cls.__typename__} must contain at least one command")
        names = set()
        for command in commands:
            if not isinstance(command, Command):
                raise TypeError(f"{cls.__typename__} members must be commands")
            if command.name in names:
                raise ValueError(f"{cls.__typename__} command names cannot contain duplicates, got {command.name!r}")
            names.add(command.name)
        self._commands = commands
        return self

    @property
    def names(self):
        return tuple(command.name for command in self._commands)

    @property
    def schema(self):
        return Union(command.parser.schema for command in self._commands)

    def match(self, token, /):
        return any(command.match(token) for command in self._commands)

    def _parse(self, tokens, /):
        if not tokens:
            return Outcome.failure(ExpectedCommandError.of(self.names))
        for index, command in enumerate(self._commands):
            if command.match(tokens[0]):
                logger.debug("routing %d token(s) to command %r", len(tokens) - 1, command.name)
                return command._parser._parse(tokens[1:]).map(functools.partial(Variant, index, command._name))
        return Outcome.failure(UnrecognizedCommandError.of(tokens[0], self.names))

    def to_string(self, indentation=0, /):
        return "".join(command.to_string(indentation) for command in self._commands)


class SharedOptions(Parser):
    """
    Marker for a parser accepted before the command token.

    SharedOptions(parser) | command builds a CommandWithSharedOptions; parsed
    on its own it behaves exactly like the wrapped parser.
    """
    __introspectable__ = ("parser",)

    def __new__(cls, parser, /):
        self = super().__new__(cls)
        if not isinstance(parser, Parser) or isinstance(parser, _COMMAND_LAYERS):
            raise TypeError(f"{cls.__typename__} parser must be an option or argument parser")
        self._parser = _sanitize_parser(cls, "parser", parser)
        return self

    @property
    def schema(self):
        return self._parser.schema

    def _parse(self, tokens, /):
        return self._parser._parse(tokens)

    def to_string(self, indentation=0, /):
        return self._parser.to_string(indentation)


class CommandWithSharedOptions(Parser):
    """
    Shared options followed by a command.

    The whole token list is scanned for the first token naming a command
    (ExpectedCommandError when there is none). Tokens before it go to the
    shared parser; the command token and everything after it go to the
    selector. Shared options given after the command token belong to the
    command and fail there.
    """
    __introspectable__ = ("shared", "commands")

    def __new__(cls, shared, commands, /):
        self = super().__new__(cls)
        if isinstance(shared, SharedOptions):
            shared = shared.parser
        if not isinstance(shared, Parser) or isinstance(shared, _COMMAND_LAYERS):
            raise TypeError(f"{cls.__typename__} shared must be an option or argument parser")
        if isinstance(commands, Command):
            commands = CommandSelector((commands,))
        if not isinstance(commands, CommandSelector):
            raise TypeError(f"{cls.__typename__} commands must be a command-selector")
        self._shared = _sanitize_parser(cls, "shared", shared)
        self._commands = commands
        return self

    @property
    def schema(self):
        return Schema((Field("shared", self._shared.schema), Field("command", self._commands.schema)))

    def _parse(self, tokens, /):
        for position, token in enumerate(tokens):
            if self._commands.match(token):
                break
        else:
            return Outcome.failure(ExpectedCommandError.of(self._commands.names))

        logger.debug("%s found command %r at position %d", type(self).__typename__, tokens[position], position)
        if not (shared := self._shared._parse(tokens[:position])):
            return shared
        if not (command := self._commands._parse(tokens[position:])):
            return command
        return Outcome.success(record_type(self.schema)(shared.unwrap(), command.unwrap()))

    def to_string(self, indentation=0, /):
        spaces = _indentation(type(self), indentation)
        return (
            spaces + "Shared options:\n" +
            self._shared.to_string(indentation + 2) +
            "\n" +
            spaces + "Commands:\n" +
            self._commands.to_string(indentation + 2)
        )


class CommandWithImplicitCommand(Parser):
    """
    Explicit commands plus a fallback parser.

    When the first token names an explicit command the tokens are dispatched
    exactly as by the selector. Otherwise the entire token list (nothing
    stripped) goes to the fallback, whose value is tagged with its variant index
    in the widened union and command=None. The fallback's shape is folded into
    an existing variant when a command already produces the same shape.
    """
    __introspectable__ = ("commands", "fallback")

    def __new__(cls, commands, fallback, /):
        self = super().__new__(cls)
        if isinstance(commands, Command):
            commands = CommandSelector((commands,))
        if not isinstance(commands, CommandSelector):
            raise TypeError(f"{cls.__typename__} commands must be a command-selector")
        if not isinstance(fallback, Parser) or isinstance(fallback, (*_COMMAND_LAYERS, SharedOptions)):
            raise TypeError(f"{cls.__typename__} fallback must be an option or argument parser")
        self._commands = commands
        self._fallback = _sanitize_parser(cls, "fallback", fallback)
        self._schema, (self._index,) = either(commands.schema, fallback.schema)
        return self

    @property
    def schema(self):
        return self._schema

    def _parse(self, tokens, /):
        if tokens and self._commands.match(tokens[0]):
            return self._commands._parse(tokens)
        logger.debug("%s falling back on %d token(s)", type(self).__typename__, len(tokens))
        return self._fallback._parse(tokens).map(functools.partial(Variant, self._index, None))

    def to_string(self, indentation=0, /):
        spaces = _indentation(type(self), indentation)
        return (
            spaces + "Commands:\n" +
            self._commands.to_string(indentation + 2) +
            "\n" +
            spaces + "Options:\n" +
            self._fallback.to_string(indentation + 2)
        )


_COMMAND_LAYERS = (Command, CommandSelector, CommandWithImplicitCommand)


@composer
def _compose_commands(left, right, /):
    match left, right:
        case (Command() | CommandSelector(), Command() | CommandSelector()):
            return CommandSelector(_commands(left) + _commands(right))
        case (SharedOptions(), Command() | CommandSelector()):
            return CommandWithSharedOptions(left.parser, right)
        case (CommandWithSharedOptions(), Command() | CommandSelector()):
            return CommandWithSharedOptions(left.shared, left.commands | right)
        case (CommandWithImplicitCommand(), Command() | CommandSelector()):
            return CommandWithImplicitCommand(left.commands | right, left.fallback)
        case (CommandWithImplicitCommand(), _):
            return CommandWithImplicitCommand(left.commands, left.fallback | right)
        case (Command() | CommandSelector(), _):
            return CommandWithImplicitCommand(left, right)
    return NotImplemented


def _commands(parser, /):
    if isinstance(parser, Command):
        return (parser,)
    return parser._commands


def invoke(parser, prompt=Unset, /, *, shell=True, fancy=False, colorful=True, prog=Unset):
    """
    Parse a prompt (or the process arguments) and return the parsed value.

    Parameters
    - parser: any clasp parser.
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).
    - shell, fancy, colorful, prog: presentation options forwarded to trigger().

    Behavior
    - On failure the fault is triggered: printed to stderr followed by exit
      status 1 in shell mode, raised otherwise.

    Raises
    - TypeError: when parser is not a parser or the prompt is not usable.
    """
    if not isinstance(parser, Parser):
        raise TypeError("invoke() first argument must be a parser")

    match prompt:
        case UnsetType():
            tokens = sys.argv[1:]
        case str():
            tokens = shlex.split(prompt)
        case Iterable():
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("invoke() second argument must be an iterable of strings")
        case _:
            raise TypeError("invoke() second argument must be a string or an iterable of strings")

    outcome = parser.parse(tokens)
    if not outcome:
        options = {"shell": shell, "fancy": fancy, "colorful": colorful}
        if prog is not Unset:
            options["prog"] = prog
        trigger(outcome.fault, **options)
    return outcome.unwrap()


__all__ = (
    # Classes
    "Command",
    "CommandSelector",
    "SharedOptions",
    "CommandWithSharedOptions",
    "CommandWithImplicitCommand",

    # Functions
    "invoke",
)
