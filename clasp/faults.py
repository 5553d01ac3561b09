"""
Clasp parse faults.

A parse call that fails produces exactly one fault: an instance of one of the
CommandException subclasses below, returned inside an Outcome. Faults are only
raised by Outcome.unwrap() and trigger().

Each fault kind has
- a stable FaultCode (grouped by domain: routing 111xx, options 112xx,
  positional arguments 113xx, values 114xx),
- a short title and a one-line hint,
- an of(...) constructor building the printable message from the offending
  token, type name, pattern set or validation message, and keeping that
  context readable as attributes (fault.token, fault.patterns, ...).

Presentation
- __rich__ renders "[ prog — code | Title ]", the message and a "→ hint" line,
  plus host documentation when getdoc() has any; `fancy` wraps the body in a
  panel and `colorful=False` drops the styling.
- Runtime options (shell, fancy, colorful, prog, ratio) are merged into a copy
  of the fault by trigger().

Host hooks (looked up on __main__)
- __codes__: FaultCode -> label used instead of the numeric code.
- __docs__: FaultCode -> documentation line.
- __styles__: style key -> rich style, overriding the palette.
- __prog__: program name for the header.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType, coalesce

console = Console(stderr=True)

_PALETTE = {
    # fault header
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "error-title": "bold #FF4DA6",

    # fault body
    "error-message": "#C8C8D0",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
    "docs": "underline #00E5FF dim",

    # help text
    "help-prog": "bold #E6E6F0",
    "help-section": "bold #FF4DA6",
    "help-pattern": "bold #00E5FF",
    "help-argument": "bold #00E5FF",
    "help-command": "bold #9CE19C",
    "help-hint": "#C8C8D0 italic",
    "help-label": "#9CE19C dim",
}


def _palette():
    return defaultdict(str, _PALETTE | getattr(__import__("__main__"), "__styles__", {}))


def _program():
    main = __import__("__main__")
    return getattr(main, "__prog__", os.path.basename(sys.argv[0]) or "clasp")


class FaultCode(IntEnum):
    """
    Stable identifiers of the parse faults.
    """
    # routing
    EXPECTED_COMMAND            = 11101
    UNRECOGNIZED_COMMAND        = 11102

    # options
    UNRECOGNIZED_ARGUMENT       = 11201
    MISSING_OPTION              = 11202

    # positional arguments
    MISSING_ARGUMENT            = 11301
    TOO_MANY_ARGUMENTS          = 11302

    # values
    CONVERSION_FAILURE          = 11401
    VALIDATION_FAILURE          = 11402

    def normalize(self):
        """
        Label of this code: the host's __codes__ entry, else the number as text.
        """
        codes = getattr(__import__("__main__"), "__codes__", {})
        return str(codes.get(self, self.value))


class CommandException(Exception):
    """
    Base class of the parse faults.

    `options` holds the context given by of() together with the runtime
    options merged by trigger(); both read as attributes.
    """
    title = "parse error"
    code = Unset
    hint = Unset

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | UnsetType):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, "")

    def __getattr__(self, name):
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return (self.message, dict(self.options)) == (other.message, dict(other.options))

    def __hash__(self):
        return hash((type(self), self.message))

    def __replace__(self, /, **changes):
        return type(self)(self.message, **(dict(self.options) | changes))

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __rich__(self):
        styles = _palette()
        colorful = self.options.get("colorful", True)

        def styled(fragment, key):
            return Text(str(fragment), styles[key] if colorful else "")

        code = type(self).code
        header = Text.assemble(
            "[ ", styled(self.options.get("prog", _program()), "prog-name"),
            " — ", styled(code.normalize() if code else "-", "code"),
            " | ", styled(self.title.title(), "error-title"),
            " ]",
        )
        body = [
            styled(self, "error-message"),
            Text.assemble(styled(" → ", "hint-arrow"), styled(coalesce(self.hint, ""), "hint")),
        ]
        if code and (docs := getdoc(code)):
            body.append(styled(docs, "docs"))

        if not self.options.get("fancy", False):
            return Group(header, *body)

        width = None
        if (ratio := self.options.get("ratio")) is not None:
            width = int((console.width - 4) * ratio)
        return Panel(Group(*body), title=header, title_align="left", width=width)


class UnrecognizedArgumentError(CommandException):
    title = "unrecognized argument"
    code = FaultCode.UNRECOGNIZED_ARGUMENT
    hint = "check the spelling; options are written as name or name=value"

    @classmethod
    def of(cls, token, /):
        return cls('unrecognized argument "%s"' % token, token=token)


class ConversionError(CommandException):
    title = "conversion error"
    code = FaultCode.CONVERSION_FAILURE
    hint = "use a value of the declared type"

    @classmethod
    def of(cls, text, typename, /, argument=Unset):
        return cls('could not convert argument "%s" to type %s' % (text, typename),
                   text=text, typename=typename, argument=argument)


class ValidationError(CommandException):
    title = "validation error"
    code = FaultCode.VALIDATION_FAILURE
    hint = "use a value satisfying the constraint above"

    @classmethod
    def of(cls, kind, label, text, reason, /, argument=Unset):
        return cls('validation check failed for %s %s with argument "%s":\n\t%s' % (kind, label, text, reason),
                   text=text, reason=reason, argument=argument)


class MissingOptionError(CommandException):
    title = "missing option"
    code = FaultCode.MISSING_OPTION
    hint = "this option has no default; give it as name=value"

    @classmethod
    def of(cls, patterns, /, argument=Unset):
        return cls("no matching argument for option %s" % ", ".join(patterns),
                   patterns=tuple(patterns), argument=argument)


class MissingArgumentError(CommandException):
    title = "missing argument"
    code = FaultCode.MISSING_ARGUMENT
    hint = "this argument has no default; give it positionally"

    @classmethod
    def of(cls, name, /, argument=Unset):
        return cls("missing argument %s" % name, name=name, argument=argument)


class TooManyArgumentsError(CommandException):
    title = "too many arguments"
    code = FaultCode.TOO_MANY_ARGUMENTS
    hint = "remove the extra positional arguments"

    @classmethod
    def of(cls, provided, expected, /):
        return cls("too many arguments: provided %d arguments, program expects %d" % (provided, expected),
                   provided=provided, expected=expected)


class ExpectedCommandError(CommandException):
    title = "expected command"
    code = FaultCode.EXPECTED_COMMAND

    @classmethod
    def of(cls, commands, /):
        return cls("expected command", commands=tuple(commands))

    @property
    def hint(self):
        if commands := self.options.get("commands", ()):
            return "use one of: %s" % ", ".join(commands)
        return "give one of the available commands"


class UnrecognizedCommandError(CommandException):
    title = "unrecognized command"
    code = FaultCode.UNRECOGNIZED_COMMAND

    @classmethod
    def of(cls, token, commands, /):
        return cls('unrecognized command "%s"' % token, token=token, commands=tuple(commands))

    @property
    def hint(self):
        return "use one of: %s" % ", ".join(self.options.get("commands", ()))


def trigger(fault, /, **options):
    """
    Surface `fault` with runtime options merged in.

    Shell mode (shell=True) prints the fault to stderr and exits with status 1;
    otherwise the merged fault is raised.

    Raises
    - TypeError: when `fault` does not implement __trigger__ and __replace__.
    """
    if not callable(getattr(fault, "__trigger__", None)) or not callable(getattr(fault, "__replace__", None)):
        raise TypeError("trigger() argument must implement __trigger__ and __replace__")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    Host documentation for `code` from __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "CommandException",
    "UnrecognizedArgumentError",
    "ConversionError",
    "ValidationError",
    "MissingOptionError",
    "MissingArgumentError",
    "TooManyArgumentsError",
    "ExpectedCommandError",
    "UnrecognizedCommandError",
    "FaultCode",
    "trigger",
    "getdoc",
)
