"""
Clasp help rendering with rich.

render() turns the plain help text of any parser (parser.to_string()) into a
rich renderable: option patterns, value hints, positional names, command names,
section titles and the "By default:" / "Implicitly:" labels are highlighted.
The help-* entries of the fault palette drive the styling, so a __styles__
mapping in __main__ restyles faults and help alike.

print_help() prints that renderable to a console (stdout by default).
"""
import re

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .commands import Command, CommandSelector, CommandWithImplicitCommand, CommandWithSharedOptions
from .faults import _palette, _program
from .parsers import Parser
from .utils import *


def _command_names(parser, /):
    match parser:
        case Command():
            return (parser.name,)
        case CommandSelector():
            return parser.names
        case CommandWithSharedOptions() | CommandWithImplicitCommand():
            return parser.commands.names
    return ()


def render(parser, /, *, prog=Unset, fancy=False, colorful=True):
    """
    Build a rich renderable for the help text of `parser`.

    Options
    - prog: program name used as the panel title (defaults to __prog__ in
      __main__, then to the script name).
    - fancy: wrap the text in a titled rich Panel.
    - colorful: apply the palette; when False the plain text is kept as is.
    """
    if not isinstance(parser, Parser):
        raise TypeError("render() argument must be a parser")

    styles = _palette()
    text = Text(parser.to_string().rstrip("\n"))

    if colorful:
        text.highlight_regex(r"(?m)^ *[A-Z][A-Za-z ]*:$", styles["help-section"])
        text.highlight_regex(r"(?<![\w-])--?[^\W\d_](?:-?[^\W_]+)*", styles["help-pattern"])
        text.highlight_regex(r"\[[^\[\]\n]+\](?= <)", styles["help-argument"])
        text.highlight_regex(r"<[^<>\n]+>", styles["help-hint"])
        text.highlight_regex(r"By default:|Implicitly:", styles["help-label"])
        if names := _command_names(parser):
            expression = re.compile(r"(?m)^ *(%s)(?=\s|$)" % "|".join(map(re.escape, names)))
            for match in expression.finditer(text.plain):
                text.stylize(styles["help-command"], *match.span(1))

    if not fancy:
        return text

    title = coalesce(prog, _program())
    return Panel(text, title=Text(title, styles["help-prog"] if colorful else ""), title_align="left")


def print_help(parser, /, *, console=Unset, **options):
    """
    Print the help of `parser`; options are forwarded to render().
    """
    console = coalesce(console, Console())
    console.print(render(parser, **options))


__all__ = (
    "render",
    "print_help",
)
