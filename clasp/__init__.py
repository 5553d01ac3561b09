"""
clasp: declarative, composable command-line argument parsing.

Leaves (Option, Flag, Argument) are configured through chained capability
calls and combined with `|` into aggregates and command layers. Every parser's
parse(tokens) returns an Outcome holding a record, a Variant or exactly one
fault; to_string() renders its help.
"""
__title__ = "clasp"
__license__ = "MIT"
__version__ = "0.0.0"

from .arguments import *
from .codecs import *
from .commands import *
from .compounds import *
from .faults import *
from .logs import *
from .parsers import *
from .rendering import *
from .results import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

version_info = VersionInfo(*map(int, __version__.split(".")), "final", 0, "")

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info",
)

# Public API of every submodule, in import order
for _module in (arguments, codecs, commands, compounds, faults, logs, parsers, rendering, results):  # NOQA: F-821
    __all__ += _module.__all__
del _module
