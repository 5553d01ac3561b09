"""
Clasp utilities shared by the parser modules.

Contents
- UnsetType / Unset
  • The "no value attached" marker. Leaves start every optional capability
    (default, implicit value, hint, description, decoder) as Unset, so a
    default of None, 0 or "" stays a real default.
  • Falsy, printed as "Unset", a single instance per process, final.

- coalesce(object, default=None)
  • Unset becomes `default`; anything else (falsy values included) is kept.

- rename(callable, name) / @rename("name")
  • Give generated methods readable names in tracebacks and reprs.

- mirror("attr")
  • Read-only property over self._attr. Containers are handed out as copies
    so a caller cannot edit a parser through its introspection.

- pad(text, width)
  • Help column alignment; a head longer than the column is kept whole.

Examples
    >>> coalesce(Unset, 1920)
    1920
    >>> coalesce(0, 1920)
    0
    >>> pad("-w <int>", 12)
    '-w <int>    '
"""
import builtins
import threading
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    UnsetType() always returns the same object, including under concurrent
    first use, and survives copy, deepcopy and pickle as itself. The class
    takes part in PEP 604 unions (`str | Unset`) so isinstance checks read
    like the annotations.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        # pickled by name, resolved back to the module-level instance
        return "Unset"


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when it is Unset.
    """
    if object is Unset:
        return default
    return object


def rename(*parameters):
    """
    Set __name__ and __qualname__ of a callable.

    rename(function, "name") renames and returns the function;
    rename("name") returns a decorator doing the same.

    Raises
    - TypeError: on a wrong number of arguments, a non-string name, or a
      callable whose names cannot be assigned.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("@rename() argument must be a string")

        def decorator(function):
            return rename(function, name)

        return rename(decorator, "rename")

    if len(parameters) != 2:
        raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))

    function, name = parameters
    if not builtins.callable(function):
        raise TypeError("rename() first argument must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() second argument must be a string")
    try:
        function.__name__ = function.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError("rename() first argument must be a updatable callable") from None
    return function


def _immortalize(object):
    """
    Copy `object` when it is a container, recursively; Unset reads as None.

    Records (namedtuples) are immutable and returned unchanged; other tuples
    stay tuples, other sequences become lists.
    """
    match object:
        case tuple() if hasattr(object, "_fields"):
            return object
        case tuple():
            return tuple(_immortalize(item) for item in object)
        case str() | bytes():
            return object
        case Sequence():
            return [_immortalize(item) for item in object]
        case Mapping():
            return {key: _immortalize(value) for key, value in object.items()}
        case Set():
            return {_immortalize(item) for item in object}
    return coalesce(object)


def mirror(name, /):
    """
    Read-only property returning a copy of `self._<name>` (see _immortalize).

    Example
        class Option:
            patterns = mirror("patterns")  # reads self._patterns
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    attribute = "_" + name

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, attribute))

    return property(getter)


def pad(text, width, /):
    """
    Left-justify `text` to `width` columns without truncating it.
    """
    return text.ljust(width)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pad",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
