"""
cmdtree utilities (internal helpers shared by the tree, resolver and faults)

Overview
- UnsetType / Unset
  • Singleton sentinel for “argument not provided”, distinct from None (None is a
    legitimate executor value meaning “host-only command”).

- coalesce(value, default=None)
  • Replace Unset with a concrete default; every other value, falsey or not, passes through.

- rename(callable, name) / @rename("name")
  • Give generated methods stable __name__/__qualname__ for readable tracebacks.

- mirror("attr")
  • Read-only property factory publishing a private backing field (self._attr); containers
    are handed out as fresh copies so the tree cannot be mutated through its public surface.

Quick examples
    >>> coalesce(Unset, " ")
    ' '
    >>> coalesce(None, " ") is None
    True
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker used by Command construction.

    Command(...) needs three states for most parameters: a value, an explicit
    None (e.g., executor=None for a host-only command) and “the caller said
    nothing” (delimiter and runtime flags a child must inherit). Unset is the
    third state.

    - bool(Unset) is False, repr(Unset) is "Unset".
    - UnsetType() always returns the same object and cannot be subclassed.
    - `str | Unset` builds a union usable with isinstance() (see CommandException).
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Replace Unset with default; return anything else untouched.

    This is how roots pick their settings:
    - coalesce(Unset, " ")   -> " "    (no delimiter given, use the default)
    - coalesce(",", " ")     -> ","
    - coalesce("", " ")      -> ""     (kept, and later rejected as an empty delimiter)
    - coalesce(None, " ")    -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Name a generated callable, directly or as a decorator.

    CommandType builds __repr__/__rich_repr__ inside its __new__; renaming them
    keeps tracebacks pointing at "__repr__" rather than "CommandType.__new__.<locals>".

    - rename(function, "__repr__") -> function
    - @rename("__repr__")

    Raises TypeError for a non-callable, a non-string name, a callable whose
    names are read-only, or any other number of arguments.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _snapshot(object):
    """
    Detached copy of a backing field.

    A command's children registry comes back as a new dict in attachment
    order, with the child commands themselves shared (commands are not
    containers). Adding or popping keys on the copy leaves the tree alone.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_snapshot, object))
    elif isinstance(object, Mapping):
        return {key: _snapshot(value) for key, value in object.items()}
    elif isinstance(object, Set):
        return set(map(_snapshot, object))
    return object


def mirror(name, /):
    """
    Read-only property over the private attribute "_{name}".

    CommandType installs one per entry of __introspectable__, so that
    command.children, command.name and command.executor cannot be assigned.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _snapshot(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()
"""
The “not provided” marker (see UnsetType).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
