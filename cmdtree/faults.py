"""
cmdtree faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the tree can
  report. Codes are grouped by domain (construction, dispatch) so logs and
  searches stay predictable.
- CommandException: base type carrying message + options; knows how to render
  itself with rich (header, one-sentence body, a single hint).
- trigger(): central entry point to surface a fault (echoing it in shell mode,
  then raising it to the caller).

Integration
- Construction code reports InvalidConfigurationError / DuplicatedCommandError.
- Command.execute() reports NoExecutorError / ExecutorFailedError.
- Faults always propagate to the immediate caller; deciding to exit the process
  belongs to the host application.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the tree (stable identifiers).

    grouping
    - construction (2110x)
      • INVALID_CONFIGURATION, DUPLICATED_COMMAND
    - dispatch (2111x/2112x)
      • NO_EXECUTOR, EXECUTOR_FAILED

    normalize() lets the host remap codes to its own labels while the numeric
    identifiers stay stable.
    """
    # --- construction errors (21xxx) ---
    INVALID_CONFIGURATION = 21101
    DUPLICATED_COMMAND    = 21102

    # --- dispatch errors (21xxx) ---
    NO_EXECUTOR           = 21111
    EXECUTOR_FAILED       = 21121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base class of every fault raised by the tree.

    options (read-only mapping)
    - title, code, hint: copy shown by the renderer.
    - tool: the command where the fault was detected.
    - route: delimiter-joined names of the command involved.
    - shell, fancy, colorful: runtime flags copied from the tree settings.
    - anything else is fault-specific payload (argument, suggestions, cause, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        root = getattr(self.options.get("tool"), "root", None)
        prog = text(getattr(main, "__prog__", getattr(root, "name", "") or "cmdtree"), styler("prog-name"))

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", "fault")).title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        if hint := self.options.get("hint"):
            body = Group(message, Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
        else:
            body = Group(message)

        if fancy:
            return Panel(body, title=header, title_align="left", width=None)

        return Group(header, *body.renderables)

    def __trigger__(self) -> None:
        if self.options.get("shell", False):
            console.print(self)
        raise self from self.options.get("cause")

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidConfigurationError(CommandException, ValueError): ...
class DuplicatedCommandError(InvalidConfigurationError): ...
class NoExecutorError(CommandException): ...


class ExecutorFailedError(CommandException):
    @property
    def cause(self):
        """the exception raised by the executor, unchanged."""
        return self.options.get("cause")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode the fault is first printed to stderr via rich; it is raised either way.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "CommandException",
    "InvalidConfigurationError",
    "DuplicatedCommandError",
    "NoExecutorError",
    "ExecutorFailedError",
    "FaultCode",
    "trigger",
)
