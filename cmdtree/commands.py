"""
cmdtree command layer: build a tree of commands and dispatch input strings into it.

What this module provides
- Command: one node of a command tree.
  • Identity (name), an optional executor, and a registry of uniquely named children.
  • A Settings record (delimiter + runtime flags) fixed at the root and shared by
    reference with every node of the tree.
  • Resolution and dispatch: execute() walks the input down the tree and calls the
    deepest matched executor with the leftover text.
  • Rendering: render()/str() for plain text, __rich__ for a rich Tree.

- Factories and helpers:
  • root(delimiter): host-only root with an empty name.
  • command(...): create a root Command or a decorator that produces one.
  • invoke(obj, prompt): convenience runner reading sys.argv when no prompt is given.

Quick start
    from cmdtree import root

    tree = root(" ")

    @tree.command
    def help(argument):
        print(f'You requested help for "{argument}"')

    @help.command(name="deep")
    def deep(argument):
        print(f'Deep help for "{argument}"')

    tree.execute("help cmdtree")                # You requested help for "cmdtree"
    tree.execute("help deep cmdtree internals") # Deep help for "cmdtree internals"

Design notes
- Children only hold a weak reference to their parent; the root owns the tree.
- Duplicate child names are rejected, children are kept in attachment order.
- Faults are raised to the caller; in shell mode they are echoed through rich first.
"""
import difflib
import functools
import operator
import re
import sys
import weakref
from collections.abc import Iterable
from typing import NamedTuple

from .faults import *
from .parsing import resolve, tokenize
from .rendering import render, tree
from .utils import *


class Settings(NamedTuple):
    """
    Tree-wide configuration, created once at the root and shared by every node.

    - delimiter: token separator used to tokenize input for the whole tree.
    - shell: echo faults to stderr through rich before raising them.
    - fancy: render faults inside a panel.
    - colorful: style fault and tree output.
    """
    delimiter: str
    shell: bool = False
    fancy: bool = False
    colorful: bool = False


class CommandType(type):
    """
    Metaclass giving commands stable, readable representations.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens) for
      consistent labels in fault messages.
    - Expose every name listed in __introspectable__ as a read-only property
      backed by "_{name}" (see mirror()).
    - Provide __repr__/__rich_repr__ built from __displayable__ (falling back to
      __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - command(name='help', delimiter=' ', executor=<function help ...>, children={})
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _configure(cls, parent, delimiter, shell, fancy, colorful):
    """
    Return the Settings of a new command.

    - Child mode: the parent's Settings object itself; any explicit delimiter or
      runtime flag is rejected since children cannot override them.
    - Root mode: a fresh Settings; the delimiter must be a non-empty string.
    """
    if parent is not Unset:
        if not isinstance(parent, Command):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")

        for name, value in (("delimiter", delimiter), ("shell", shell), ("fancy", fancy), ("colorful", colorful)):
            if value is not Unset:
                parent.trigger(InvalidConfigurationError(
                    "%s cannot override %r, it is inherited from the root" % (cls.__typename__, name),
                    title="invalid configuration",
                    code=FaultCode.INVALID_CONFIGURATION,
                    hint="set the delimiter and runtime flags once, when creating the root command",
                ))
        return parent._settings

    settings = Settings(
        coalesce(delimiter, " "),
        bool(coalesce(shell, False)),
        bool(coalesce(fancy, False)),
        bool(coalesce(colorful, False)),
    )
    if not isinstance(settings.delimiter, str) or not settings.delimiter:
        trigger(InvalidConfigurationError(
            "%s 'delimiter' must be a non-empty string, got %r" % (cls.__typename__, settings.delimiter),
            title="invalid configuration",
            code=FaultCode.INVALID_CONFIGURATION,
            hint="pass a separator such as ' ' when creating the root command",
        ), shell=settings.shell, fancy=settings.fancy, colorful=settings.colorful)
    return settings


def _reporter(parent, settings):
    """
    Return the callable used to surface construction faults for a new command.
    """
    if parent is not Unset:
        return parent.trigger
    return functools.partial(trigger, shell=settings.shell, fancy=settings.fancy, colorful=settings.colorful)


def _validate_name(cls, name, parent, settings):
    """
    Check a command name against the tree delimiter.

    Roots may be unnamed; children need a non-empty name that tokenization can
    produce, i.e. one that does not contain the delimiter.
    """
    report = _reporter(parent, settings)

    if not isinstance(name, str):
        message, hint = "%s name must be a string, got %r" % (cls.__typename__, name), "pass name='...'"
    elif parent is Unset:
        return name
    elif not name:
        message, hint = "%s name cannot be empty" % cls.__typename__, "only root commands may be unnamed"
    elif settings.delimiter in name:
        message = "%s name %r contains the delimiter %r" % (cls.__typename__, name, settings.delimiter)
        hint = "the name could never be matched since input is split on %r" % settings.delimiter
    else:
        return name

    report(InvalidConfigurationError(
        message,
        title="invalid configuration",
        code=FaultCode.INVALID_CONFIGURATION,
        hint=hint,
    ))


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing unique names.

    Uses setdefault to claim the slot if free; if the name is already taken by a
    different command the existing child is kept and DuplicatedCommandError is raised.
    """
    if parent is Unset or parent._children.setdefault(name := self.name, self) is self:
        return

    typeof = "subcommand" if parent.parent else "command"
    parent.trigger(DuplicatedCommandError(
        "%s name %r is already in use" % (typeof, name),
        title="duplicated command",
        code=FaultCode.DUPLICATED_COMMAND,
        route=parent.route,
        hint="pick another name or add children to the existing %r command" % name,
    ))


class Command(metaclass=CommandType):
    """
    A node of a command tree: executable, host-only, or both.

    Responsibilities
    - Identity: name, executor and children are exposed as read-only properties.
    - Composition: command() attaches uniquely named children (returned for chaining).
    - Dispatch: resolve() finds the deepest matching command, execute() runs it.
    - Rendering: render()/str() for text, __rich__ for a rich Tree.

    Lifecycle
    - Created either as a root (owning a new Settings) or as a child of an
      existing command (sharing the root Settings).
    - Never mutated afterwards, except for children being attached.
    """

    __introspectable__ = (
        "name",
        "executor",
        "children",
    )

    __displayable__ = (
        "name",
        "delimiter",
        "executor",
        "children",
    )

    @property
    def settings(self):
        """
        Tree-wide Settings; the very same object for every node of the tree.
        """
        return self._settings

    @property
    def delimiter(self):
        return self._settings.delimiter

    @property
    def parent(self):
        """
        Parent command, or None for a root (or when the root was discarded).
        """
        return self._parent() if self._parent is not None else None

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """
        Names from the root to this command joined by the delimiter (unnamed roots skipped).
        """
        return self.delimiter.join(command.name for command in self.path if command.name)

    def __new__(
            cls,
            source=None,
            /,
            parent=Unset,
            name=Unset,
            delimiter=Unset,
            *,
            shell=Unset,
            fancy=Unset,
            colorful=Unset
    ):
        """
        Construct a root command or attach a new child to parent.

        Parameters
        - source: Callable[[str], Any] | None
          The executor, called with the argument string. None makes a host-only command.
        - parent: Command | Unset
          Command to attach to. When Unset, a new tree is rooted here.
        - name: str | Unset
          Defaults to source.__name__ (or "" for a host-only command).
        - delimiter: str | Unset
          Root only; defaults to " ".
        - shell, fancy, colorful: bool | Unset
          Root only; runtime flags for fault reporting and rendering.

        Raises
        - InvalidConfigurationError: non-callable executor, empty or non-string
          delimiter, empty child name, child name containing the delimiter, or a
          child trying to override root settings.
        - DuplicatedCommandError: parent already has a child with that name.
        """
        settings = _configure(cls, parent, delimiter, shell, fancy, colorful)

        if source is not None and not callable(source):
            _reporter(parent, settings)(InvalidConfigurationError(
                "%s executor must be callable or None, got %r" % (cls.__typename__, source),
                title="invalid configuration",
                code=FaultCode.INVALID_CONFIGURATION,
                hint="pass a function taking the argument string",
            ))

        name = _validate_name(cls, coalesce(name, getattr(source, "__name__", "")), parent, settings)

        self = super().__new__(cls)
        self._name = name
        self._executor = source
        self._settings = settings
        self._children = {}
        self._parent = weakref.ref(parent) if parent is not Unset else None
        _attach_to_parent(self, parent)
        return self

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Create a child command under this command.

        Thin wrapper around the module-level command(...) factory injecting
        parent=self. Supports the same modes:
        - child = self.command(executor, name="x")
        - host = self.command(None, name="x")
        - @self.command / @self.command(name="x") decorator forms

        Returns the new child, enabling further chaining.
        """
        return command(source, self, *args, **kwargs)  # type: ignore[arg-type]

    def trigger(self, fault, /, **options):
        """
        Surface fault with this command as context and the tree runtime flags.
        """
        trigger(
            fault,
            **options,
            tool=self,
            shell=self._settings.shell,
            fancy=self._settings.fancy,
            colorful=self._settings.colorful
        )

    def resolve(self, input, /):
        """
        Walk input down from this command; see cmdtree.parsing.resolve().
        """
        return resolve(self, input)

    def execute(self, input, /):
        """
        Resolve input and call the matched command's executor with the leftover argument.

        Returns
        - Whatever the executor returns.

        Raises
        - NoExecutorError: the matched command is host-only.
        - ExecutorFailedError: the executor raised; the original exception is kept
          as the fault's cause.
        """
        command, argument, consumed = resolve(self, input)

        if command._executor is None:
            tokens = tokenize(argument, self.delimiter)
            suggestions = difflib.get_close_matches(tokens[0], command._children.keys(), 5) if tokens else []
            if suggestions:
                hint = "did you mean %r?" % suggestions[0]
            elif command._children:
                hint = "expected one of: %s" % ", ".join(command._children)
            else:
                hint = "give %s an executor or subcommands" % (repr(command.route) if command.route else "the root command")
            command.trigger(NoExecutorError(
                "command %r has no executor" % command.route if command.route else "root command has no executor",
                title="no executor",
                code=FaultCode.NO_EXECUTOR,
                route=command.route,
                argument=argument,
                consumed=consumed,
                suggestions=suggestions,
                hint=hint,
            ))

        try:
            return command._executor(argument)
        except Exception as exception:
            command.trigger(ExecutorFailedError(
                "command %r failed: %s" % (command.route or command.name, exception),
                title="executor failed",
                code=FaultCode.EXECUTOR_FAILED,
                route=command.route,
                argument=argument,
                consumed=consumed,
                cause=exception,
                hint="the executor raised %s" % type(exception).__name__,
            ))

    def render(self):
        """
        Plain-text rendering of this command and its subtree; see cmdtree.rendering.render().
        """
        return render(self)

    def __str__(self):
        return render(self)

    def __rich__(self):
        return tree(self)

    def __invoke__(self, prompt=Unset):
        """
        Execute this command with a prompt.

        Parameters
        - prompt:
          • Unset: sys.argv[1:] joined with the delimiter.
          • str: used as-is.
          • Iterable[str]: items joined with the delimiter.

        Raises
        - TypeError: when prompt is not Unset/str/Iterable[str].
        """
        if prompt is Unset:
            input = self.delimiter.join(sys.argv[1:])
        elif isinstance(prompt, str):
            input = prompt
        elif isinstance(prompt, Iterable):
            items = list(prompt)
            if not all(isinstance(item, str) for item in items):
                raise TypeError(f"__invoke__() argument must be a string or an iterable of strings")
            input = self.delimiter.join(items)
        else:
            raise TypeError(f"__invoke__() argument must be a string or an iterable of strings")

        return self.execute(input)


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct:
        cmd = command(func, name="x", delimiter=" ")
        host = command(None, name="x")
    - Decorator:
        @command(delimiter=",")
        def func(argument): ...

    Parameters
    - source: Unset | Callable | None
      When Unset, a decorator is returned. Otherwise a Command is created.
    - *args, **kwargs: forwarded to Command (parent, name, delimiter, runtime flags).
    """
    @rename("command")
    def wrapper(source, /):
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def root(delimiter=" ", /, *, shell=False, fancy=False, colorful=False):
    """
    Create an unnamed, host-only root command.

    Example
    - tree = root(" "); tree.command(func, name="help")
    """
    return Command(None, name="", delimiter=delimiter, shell=shell, fancy=fancy, colorful=colorful)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands or callables.

    Behavior
    - If object implements __invoke__, call it with prompt and return the result.
    - If object is a plain callable, wrap it as a root Command and invoke that.
    - Otherwise, raise TypeError.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if callable(object):
        return invoke(command(object), prompt)  # type: ignore[arg-type]

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Settings",
    "Command",
    "command",
    "root",
    "invoke",
)

# Keep the metaclass out of star-imports and autocompletion.
del CommandType
