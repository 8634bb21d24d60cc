"""
cmdtree renderer: read-only views of a command and its descendants.

- render(command) -> str
  The command name on its own line, then each descendant in pre-order, one
  tab deeper per level. Children come in attachment order. Executors are never
  called and rendering never fails.

      with
      	cmdtree
      	life
      	sleep

- tree(command) -> rich.tree.Tree
  The same structure as a rich renderable. Executable commands are drawn in
  bold, host-only ones dimmed. Styles can be overridden through __styles__ in
  __main__ ("tree-executable", "tree-host", "tree-guide").
"""
from collections import defaultdict

from rich.text import Text
from rich.tree import Tree

INDENT = "\t"


def _lines(command):
    stack = [(command, 0)]
    while stack:
        command, depth = stack.pop()
        yield INDENT * depth + command.name
        # Reversed so the first attached child is popped first.
        stack.extend((child, depth + 1) for child in reversed(command._children.values()))  # NOQA: Internal registry


def render(command, /):
    """
    Render command and its subtree as plain, tab-indented text.
    """
    return "\n".join(_lines(command))


def tree(command, /, *, colorful=None):
    """
    Build a rich Tree for command and its subtree.

    colorful defaults to the tree settings of command.
    """
    if colorful is None:
        colorful = command.settings.colorful

    styles = defaultdict(str, {
        "tree-executable": "bold #36C5F0",  # sky-blue executable commands
        "tree-host": "dim #9CA3AF",  # muted host-only commands
        "tree-guide": "#4B5563",  # slate guide lines
    } | getattr(__import__("__main__"), "__styles__", {}))

    def label(node):
        name = node.name or "(root)"
        if not colorful:
            return Text(name)
        return Text(name, styles["tree-executable" if node.executor is not None else "tree-host"])

    trunk = Tree(label(command), guide_style=styles["tree-guide"] if colorful else "")
    stack = [(trunk, command)]
    while stack:
        branch, node = stack.pop()
        for child in node._children.values():  # NOQA: Internal registry
            stack.append((branch.add(label(child)), child))
    return trunk


__all__ = (
    "render",
    "tree",
)
