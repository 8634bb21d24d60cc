"""
cmdtree resolver: tokenize an input string and walk it down a command tree.

Algorithm
- tokenize(): split on the tree delimiter; empty tokens (from consecutive,
  leading or trailing delimiters) are dropped.
- resolve(): starting at the given command, descend while the next token is
  exactly the name of a child of the current command. Greedy, no backtracking.
  The starting command's own name is never matched.
- The tokens left over are rejoined with a single delimiter into the argument
  handed to the matched command's executor.

Example
    >>> tokenize("  help   deep  cmdtree ", " ")
    ['help', 'deep', 'cmdtree']
"""
from collections import deque
from typing import NamedTuple


class Resolution(NamedTuple):
    """
    Outcome of resolve().

    - command: deepest command reached (the starting command when nothing matched).
    - argument: unconsumed tokens joined with exactly one delimiter ("" when none are left).
    - consumed: tokens matched as child names, in descent order.
    """
    command: object
    argument: str
    consumed: tuple[str, ...]


def tokenize(input, delimiter, /):
    """
    Split input on delimiter, dropping empty tokens.

    Raises
    - TypeError: input or delimiter is not a string.
    - ValueError: delimiter is empty.
    """
    if not isinstance(input, str):
        raise TypeError("tokenize() first argument must be a string")
    if not isinstance(delimiter, str):
        raise TypeError("tokenize() second argument must be a string")
    if not delimiter:
        raise ValueError("tokenize() second argument must be a non-empty string")
    return [token for token in input.split(delimiter) if token]


def resolve(command, input, /):
    """
    Find the deepest command whose chain of child names prefixes the input tokens.

    Returns a Resolution; never fails on unmatched input (an unmatched token simply
    stops the descent and becomes part of the argument).
    """
    if not isinstance(input, str):
        raise TypeError("resolve() second argument must be a string")

    delimiter = command.delimiter
    tokens = deque(tokenize(input, delimiter))
    consumed = []

    while tokens and tokens[0] in command._children:  # NOQA: Internal registry
        command = command._children[token := tokens.popleft()]  # NOQA: Internal registry
        consumed.append(token)

    return Resolution(command, delimiter.join(tokens), tuple(consumed))


__all__ = (
    "Resolution",
    "tokenize",
    "resolve",
)
