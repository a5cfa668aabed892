"""Operator confirmation for destructive store operations."""

from __future__ import annotations

from typing import Callable

_YES_ANSWERS = ("y", "yes")


def prompt_confirmation(prompt: str, read_line: Callable[[str], str] = input) -> bool:
    """Ask the operator a yes/no question and block until answered.

    There is no timeout and no default answer: anything other than an
    explicit yes declines.

    Args:
        prompt: Question shown to the operator.
        read_line: Line reader, ``input`` by default.

    Returns:
        True only for an explicit ``y`` or ``yes``.
    """
    try:
        answer = read_line(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return answer.strip().lower() in _YES_ANSWERS
