"""Interactive yes/no confirmation, defaulting to no."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

Confirm = Callable[[str], Awaitable[bool]]
"""Asks the operator a yes/no question and returns True only on an explicit yes."""

YES_ANSWERS = frozenset({"y", "yes"})


def is_yes(answer: str | None) -> bool:
    """Interpret an answer to a default-no question.

    Args:
        answer: The raw line the operator typed, or None if input was closed.

    Returns:
        True for `y` or `yes` in any case; False for anything else, including empty input.
    """
    if answer is None:
        return False
    return answer.strip().lower() in YES_ANSWERS


class ConsolePrompt:
    """Reads answers from the console without blocking the event loop.

    The reconciler only calls this while holding its console gate, so prompts from
    concurrent tasks never interleave.
    """

    def __init__(self, read_line: Callable[[str], str] = input) -> None:
        """Initialize the prompt.

        Args:
            read_line: Writes a prompt and returns the line typed in response. Defaults to `input`.
        """
        self._read_line = read_line

    async def __call__(self, message: str) -> bool:
        try:
            answer: str | None = await asyncio.to_thread(self._read_line, f"{message} (y/N): ")
        except EOFError:
            logger.debug("Input closed while waiting for an answer; treating as no")
            answer = None
        return is_yes(answer)
