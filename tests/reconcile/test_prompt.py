"""Tests for the default-no confirmation prompt."""

from __future__ import annotations

import pytest

from gitea_declarative.reconcile import ConsolePrompt, is_yes


@pytest.mark.parametrize(
    ("answer", "expected"),
    [
        ("y", True),
        ("Y", True),
        (" yes \n", True),
        ("YES", True),
        ("", False),
        ("n", False),
        ("no", False),
        ("yep", False),
        (None, False),
    ],
)
def test_is_yes(answer: str | None, expected: bool) -> None:
    """Only an explicit yes counts; everything else is no."""
    assert is_yes(answer) is expected


class TestConsolePrompt:
    """Test the console-backed prompt."""

    @pytest.mark.asyncio
    async def test_reads_answer(self) -> None:
        """The message is shown with a default-no hint and the answer interpreted."""
        shown: list[str] = []

        def read_line(prompt: str) -> str:
            shown.append(prompt)
            return "y"

        assert await ConsolePrompt(read_line)("Repo a/b unexpectedly present. Remove?") is True
        assert shown == ["Repo a/b unexpectedly present. Remove? (y/N): "]

    @pytest.mark.asyncio
    async def test_closed_input_is_no(self) -> None:
        """End of input is treated as no."""

        def read_line(prompt: str) -> str:
            raise EOFError

        assert await ConsolePrompt(read_line)("Remove?") is False
