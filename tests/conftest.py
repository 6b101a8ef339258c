"""Shared fixtures for gridlock tests."""

import io
import shlex
from collections.abc import Callable, Iterable

import pytest
from rich.console import Console

from gridlock.tmux import Tmux, TmuxError, session_target

Output = str | Callable[[tuple[str, ...]], str]


class FakeTmux(Tmux):
    """Tmux runner that records commands and answers queries from a script."""

    def __init__(
        self,
        sessions: Iterable[str] = (),
        outputs: dict[str, Output] | None = None,
        failing: Iterable[str] = (),
    ) -> None:
        super().__init__(dry_run=False)
        self.sessions = set(sessions)
        self.outputs = outputs or {}
        self.failing = set(failing)

    def run(self, *args: str) -> str:
        self.commands.append(shlex.join([self.executable, *args]))
        subcommand = args[0]
        if subcommand in self.failing:
            raise TmuxError(list(args), "boom")
        if subcommand == "has-session" and args[2].removeprefix("=") not in self.sessions:
            raise TmuxError(list(args), f"can't find session: {args[2]}")
        output = self.outputs.get(subcommand, "")
        if callable(output):
            return output(args)
        return output

    def attach(self, session_name: str) -> None:
        args = ["attach-session", "-t", session_target(session_name)]
        self.commands.append(shlex.join([self.executable, *args]))
        if "attach-session" in self.failing:
            raise TmuxError(args, "")


@pytest.fixture
def fake_tmux() -> type[FakeTmux]:
    """Factory for scripted tmux runners."""
    return FakeTmux


@pytest.fixture
def console_buffer() -> tuple[Console, io.StringIO]:
    """Console writing to an in-memory buffer."""
    buffer = io.StringIO()
    return Console(file=buffer, width=200, no_color=True), buffer
