"""Tests for gridlock.session module."""

from pathlib import Path

import pytest

from gridlock.config import GridlockConfig
from gridlock.session import ClientState, Environment, LaunchResult, build_session, launch_session
from gridlock.tmux import Tmux, TmuxError

HOME = Path("/home/u")
OUTSIDE = Environment(inside_tmux=False, home=HOME)
INSIDE = Environment(inside_tmux=True, home=HOME)


@pytest.fixture
def config() -> GridlockConfig:
    """Two-window session with inherited and explicit directories."""
    return GridlockConfig.model_validate(
        {
            "session": {
                "name": "dev",
                "working-directory": "~/proj",
                "windows": [
                    {
                        "name": "code",
                        "panes": [{"name": "editor", "command": "vim"}, {"name": "shell"}],
                        "layout": {"columns": ["editor", "shell"]},
                    },
                    {
                        "name": "logs",
                        "working-directory": "/var/log",
                        "panes": [{"name": "tail", "command": "tail -f syslog"}],
                        "layout": "tail",
                    },
                ],
            }
        }
    )


BUILD_COMMANDS = [
    "tmux new-session -d -s dev -c /home/u/proj -n code",
    "tmux split-window -h -p 50 -t dev:code.0 -c /home/u/proj",
    "tmux send-keys -t dev:code.0 vim Enter",
    "tmux new-window -d -t dev -n logs -c /var/log",
    "tmux send-keys -t dev:logs.0 'tail -f syslog' Enter",
]


class TestBuildSession:
    """Tests for build_session function."""

    def test_command_sequence(self, config: GridlockConfig, console_buffer) -> None:
        """Should create the session, then each window and its layout in order."""
        console, _ = console_buffer
        tmux = Tmux(dry_run=True)
        build_session(config, tmux, OUTSIDE, console)
        assert tmux.commands == BUILD_COMMANDS

    def test_first_window_directory(self, config: GridlockConfig, console_buffer) -> None:
        """Should start the session in the first window's directory when set."""
        console, _ = console_buffer
        config.session.windows[0].working_directory = "/srv/code"
        tmux = Tmux(dry_run=True)
        build_session(config, tmux, OUTSIDE, console)
        assert tmux.commands[0] == "tmux new-session -d -s dev -c /srv/code -n code"

    def test_first_pane_directory(self, config: GridlockConfig, console_buffer) -> None:
        """Should start each window in its first pane's own directory."""
        console, _ = console_buffer
        config.session.windows[0].panes[0].working_directory = "/pane0"
        config.session.windows[1].panes[0].working_directory = "~/tail"
        tmux = Tmux(dry_run=True)
        build_session(config, tmux, OUTSIDE, console)
        assert tmux.commands[0] == "tmux new-session -d -s dev -c /pane0 -n code"
        assert tmux.commands[1] == "tmux split-window -h -p 50 -t dev:code.0 -c /home/u/proj"
        assert tmux.commands[3] == "tmux new-window -d -t dev -n logs -c /home/u/tail"

    def test_first_pane_in_nested_layout(self, console_buffer) -> None:
        """Should use the first leaf of a nested layout for the window directory."""
        console, _ = console_buffer
        config = GridlockConfig.model_validate(
            {
                "session": {
                    "name": "dev",
                    "windows": [
                        {
                            "name": "w",
                            "working-directory": "/w",
                            "panes": [{"name": "a"}, {"name": "b", "working-directory": "/b"}],
                            "layout": {"rows": [{"columns": ["b", "a"]}]},
                        }
                    ],
                }
            }
        )
        tmux = Tmux(dry_run=True)
        build_session(config, tmux, OUTSIDE, console)
        assert tmux.commands[0] == "tmux new-session -d -s dev -c /b -n w"

    def test_no_windows(self, console_buffer) -> None:
        """Should create a bare session when no windows are configured."""
        console, _ = console_buffer
        config = GridlockConfig.model_validate({"session": {"name": "bare"}})
        tmux = Tmux(dry_run=True)
        build_session(config, tmux, OUTSIDE, console)
        assert tmux.commands == ["tmux new-session -d -s bare"]

    def test_window_failure_skips_layout(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should warn and skip the layout of a window that could not be created."""
        console, buffer = console_buffer
        tmux = fake_tmux(failing={"new-window"})
        build_session(config, tmux, OUTSIDE, console)
        assert tmux.commands == BUILD_COMMANDS[:4]
        assert "Could not create window 'logs'" in buffer.getvalue()

    def test_session_failure_raises(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should propagate a failure to create the session."""
        console, _ = console_buffer
        tmux = fake_tmux(failing={"new-session"})
        with pytest.raises(TmuxError):
            build_session(config, tmux, OUTSIDE, console)
        assert len(tmux.commands) == 1


class TestLaunchSession:
    """Tests for launch_session function."""

    def test_dry_run_attach(self, config: GridlockConfig, console_buffer) -> None:
        """Should record the full build and attach without touching tmux."""
        console, buffer = console_buffer
        tmux = Tmux(dry_run=True)
        result = launch_session(config, tmux, OUTSIDE, console=console)
        assert result == LaunchResult(configured=True, client=ClientState.ATTACHED)
        assert tmux.commands == [*BUILD_COMMANDS, "tmux attach-session -t =dev"]
        assert "Creating session: dev" in buffer.getvalue()

    def test_switch_inside_tmux(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should switch the client when already inside tmux."""
        console, _ = console_buffer
        tmux = fake_tmux()
        result = launch_session(config, tmux, INSIDE, console=console)
        assert result.client is ClientState.SWITCHED
        assert tmux.commands[0] == "tmux has-session -t =dev"
        assert tmux.commands[-1] == "tmux switch-client -t =dev"
        assert "tmux attach-session -t =dev" not in tmux.commands

    def test_detached(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should leave the client alone when detached."""
        console, _ = console_buffer
        tmux = fake_tmux()
        result = launch_session(config, tmux, INSIDE, detached=True, console=console)
        assert result == LaunchResult(configured=True, client=ClientState.DETACHED)
        assert tmux.commands == ["tmux has-session -t =dev", *BUILD_COMMANDS]

    def test_reuses_existing_session(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should attach to an existing session without reconfiguring it."""
        console, buffer = console_buffer
        tmux = fake_tmux(sessions={"dev"})
        result = launch_session(config, tmux, OUTSIDE, console=console)
        assert result == LaunchResult(configured=False, client=ClientState.ATTACHED)
        assert tmux.commands == ["tmux has-session -t =dev", "tmux attach-session -t =dev"]
        assert "Using existing session: dev" in buffer.getvalue()

    def test_recreate(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should kill and rebuild an existing session."""
        console, _ = console_buffer
        tmux = fake_tmux(sessions={"dev"})
        result = launch_session(config, tmux, OUTSIDE, recreate=True, detached=True, console=console)
        assert result.configured is True
        assert tmux.commands == ["tmux has-session -t =dev", "tmux kill-session -t =dev", *BUILD_COMMANDS]

    def test_recreate_missing_session(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should not try to kill a session that does not exist."""
        console, _ = console_buffer
        tmux = fake_tmux()
        launch_session(config, tmux, OUTSIDE, recreate=True, detached=True, console=console)
        assert "tmux kill-session -t =dev" not in tmux.commands

    def test_kill_failure_is_warning(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should warn and continue when the old session cannot be killed."""
        console, buffer = console_buffer
        tmux = fake_tmux(sessions={"dev"}, failing={"kill-session"})
        result = launch_session(config, tmux, OUTSIDE, recreate=True, detached=True, console=console)
        assert result.configured is True
        assert "Could not kill session 'dev'" in buffer.getvalue()
        assert tmux.commands[2:] == BUILD_COMMANDS

    def test_attach_failure_raises(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should propagate attach failures."""
        console, _ = console_buffer
        tmux = fake_tmux(sessions={"dev"}, failing={"attach-session"})
        with pytest.raises(TmuxError):
            launch_session(config, tmux, OUTSIDE, console=console)

    def test_switch_failure_raises(self, config: GridlockConfig, fake_tmux, console_buffer) -> None:
        """Should propagate switch-client failures."""
        console, _ = console_buffer
        tmux = fake_tmux(sessions={"dev"}, failing={"switch-client"})
        with pytest.raises(TmuxError):
            launch_session(config, tmux, INSIDE, console=console)


class TestEnvironment:
    """Tests for Environment class."""

    def test_from_os_inside(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should detect a tmux client from the TMUX variable."""
        monkeypatch.setenv("TMUX", "/tmp/tmux-1000/default,1234,0")
        assert Environment.from_os().inside_tmux is True

    def test_from_os_outside(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should report outside tmux when TMUX is unset."""
        monkeypatch.delenv("TMUX", raising=False)
        env = Environment.from_os()
        assert env.inside_tmux is False
        assert env.home == Path.home()
