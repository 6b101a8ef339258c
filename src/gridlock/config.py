"""Configuration document for gridlock."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from gridlock.layout import LayoutNode, Split, dump_layout, parse_layout

DEFAULT_CONFIG_FILE = ".gridlock.yaml"


class PaneConfig(BaseModel):
    """A pane and the commands that set it up."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    working_directory: str | None = Field(default=None, alias="working-directory")
    command: str | None = None
    commands: list[str] = []

    def setup_commands(self) -> list[str]:
        """Commands to send to the pane, single command first."""
        result = [self.command] if self.command else []
        result.extend(cmd for cmd in self.commands if cmd)
        return result


class WindowConfig(BaseModel):
    """A window with its panes and layout tree."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    working_directory: str | None = Field(default=None, alias="working-directory")
    panes: list[PaneConfig] = []
    layout: LayoutNode

    @field_validator("layout", mode="before")
    @classmethod
    def _parse_layout(cls, value: object) -> LayoutNode:
        return parse_layout(value)

    @field_serializer("layout")
    def _dump_layout(self, layout: LayoutNode) -> object:
        return dump_layout(layout)

    @model_validator(mode="after")
    def _unique_pane_names(self) -> "WindowConfig":
        seen: set[str] = set()
        duplicates: list[str] = []
        for pane in self.panes:
            if pane.name in seen and pane.name not in duplicates:
                duplicates.append(pane.name)
            seen.add(pane.name)
        if duplicates:
            raise ValueError(f"Duplicate pane name(s): {', '.join(duplicates)}")
        return self


class SessionConfig(BaseModel):
    """The tmux session to build."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    working_directory: str | None = Field(default=None, alias="working-directory")
    windows: list[WindowConfig] = []


class GridlockConfig(BaseModel):
    """Top-level configuration document."""

    session: SessionConfig


@dataclass
class ConfigIssue:
    """A problem found while loading a config document."""

    file: str
    field_name: str
    message: str
    value: object = field(default=None, repr=False)


class ConfigError(Exception):
    """Raised when a config document cannot be read or validated."""

    def __init__(self, issues: list[ConfigIssue]) -> None:
        self.issues = issues
        summary = "; ".join(f"{i.field_name}: {i.message}" for i in issues)
        super().__init__(f"Invalid config: {summary}")


def _load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed mapping.

    Raises:
        ConfigError: If the file is missing, unreadable, not YAML, or not a mapping.
    """
    if not path.exists():
        raise ConfigError([ConfigIssue(file=str(path), field_name="(file)", message="File not found")])
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError([ConfigIssue(file=str(path), field_name="(file)", message=f"YAML parse error: {e}")]) from e
    except OSError as e:
        raise ConfigError([ConfigIssue(file=str(path), field_name="(file)", message=f"File read error: {e}")]) from e
    if not isinstance(raw, dict):
        raise ConfigError(
            [ConfigIssue(file=str(path), field_name="(file)", message="Expected a mapping at top level", value=raw)]
        )
    return cast(dict[str, object], raw)


def load_config(config_path: Path) -> GridlockConfig:
    """Load and validate a gridlock config document.

    Args:
        config_path: Path to the YAML document.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the document is missing or invalid.
    """
    raw = _load_yaml_file(config_path)
    try:
        return GridlockConfig.model_validate(raw)
    except ValidationError as e:
        issues = [
            ConfigIssue(
                file=str(config_path),
                field_name=".".join(str(loc) for loc in error["loc"]) or "(root)",
                message=error["msg"],
                value=error.get("input"),
            )
            for error in e.errors()
        ]
        raise ConfigError(issues) from e


def display_config_issues(issues: list[ConfigIssue], console: Console) -> None:
    """Display config issues using Rich formatting.

    Args:
        issues: List of issues to display.
        console: Rich console to output to.
    """
    if not issues:
        return

    text = Text()
    for i, issue in enumerate(issues):
        if i > 0:
            text.append("\n")
        text.append(f"  {issue.file}", style="dim")
        text.append(": ", style="dim")
        text.append(issue.field_name, style="bold")
        text.append(f" - {issue.message}", style="red")
        if issue.value is not None and not isinstance(issue.value, dict):
            text.append(f" (got: {issue.value!r})", style="dim")

    console.print(Panel(text, title="[red]Config Errors[/]", border_style="red"))


def config_to_document(config: GridlockConfig) -> dict[str, Any]:
    """Convert a configuration to its YAML document form, omitting empty keys."""
    return config.model_dump(by_alias=True, exclude_defaults=True)


def dump_config(config: GridlockConfig) -> str:
    """Render a configuration as YAML text."""
    return yaml.dump(
        config_to_document(config),
        default_flow_style=False,
        sort_keys=False,
        indent=2,
        allow_unicode=True,
    )


def save_config(config: GridlockConfig, config_path: Path) -> None:
    """Write a configuration document, refusing to overwrite.

    Args:
        config: The configuration to save.
        config_path: Destination path.

    Raises:
        FileExistsError: If the destination already exists.
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("x", encoding="utf-8") as f:
        f.write(dump_config(config))


def default_config(session_name: str) -> GridlockConfig:
    """Starter document with one window and one pane."""
    return GridlockConfig(
        session=SessionConfig(
            name=session_name,
            windows=[
                WindowConfig(
                    name="main",
                    panes=[PaneConfig(name="bash", command="echo Gridlock")],
                    layout=Split.columns("bash"),
                )
            ],
        )
    )
