"""Configuration loading for ticketsync runs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ticketsync.exceptions import SyncError

CONFIG_FILENAMES = ("ticketsync.yaml", "ticketsync.yml")

TRACKER_PASSWORD_ENV = "TICKETSYNC_TRACKER_PASSWORD"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"


class ConfigError(SyncError):
    """Raised when configuration is invalid or missing."""


@dataclass
class TrackerConfig:
    """Jira connection and ticket-creation settings."""

    host: str
    username: str
    password: str
    link_field_name: str
    link_field_id: str
    project_key: str = ""
    board_id: int | None = None
    new_issue_type: str = ""
    team_field_id: str = ""
    team_id: str = ""
    user_mapping: dict[str, str] = field(default_factory=dict)


@dataclass
class CodeHostConfig:
    """GitHub connection settings and the repository the snapshot is taken from."""

    token: str
    owner: str
    repo: str
    base_url: str = "https://api.github.com"
    username: str = ""
    users: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)


@dataclass
class WorkflowConfig:
    """Status, transition and label names the reconciliation rules refer to."""

    terminal_statuses: list[str] = field(default_factory=lambda: ["Done", "In QA"])
    reviewed_status: str = "Ready to Merge"
    in_progress_statuses: list[str] = field(
        default_factory=lambda: ["In Development", "In Progress"]
    )
    approved_label: str = "lgtm"
    done_transition: str = "Done"
    ready_transition: str = "Ready to Merge"
    start_transition: str = "Start Development"
    start_transition_by_type: dict[str, str] = field(default_factory=dict)
    resolution_done: str = "Done"
    resolution_wont_do: str = "Won't Do"

    def start_transition_for(self, issue_type: str) -> str:
        """Name of the start-development transition for an issue type."""
        return self.start_transition_by_type.get(issue_type, self.start_transition)


@dataclass
class GeneratorConfig:
    """Automatic ticket creation for unlinked pull requests."""

    enabled: bool = True
    min_age_seconds: int = 86400


@dataclass
class RunConfig:
    """Execution settings for a single run."""

    max_workers: int = 8


@dataclass
class SyncConfig:
    """Complete configuration of a ticketsync run."""

    tracker: TrackerConfig
    codehost: CodeHostConfig
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    run: RunConfig = field(default_factory=RunConfig)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        env: dict[str, str] | None = None,
        generate: bool | None = None,
    ) -> SyncConfig:
        """Create config from a parsed mapping.

        Secrets missing from ``data`` are taken from ``env`` (the process
        environment by default). ``generate`` overrides ``generator.enabled``,
        so ticket-creation settings are only required when tickets can be created.

        Raises:
            ConfigError: If required fields are missing or malformed.
        """
        if env is None:
            env = dict(os.environ)

        tracker_data = _section(data, "tracker")
        codehost_data = _section(data, "codehost")
        workflow_data = _section(data, "workflow", required=False)
        generator_data = _section(data, "generator", required=False)
        run_data = _section(data, "run", required=False)

        if not tracker_data.get("password") and env.get(TRACKER_PASSWORD_ENV):
            tracker_data["password"] = env[TRACKER_PASSWORD_ENV]
        if not codehost_data.get("token") and env.get(GITHUB_TOKEN_ENV):
            codehost_data["token"] = env[GITHUB_TOKEN_ENV]

        generator = GeneratorConfig(
            enabled=bool(generator_data.get("enabled", True)) if generate is None else generate,
            min_age_seconds=_as_int(
                generator_data.get("min_age_seconds", 86400), "generator.min_age_seconds"
            ),
        )

        tracker_required = ["host", "username", "password", "link_field_name", "link_field_id"]
        if generator.enabled:
            tracker_required += ["project_key", "board_id", "new_issue_type"]
        missing = [f"tracker.{name}" for name in tracker_required if not tracker_data.get(name)]
        missing += [
            f"codehost.{name}" for name in ("token", "owner", "repo") if not codehost_data.get(name)
        ]
        if missing:
            raise ConfigError(f"Missing required fields: {', '.join(missing)}")

        board_id = tracker_data.get("board_id")
        tracker = TrackerConfig(
            host=str(tracker_data["host"]),
            username=str(tracker_data["username"]),
            password=str(tracker_data["password"]),
            link_field_name=str(tracker_data["link_field_name"]),
            link_field_id=str(tracker_data["link_field_id"]),
            project_key=str(tracker_data.get("project_key") or ""),
            board_id=_as_int(board_id, "tracker.board_id") if board_id is not None else None,
            new_issue_type=str(tracker_data.get("new_issue_type") or ""),
            team_field_id=str(tracker_data.get("team_field_id") or ""),
            team_id=str(tracker_data.get("team_id") or ""),
            user_mapping=_string_map(tracker_data.get("user_mapping"), "tracker.user_mapping"),
        )

        codehost = CodeHostConfig(
            token=str(codehost_data["token"]),
            owner=str(codehost_data["owner"]),
            repo=str(codehost_data["repo"]),
            base_url=str(codehost_data.get("base_url") or "https://api.github.com"),
            username=str(codehost_data.get("username") or ""),
            users=_string_list(codehost_data.get("users"), "codehost.users"),
            labels=_string_list(codehost_data.get("labels"), "codehost.labels"),
        )

        defaults = WorkflowConfig()
        workflow = WorkflowConfig(
            terminal_statuses=_string_list(
                workflow_data.get("terminal_statuses", defaults.terminal_statuses),
                "workflow.terminal_statuses",
            ),
            reviewed_status=str(workflow_data.get("reviewed_status", defaults.reviewed_status)),
            in_progress_statuses=_string_list(
                workflow_data.get("in_progress_statuses", defaults.in_progress_statuses),
                "workflow.in_progress_statuses",
            ),
            approved_label=str(workflow_data.get("approved_label", defaults.approved_label)),
            done_transition=str(workflow_data.get("done_transition", defaults.done_transition)),
            ready_transition=str(workflow_data.get("ready_transition", defaults.ready_transition)),
            start_transition=str(workflow_data.get("start_transition", defaults.start_transition)),
            start_transition_by_type=_string_map(
                workflow_data.get("start_transition_by_type"), "workflow.start_transition_by_type"
            ),
            resolution_done=str(workflow_data.get("resolution_done", defaults.resolution_done)),
            resolution_wont_do=str(
                workflow_data.get("resolution_wont_do", defaults.resolution_wont_do)
            ),
        )

        max_workers = _as_int(run_data.get("max_workers", 8), "run.max_workers")
        if max_workers < 1:
            raise ConfigError("run.max_workers must be at least 1")

        return cls(
            tracker=tracker,
            codehost=codehost,
            workflow=workflow,
            generator=generator,
            run=RunConfig(max_workers=max_workers),
        )


def _section(data: dict[str, Any], name: str, required: bool = True) -> dict[str, Any]:
    value = data.get(name)
    if value is None:
        if required:
            raise ConfigError(f"Missing required section: {name}")
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{name}' must be a mapping, got {type(value).__name__}")
    return dict(value)


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def _string_list(value: Any, name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, list):
        raise ConfigError(f"{name} must be a list of strings")
    return [str(item) for item in value]


def _string_map(value: Any, name: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{name} must be a mapping")
    return {str(k): str(v) for k, v in value.items()}


def load_config(
    config_path: Path | str,
    env: dict[str, str] | None = None,
    generate: bool | None = None,
) -> SyncConfig:
    """Load configuration from a YAML file.

    ``generate=False`` disables ticket creation regardless of the file.

    Raises:
        ConfigError: If the file doesn't exist or is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")

    return SyncConfig.from_dict(data, env=env, generate=generate)


def find_config(start_path: Path | str | None = None) -> Path:
    """Find a configuration file by walking up the directory tree.

    Raises:
        ConfigError: If no config file is found.
    """
    start = Path.cwd() if start_path is None else Path(start_path)
    current = start.resolve()

    for directory in (current, *current.parents):
        for name in CONFIG_FILENAMES:
            candidate = directory / name
            if candidate.exists():
                return candidate

    raise ConfigError(
        f"No {' or '.join(CONFIG_FILENAMES)} found in {start} or any parent directory"
    )
