"""Application state and configuration."""

from __future__ import annotations

import os
import re
from enum import StrEnum
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from forksync.core.base import BaseConfig, BaseState
from forksync.core.errors import UnsupportedRepositoryError
from forksync.core.log import Logger
from forksync.core.yaml_settings import YamlWithIncludesSettingsSource
from forksync.model.analysis import AnalysisReport
from forksync.model.sync import MergeState, SyncOutcome, SyncStatus

# Modules reachable from {name.attr} templates in string settings,
# e.g. {platformdirs.user_state_dir} or {os.getcwd}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
    'Path': Path,
}

_TEMPLATE = re.compile(r'\{([a-z._]+)\}')


# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class RepoMode(StrEnum):
    LOCAL = "local"
    REMOTE = "remote"


class RepoConfig(BaseConfig):
    """Location and branch of one repository."""

    mode: RepoMode = Field(
        default=RepoMode.LOCAL,
        description="'local' (path on disk) or 'remote' (owner/repo)",
    )
    branch: str = Field(
        default="main", description="Branch to analyze or merge"
    )
    path: Path | None = Field(
        default=None, description="Working directory of a local repository"
    )
    owner: str | None = Field(
        default=None, description="Owner of a remote repository"
    )
    repo: str | None = Field(
        default=None, description="Name of a remote repository"
    )

    @model_validator(mode='after')
    def _check_location(self) -> 'RepoConfig':
        if self.mode == RepoMode.LOCAL and self.path is None:
            raise ValueError("local repositories need a path")
        if self.mode == RepoMode.REMOTE and not (self.owner and self.repo):
            raise ValueError("remote repositories need owner and repo")
        return self

    @property
    def is_local(self) -> bool:
        return self.mode == RepoMode.LOCAL

    @property
    def label(self) -> str:
        if self.is_local:
            return f"{self.path}@{self.branch}"
        return f"{self.owner}/{self.repo}@{self.branch}"

    def require_local(self, role: str) -> Path:
        """Return the local path, or fail for remote repositories.

        Raises:
            UnsupportedRepositoryError: If the repository is remote
        """
        if not self.is_local:
            raise UnsupportedRepositoryError(
                f"{role} repository {self.label} is remote; only local "
                f"repositories are supported for history comparison"
            )
        return self.path


class AnalysisConfig(BaseConfig):
    """Per-file analysis settings."""

    concurrency: int = Field(
        default=10,
        ge=1,
        description=(
            "Files analyzed at once; each spawns up to two git processes"
        ),
    )
    history_timeout: float = Field(
        default=60,
        gt=0,
        description="Seconds allowed for one git log --follow call",
    )
    compare_histories: bool = Field(
        default=True,
        description=(
            "Compare per-file commit logs; when false, files whose last "
            "commits differ are classified as outdated"
        ),
    )
    downgrade_unavailable_history: bool = Field(
        default=False,
        description=(
            "Record files with unreadable history as unrelated with a "
            "warning instead of reporting them as errored"
        ),
    )
    ignore: list[str] = Field(
        default_factory=list,
        description=(
            "Glob patterns (*, **, ?, dir/) of boilerplate paths that "
            "are never synced"
        ),
    )
    pinned: list[str] = Field(
        default_factory=list,
        description=(
            "Patterns of paths whose fork copy is always kept; ignore "
            "wins when both match"
        ),
    )


class SyncConfig(BaseConfig):
    """Merge orchestration settings."""

    remote_name: str = Field(
        default="forksync-boilerplate",
        description="Name of the git remote pointing at the boilerplate",
    )
    command_timeout: float = Field(
        default=300,
        gt=0,
        description="Seconds allowed for fetch/checkout/merge commands",
    )
    allow_unrelated_histories: bool = Field(
        default=False,
        description="Pass --allow-unrelated-histories to git merge",
    )
    commit_on_complete: bool = Field(
        default=False,
        description="Commit the merge when no file needs manual work",
    )
    lock_dir: Path = Field(
        default_factory=lambda: Path(
            platformdirs.user_runtime_dir("forksync", appauthor=False)
        ),
        description="Directory holding per-fork single-flight lock files",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance",
    )
    boilerplate: RepoConfig = Field(
        description="Upstream template repository"
    )
    fork: RepoConfig = Field(
        description="Downstream repository being re-synced"
    )
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)

    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Console log level: 'spew', 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=lambda: Path(
            platformdirs.user_state_dir("forksync", appauthor=False)
        ),
        description="Root directory for log files",
    )

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Install the global logger once configuration is complete."""
        from forksync.core.log import ConsoleSink, setup_logger

        if self.logger is None:
            self.logger = Logger(
                level=self.log_level,
                console=ConsoleSink(level=self.log_level),
            )
        else:
            self.logger.console.level = self.log_level

        self.logger = setup_logger(
            log_root=self.log_root,
            run_name=self.fork.branch,
            console=self.logger.console,
            file=self.logger.file,
            logfire=self.logger.logfire,
            level=self.logger.level,
        )
        return self

    def close(self):
        from forksync.core.log import logger
        logger.close()
        super().close()


# ============================================================
# RUNTIME STATE MODELS (mutable during workflow execution)
# ============================================================

class AnalysisRuntime(BaseState):
    """Result of the most recent analysis in this process."""

    report: AnalysisReport | None = Field(
        default=None, description="Report of the last completed analysis"
    )


class SyncRuntime(BaseState):
    """Sync orchestrator runtime state (mutates during execution)."""

    status: SyncStatus = Field(
        default=SyncStatus.IDLE,
        description="Current orchestrator state",
    )
    merge_state: MergeState | None = Field(
        default=None,
        description="Clean or in-progress, known after the merge step",
    )
    merged_ref: str | None = Field(
        default=None,
        description="Remote-tracking ref of the boilerplate branch",
    )
    fork_head: str | None = Field(
        default=None,
        description="Fork commit checked out before merging",
    )
    staged: list[str] = Field(default_factory=list)
    manual_files: list[str] = Field(default_factory=list)
    ignored_files: list[str] = Field(default_factory=list)
    pinned_files: list[str] = Field(default_factory=list)
    outcome: SyncOutcome | None = None


class Runtime(BaseModel):
    """Runtime state grouped by workflow."""

    analysis: AnalysisRuntime = Field(default_factory=AnalysisRuntime)
    sync: SyncRuntime = Field(default_factory=SyncRuntime)


# ============================================================
# STATE (config + runtime combined)
# ============================================================

class State(BaseSettings):
    """Configuration plus runtime; the object every workflow receives.

    Being a BaseSettings, it loads from YAML files, .env, environment
    variables and (through CliApp) command-line arguments, and
    validates everything on load.
    """

    config: Config = Field(
        description="Application configuration (from YAML/env/CLI)"
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during workflow execution)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to deep-merge over the configuration "
            "(--include FILE, repeatable)"
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file="forksync.yaml",
        env_file=".env",
        env_prefix="FORKSYNC_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init/CLI > YAML > .env > environment > secrets."""
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> "State":
        """Expand {config.*} and {platformdirs.*} templates in place."""
        self._substitute(self)
        return self

    def _substitute(self, obj: Any) -> Any:
        if isinstance(obj, str):
            return _TEMPLATE.sub(self._resolve_template, obj)
        if isinstance(obj, Path):
            return Path(_TEMPLATE.sub(self._resolve_template, str(obj)))
        if isinstance(obj, BaseModel):
            for name in obj.__class__.model_fields:
                value = getattr(obj, name)
                new_value = self._substitute(value)
                if new_value is not value:
                    setattr(obj, name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute(obj[key])
        elif isinstance(obj, list):
            for i, item in enumerate(obj):
                obj[i] = self._substitute(item)
        return obj

    def _resolve_template(self, match: re.Match) -> str:
        parts = match.group(1).split(".")
        if parts[0] in TEMPLATE_NAMESPACE:
            obj = TEMPLATE_NAMESPACE[parts[0]]
            parts = parts[1:]
        else:
            obj = self
        try:
            for part in parts:
                obj = getattr(obj, part)
            if callable(obj):
                obj = obj('forksync', appauthor=False)
            return str(obj)
        except (AttributeError, TypeError):
            # Not a reference we know; leave the text alone
            return match.group(0)


__all__ = [
    "AnalysisConfig",
    "Config",
    "RepoConfig",
    "RepoMode",
    "State",
    "SyncConfig",
]
