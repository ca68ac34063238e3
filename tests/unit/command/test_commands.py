"""Tests for the analyze and sync commands and CLI dispatch."""

import json

import pytest
from pydantic_settings import CliApp

from forksync.cli import EXIT_FATAL, CliState
from forksync.command.analyze import EXIT_ERRORED, EXIT_OK, AnalyzeCommand
from forksync.command.sync import EXIT_MANUAL, SyncCommand
from forksync.core.config import State
from forksync.core.errors import HistoryUnavailableError
from forksync.git.backend import GitBackend
from forksync.model.entries import CommitEntry, FileEntry
from forksync.model.sync import SyncStatus


def entry(path, blob, commit):
    return FileEntry(path=path, blob_sha=blob, last_commit_sha=commit)


def commits(*shas):
    return [
        CommitEntry(sha=sha, date=f"2024-01-0{len(shas) - i}")
        for i, sha in enumerate(shas)
    ]


@pytest.fixture
def paths(tmp_path):
    return tmp_path / "boilerplate", tmp_path / "fork"


@pytest.fixture
def state(paths, tmp_path, mock_argv):
    boilerplate, fork = paths
    return State(
        config={
            "boilerplate": {"path": str(boilerplate), "branch": "main"},
            "fork": {"path": str(fork), "branch": "development"},
            "sync": {"lock_dir": str(tmp_path / "locks")},
        }
    )


@pytest.fixture
def backend(fake_backend, paths, monkeypatch):
    """Fake backend with one behind file and one up-to-date file,
    returned wherever a command builds a GitBackend."""
    boilerplate, fork = paths
    fake_backend.files = {
        boilerplate: [
            entry("README.md", "r1", "c1"),
            entry("src/app.ts", "a2", "c3"),
        ],
        fork: [
            entry("README.md", "r1", "c1"),
            entry("src/app.ts", "a1", "c2"),
        ],
    }
    fake_backend.histories = {
        (boilerplate, "src/app.ts"): commits("c3", "c2"),
        (fork, "src/app.ts"): commits("c2"),
    }
    monkeypatch.setattr(
        GitBackend, "from_config", staticmethod(lambda config: fake_backend)
    )
    return fake_backend


@pytest.mark.asyncio
async def test_analyze_writes_report(state, backend, tmp_path):
    report_path = tmp_path / "out" / "report.json"
    command = AnalyzeCommand(report=report_path)

    assert await command.run_workflow(state) == EXIT_OK

    data = json.loads(report_path.read_text())
    assert data["summary"]["total"] == 2
    assert data["summary"]["behind"] == 1
    app = next(a for a in data["analyses"] if a["file_path"] == "src/app.ts")
    assert app["conflict_analysis"]["resolution_strategy"] == (
        "keepBoilerplate"
    )
    assert state.runtime.analysis.report.summary.up_to_date == 1
    assert not backend.called("merge")


class RecordingLogger:
    def __init__(self):
        self.records = []

    def info(self, msg, **attrs):
        self.records.append((msg, attrs))

    def __getattr__(self, name):
        return lambda *args, **kwargs: None


@pytest.mark.asyncio
async def test_analyze_logs_short_shas(state, backend, paths, monkeypatch):
    boilerplate, fork = paths
    old, new, local = "1" * 40, "2" * 40, "3" * 40
    backend.files[boilerplate][1] = entry("src/app.ts", "a" * 40, new)
    backend.files[fork][1] = entry("src/app.ts", "b" * 40, local)
    backend.histories = {
        (boilerplate, "src/app.ts"): commits(new, old),
        (fork, "src/app.ts"): commits(local, old),
    }
    recorder = RecordingLogger()
    monkeypatch.setattr("forksync.command.analyze.logger", recorder)

    await AnalyzeCommand().run_workflow(state)

    app = next(
        attrs for msg, attrs in recorder.records if msg.startswith("src/app")
    )
    assert app["boilerplate_blob"] == "aaaaaaa"
    assert app["boilerplate_commit"] == "2222222"
    assert app["fork_blob"] == "bbbbbbb"
    assert app["fork_commit"] == "3333333"
    assert "0 pinned" in recorder.records[-1][0]


@pytest.mark.asyncio
async def test_analyze_reports_errors(state, backend, paths):
    boilerplate, _ = paths
    backend.histories[(boilerplate, "src/app.ts")] = HistoryUnavailableError(
        boilerplate, "main", "src/app.ts", "bad object"
    )

    assert await AnalyzeCommand().run_workflow(state) == EXIT_ERRORED
    assert state.runtime.analysis.report.summary.errored == 1


@pytest.mark.asyncio
async def test_sync_completes(state, backend, paths):
    _, fork = paths

    assert await SyncCommand().run_workflow(state) == EXIT_OK
    assert state.runtime.sync.status == SyncStatus.COMPLETED
    assert backend.called("stage_path") == [
        ("stage_path", fork, "src/app.ts", "forksync-boilerplate/main")
    ]


@pytest.mark.asyncio
async def test_sync_leaves_manual_work(state, backend, paths):
    _, fork = paths
    # Both sides moved on from c2: diverged
    backend.files[fork] = [
        entry("README.md", "r1", "c1"),
        entry("src/app.ts", "a9", "c9"),
    ]
    backend.histories[(fork, "src/app.ts")] = commits("c9", "c2")

    assert await SyncCommand().run_workflow(state) == EXIT_MANUAL
    assert state.runtime.sync.manual_files == ["src/app.ts"]


@pytest.mark.asyncio
async def test_sync_refuses_after_analysis_errors(state, backend, paths):
    boilerplate, _ = paths
    backend.histories[(boilerplate, "src/app.ts")] = HistoryUnavailableError(
        boilerplate, "main", "src/app.ts", "bad object"
    )

    assert await SyncCommand().run_workflow(state) == EXIT_ERRORED
    assert not backend.called("fetch")
    assert not backend.called("merge")


def test_cli_runs_analyze(backend, paths, mock_argv):
    boilerplate, fork = paths

    with pytest.raises(SystemExit) as info:
        CliApp.run(
            CliState,
            cli_args=[
                "--config.boilerplate.path", str(boilerplate),
                "--config.fork.path", str(fork),
                "analyze",
            ],
        )

    assert info.value.code == EXIT_OK


def test_cli_fatal_error_exit_code(backend, paths, mock_argv):
    boilerplate, _ = paths

    with pytest.raises(SystemExit) as info:
        CliApp.run(
            CliState,
            cli_args=[
                "--config.boilerplate.path", str(boilerplate),
                "--config.fork.mode", "remote",
                "--config.fork.owner", "acme",
                "--config.fork.repo", "app",
                "analyze",
            ],
        )

    assert info.value.code == EXIT_FATAL
    assert backend.calls == []
