#!/usr/bin/env python3
"""forksync CLI - keep a fork in sync with its boilerplate."""

import asyncio
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from forksync.command.analyze import AnalyzeCommand
from forksync.command.sync import SyncCommand
from forksync.core.config import State
from forksync.core.errors import ForkSyncError
from forksync.core.log import logger

EXIT_FATAL = 3


class CliState(State):
    """Track a fork's divergence from its boilerplate repository and
    merge boilerplate updates back in.

    `analyze` predicts per-file merge conflicts; `sync` merges the
    boilerplate branch and settles every file it safely can.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.fork.branch value)
    2. --include FILE, ./forksync.yaml, user config forksync.yaml,
       package defaults
    3. .env file
    4. Environment variables (FORKSYNC_CONFIG__FORK__BRANCH=value)
    """

    analyze: CliSubCommand[AnalyzeCommand]
    sync: CliSubCommand[SyncCommand]

    def cli_cmd(self):
        """Dispatch to active subcommand, or show help if none
        provided."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        with logger:
            try:
                exit_code = asyncio.run(subcommand.run_workflow(self))
            except ForkSyncError as e:
                logger.error(str(e), error=type(e).__name__)
                exit_code = EXIT_FATAL
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
