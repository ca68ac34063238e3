#!/usr/bin/env python3
"""forksync - keep a fork in sync with its boilerplate repository."""

from forksync.cli import main

if __name__ == "__main__":
    main()
