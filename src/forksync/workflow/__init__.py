"""Sync orchestration workflow."""
