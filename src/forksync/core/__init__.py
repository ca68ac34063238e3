"""Configuration, logging, errors and command execution."""
