"""Shared error handling for extjs2react."""

from __future__ import annotations

import sys
from typing import NoReturn

import typer


class Extjs2ReactError(Exception):
    """Base exception for extjs2react operations."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class ConfigError(Extjs2ReactError):
    """Raised when extjs2react.yaml cannot be loaded or validated."""


class TargetDirectoryError(Extjs2ReactError):
    """Raised when the target directory was not generated by extjs2react."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Cannot clear or write to a directory not generated by extjs2react: {path}"
        )


class RegistryNotFinalizedError(Extjs2ReactError):
    """Raised when resolved class data is requested before finalize()."""

    def __init__(self, what: str) -> None:
        super().__init__(
            f"Trying to access {what} before all classes are registered", exit_code=70
        )


class SnapshotError(Extjs2ReactError):
    """Raised when a snapshot-backed registry is asked to transpile."""


class CapabilityError(Extjs2ReactError):
    """Raised for an invalid capability table."""


class TemplateSyntaxError(Extjs2ReactError):
    """Raised when template markup cannot be parsed."""

    def __init__(self, message: str, template: str = "") -> None:
        self.template = template
        super().__init__(f"Invalid template markup: {message}")


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Exit the program with an error message."""
    typer.echo(f"Error: {message}", err=True)
    sys.exit(exit_code)


def handle_error(error: Exception) -> NoReturn:
    """Handle and exit on extjs2react errors."""
    if isinstance(error, Extjs2ReactError):
        exit_with_error(error.message, error.exit_code)
    else:
        # Unexpected error
        typer.echo(f"Unexpected error: {error}", err=True)
        sys.exit(1)
