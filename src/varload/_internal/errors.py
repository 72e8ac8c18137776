"""Custom exception hierarchy for varload."""

from __future__ import annotations


class VarloadError(Exception):
    """Base exception for all varload errors.

    All custom exceptions in varload inherit from this class, making it easy
    to catch any varload-specific error with a single except clause.
    """


class ConfigError(VarloadError):
    """Raised when configuration is invalid or missing.

    Examples:
        - The target URL is not an absolute http(s) URL.
        - Neither or both of a profile file and an inline pacing string
          were given.
        - An unknown pacer name was requested.
        - The curve-fitting pacer was selected without a total duration.
        - A load profile has no segments.
    """


class ProfileParseError(VarloadError):
    """Raised when a load profile description cannot be parsed.

    The message always quotes the offending row or token so the operator
    can find it in the source file or command line.

    Attributes:
        token: The raw text that failed to parse.
        line: One-based line number for tabular input, None otherwise.
    """

    def __init__(self, message: str, *, token: str = "", line: int | None = None) -> None:
        super().__init__(message)
        self.token = token
        self.line = line


class AttackError(VarloadError):
    """Raised when an attack cannot be executed.

    Examples:
        - The HTTP session could not be created.
        - The attack loop failed with an unexpected exception.
    """
