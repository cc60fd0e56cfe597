from __future__ import annotations

from typing import Any

from restwrap.exceptions import ConfigurationError, RestwrapError


class CLIError(Exception):
    def __init__(
        self,
        message: str,
        *,
        exit_code: int = 1,
        error_type: str = "error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.error_type = error_type
        self.details = details

    def __str__(self) -> str:  # pragma: no cover
        return self.message


def cli_error_for_exception(exc: RestwrapError) -> CLIError:
    """Map a client error to the CLI's exit code and error type."""
    if isinstance(exc, ConfigurationError):
        return CLIError(exc.message, exit_code=2, error_type="config_error")
    details: dict[str, Any] | None = None
    if exc.response is not None:
        details = {"status": exc.response.status_code}
    return CLIError(
        exc.message,
        exit_code=1,
        error_type=type(exc).__name__,
        details=details,
    )
