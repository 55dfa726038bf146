"""Exception hierarchy for svcspec.

All exceptions inherit from :class:`SvcspecError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`svcspec.exit_codes`.
The top-level error handler in :func:`svcspec.app.main` catches
``SvcspecError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SvcspecError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- SourceLoadError     (exit 3)
    +-- ParseError          (exit 4)
    +-- MappingError        (exit 5)
    +-- UpgradeError        (exit 6)
    +-- ConversionError     (exit 7, or the wrapped cause's code)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from svcspec.exit_codes import (
    EXIT_CONVERSION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MAPPING_ERROR,
    EXIT_PARSE_ERROR,
    EXIT_SOURCE_LOAD_ERROR,
    EXIT_UPGRADE_ERROR,
)


class SvcspecError(Exception):
    """Base exception for all svcspec errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`svcspec.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SvcspecError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class SourceLoadError(SvcspecError):
    """Raised when the service source cannot be read from a file, URL, or stdin."""

    exit_code = EXIT_SOURCE_LOAD_ERROR


class ParseError(SvcspecError):
    """Raised by a compiler when the service source is malformed.

    Args:
        message: Description of the syntax problem.
        line: 1-based line of the offending token, when known.
        column: 1-based column of the offending token, when known.
    """

    exit_code = EXIT_PARSE_ERROR

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        if line is not None:
            message = f"{message} (line {line}, column {column or 1})"
        super().__init__(message)
        self.line = line
        self.column = column


class MappingError(SvcspecError):
    """Raised when a service or resource cannot be represented in Swagger 2.0."""

    exit_code = EXIT_MAPPING_ERROR


class UpgradeError(SvcspecError):
    """Raised when a Swagger 2.0 document cannot be upgraded to OpenAPI 3.0."""

    exit_code = EXIT_UPGRADE_ERROR


class ConversionError(SvcspecError):
    """Single error type raised by the public conversion entry points.

    Wraps a :class:`ParseError`, :class:`MappingError` or
    :class:`UpgradeError`. The message is the cause's message, and the
    exit code is inherited from the cause so the CLI still reports the
    precise failure class.
    """

    exit_code = EXIT_CONVERSION_ERROR

    def __init__(self, message: str, cause: BaseException | None = None):
        exit_code = cause.exit_code if isinstance(cause, SvcspecError) else None
        super().__init__(message, exit_code=exit_code)


class ConfigError(SvcspecError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
