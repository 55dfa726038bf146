"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~svcspec.exceptions.SvcspecError` subclass.
Build scripts can inspect the exit code to tell a malformed service source
from a service that cannot be represented as an API document.

Example::

    $ svcspec export greeter.bal
    $ echo $?
    4   # EXIT_PARSE_ERROR -- the service source has a syntax error
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SOURCE_LOAD_ERROR = 3
"""The service source could not be read (missing file, HTTP error, empty stdin)."""

EXIT_PARSE_ERROR = 4
"""The service source is not syntactically valid."""

EXIT_MAPPING_ERROR = 5
"""A resource cannot be represented in the Swagger 2.0 schema."""

EXIT_UPGRADE_ERROR = 6
"""The Swagger 2.0 document could not be upgraded to OpenAPI 3.0."""

EXIT_CONVERSION_ERROR = 7
"""The conversion failed for a reason not covered by a more specific code."""
