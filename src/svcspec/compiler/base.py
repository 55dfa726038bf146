"""Abstract base class for service-description compilers.

A compiler turns source text into a :class:`~svcspec.models.CompilationUnit`.
The converter depends only on this interface, so a front-end for another
service-description syntax can be plugged into
:func:`~svcspec.converter.generate_legacy_spec` and
:func:`~svcspec.converter.generate_upgraded_spec` via their ``compiler``
argument.

See Also:
    :class:`~svcspec.compiler.parser.ServiceCompiler` for the default
    implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from svcspec.models import CompilationUnit


class Compiler(ABC):
    """Abstract base class for compilers.

    Implementations must be stateless between calls: every call returns a
    fresh :class:`~svcspec.models.CompilationUnit` owned by the caller.
    """

    @abstractmethod
    def compile(self, source_text: str) -> CompilationUnit:
        """Parse *source_text* into a compilation unit.

        Args:
            source_text: Complete service-description source.

        Returns:
            The top-level declarations of the source, in source order.

        Raises:
            ParseError: If the source is malformed.
        """
