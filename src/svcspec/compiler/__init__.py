"""Service-description front-end -- load source text and compile it.

This sub-package produces the :class:`~svcspec.models.CompilationUnit`
consumed by :mod:`svcspec.converter`.

Typical usage::

    from svcspec.compiler import load_source, compile_source

    unit = compile_source(load_source("greeter.bal"))
    [s.name for s in unit.services()]

Sub-modules:

* :mod:`~svcspec.compiler.loader` -- I/O layer (URL, file, stdin).
* :mod:`~svcspec.compiler.lexer` -- tokenizer with line/column tracking.
* :mod:`~svcspec.compiler.parser` -- recursive-descent parser and the
  default :class:`~svcspec.compiler.parser.ServiceCompiler`.
* :mod:`~svcspec.compiler.base` -- the :class:`Compiler` interface.
"""

from svcspec.compiler.base import Compiler
from svcspec.compiler.loader import load_source
from svcspec.compiler.parser import ServiceCompiler, compile_source

__all__ = ["Compiler", "ServiceCompiler", "compile_source", "load_source"]
