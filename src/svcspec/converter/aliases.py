"""Resolve the local aliases bound to well-known framework packages.

Annotations and types in a service source are written with the alias of the
package that declares them (``@http:ResourceConfig``, ``oas:ServiceInfo``).
Since every file may choose its own alias, the converter looks the aliases
up per compilation unit before interpreting anything.

The package paths to look for are always passed in by the caller (they come
from :class:`~svcspec.models.ConverterConfig`); nothing here is read from
module state.
"""

from __future__ import annotations

from typing import Iterable, Optional

from svcspec.models import CompilationUnit, ImportDeclaration


def resolve_alias(unit: CompilationUnit, package_path: str) -> Optional[str]:
    """Return the alias bound to *package_path*, or ``None`` if it is not imported.

    Import declarations are scanned in source order and the first whose
    joined package path equals *package_path* exactly (case-sensitive)
    wins. ``None`` means the feature is not used by this source; it is not
    an error.

    Example::

        unit = compile_source('import ballerina.net.http as h;')
        resolve_alias(unit, "ballerina.net.http")   # 'h'
        resolve_alias(unit, "ballerina.net.mime")   # None
    """
    for node in unit.nodes:
        if isinstance(node, ImportDeclaration) and node.package_name == package_path:
            return node.alias
    return None


def resolve_aliases(
    unit: CompilationUnit, package_paths: Iterable[str]
) -> dict[str, Optional[str]]:
    """Resolve several package paths at once, keyed by package path."""
    return {path: resolve_alias(unit, path) for path in package_paths}


def default_alias(package_path: str) -> str:
    """The alias an unaliased import of *package_path* would get: its last segment."""
    return package_path.rsplit(".", 1)[-1]
