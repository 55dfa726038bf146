"""Pick the service definition(s) of a compilation unit that get converted."""

from __future__ import annotations

from typing import Iterator, Optional

from svcspec.models import CompilationUnit, ServiceDefinition


def select_services(
    unit: CompilationUnit, name: Optional[str] = None
) -> Iterator[ServiceDefinition]:
    """Lazily yield the service selected for conversion.

    * With a non-blank *name*: the first service whose name equals *name*
      exactly. Later services with the same name are ignored.
    * With no name (``None`` or blank): the first service in source order.

    The search stops at the first match, so at most one service is yielded
    and nodes after it are never inspected.
    """
    match_any = name is None or not name.strip()
    for node in unit.nodes:
        if not isinstance(node, ServiceDefinition):
            continue
        if match_any or node.name == name:
            yield node
            return
