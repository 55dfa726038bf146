"""Service-to-specification conversion.

Typical usage::

    from svcspec.converter import generate_upgraded_spec

    print(generate_upgraded_spec(source_text, "Greeter"))

Sub-modules:

* :mod:`~svcspec.converter.aliases` -- package alias lookup.
* :mod:`~svcspec.converter.selector` -- service selection.
* :mod:`~svcspec.converter.mapper` -- service to Swagger 2.0 mapping.
* :mod:`~svcspec.converter.serializer` -- YAML/JSON rendering.
* :mod:`~svcspec.converter.upgrader` -- Swagger 2.0 to OpenAPI 3.0.
* :mod:`~svcspec.converter.orchestrator` -- the public entry points.
"""

from svcspec.converter.aliases import resolve_alias, resolve_aliases
from svcspec.converter.mapper import SpecMapper, map_to_spec
from svcspec.converter.orchestrator import (
    generate_legacy_spec,
    generate_upgraded_spec,
    list_services,
)
from svcspec.converter.selector import select_services
from svcspec.converter.serializer import serialize, to_dict
from svcspec.converter.upgrader import SchemaUpgrader, SwaggerUpgrader

__all__ = [
    "SchemaUpgrader",
    "SpecMapper",
    "SwaggerUpgrader",
    "generate_legacy_spec",
    "generate_upgraded_spec",
    "list_services",
    "map_to_spec",
    "resolve_alias",
    "resolve_aliases",
    "select_services",
    "serialize",
    "to_dict",
]
