"""Public conversion entry points.

Each call runs the full pipeline on one source text::

    compile -> resolve aliases -> select service -> map -> serialize [-> upgrade]

All state lives in the call; configuration, compiler and upgrader are passed
in explicitly and fall back to the defaults when omitted. Failures of any
stage surface as a single :class:`~svcspec.exceptions.ConversionError`
whose ``__cause__`` is the original error.
"""

from __future__ import annotations

from typing import Optional

from svcspec.compiler import Compiler, ServiceCompiler
from svcspec.converter.aliases import resolve_aliases
from svcspec.converter.mapper import SpecMapper
from svcspec.converter.selector import select_services
from svcspec.converter.serializer import serialize
from svcspec.converter.upgrader import SchemaUpgrader, SwaggerUpgrader
from svcspec.exceptions import ConversionError, MappingError, ParseError, UpgradeError
from svcspec.models import CompilationUnit, ConverterConfig, Swagger2Doc
from svcspec.output import debug


def generate_legacy_spec(
    source_text: str,
    service_name: Optional[str] = None,
    *,
    config: Optional[ConverterConfig] = None,
    compiler: Optional[Compiler] = None,
) -> str:
    """Generate the Swagger 2.0 document of one service.

    Args:
        source_text: Service-description source.
        service_name: Service to convert; ``None`` or blank picks the first
            service in the source.
        config: Converter settings. Defaults to :class:`ConverterConfig`.
        compiler: Front-end turning the source into a compilation unit.
            Defaults to :class:`~svcspec.compiler.ServiceCompiler`.

    Returns:
        The serialized document, or ``""`` when no service matches.

    Raises:
        ConversionError: If compiling or mapping fails.
    """
    config = config or ConverterConfig()
    try:
        doc = _build_legacy(source_text, service_name, config, compiler)
    except (ParseError, MappingError) as exc:
        raise ConversionError(str(exc), cause=exc) from exc

    if doc is None:
        return ""
    return serialize(doc, config.output_format)


def generate_upgraded_spec(
    source_text: str,
    service_name: Optional[str] = None,
    *,
    config: Optional[ConverterConfig] = None,
    compiler: Optional[Compiler] = None,
    upgrader: Optional[SchemaUpgrader] = None,
) -> str:
    """Generate the OpenAPI 3.0 document of one service.

    Identical to :func:`generate_legacy_spec` up to mapping. When no service
    matches, an empty Swagger 2.0 document is upgraded instead, so the
    result is never empty.

    Args:
        upgrader: Legacy-to-current converter. Defaults to
            :class:`~svcspec.converter.upgrader.SwaggerUpgrader` emitting the
            configured output format.

    Raises:
        ConversionError: If compiling, mapping or upgrading fails.
    """
    config = config or ConverterConfig()
    upgrader = upgrader or SwaggerUpgrader(config.output_format)
    try:
        doc = _build_legacy(source_text, service_name, config, compiler)
        if doc is None:
            debug("Upgrading an empty document")
            doc = Swagger2Doc()
        legacy_text = serialize(doc, config.output_format)
        debug(f"Upgrading with {type(upgrader).__name__}")
        return upgrader.upgrade(legacy_text)
    except (ParseError, MappingError, UpgradeError) as exc:
        raise ConversionError(str(exc), cause=exc) from exc


def list_services(source_text: str, *, compiler: Optional[Compiler] = None) -> list[str]:
    """Names of the services declared in *source_text*, in source order.

    Raises:
        ConversionError: If the source does not compile.
    """
    try:
        unit = _compile(source_text, compiler)
    except ParseError as exc:
        raise ConversionError(str(exc), cause=exc) from exc
    return [service.name for service in unit.services()]


def _compile(source_text: str, compiler: Optional[Compiler]) -> CompilationUnit:
    compiler = compiler or ServiceCompiler()
    unit = compiler.compile(source_text)
    debug(f"Compiled {len(unit.nodes)} top-level declaration(s)")
    return unit


def _build_legacy(
    source_text: str,
    service_name: Optional[str],
    config: ConverterConfig,
    compiler: Optional[Compiler],
) -> Optional[Swagger2Doc]:
    unit = _compile(source_text, compiler)

    aliases = resolve_aliases(unit, (config.http_package, config.spec_package))
    http_alias = aliases[config.http_package]
    spec_alias = aliases[config.spec_package]
    debug(f"Resolved aliases: http={http_alias!r} spec={spec_alias!r}")

    service = next(select_services(unit, service_name), None)
    if service is None:
        debug(f"No service matched {service_name!r}")
        return None
    debug(f"Selected service '{service.name}' ({len(service.resources)} resource(s))")

    mapper = SpecMapper(http_alias, spec_alias, unit.type_definitions(), config)
    return mapper.map_to_spec(service)
