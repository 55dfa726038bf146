"""Map a service definition onto a Swagger 2.0 document.

:class:`SpecMapper` walks one :class:`~svcspec.models.ServiceDefinition`
and builds a :class:`~svcspec.models.Swagger2Doc`. Annotations are
recognised by ``(alias, name)`` where the aliases are the ones the source
file bound to the HTTP framework package and to the API documentation
package:

* service: ``<http>:ServiceConfig``, ``<spec>:ServiceInfo``,
  ``<spec>:ServiceConfig``;
* resource: ``<http>:ResourceConfig``, ``<spec>:ResourceInfo``,
  ``<spec>:Responses``.

Every other annotation is carried over as an ``x-`` vendor extension rather
than dropped. When a package is not imported the mapper falls back to the
package's default alias, so unaliased sources still map.

Anything Swagger 2.0 cannot express raises
:class:`~svcspec.exceptions.MappingError` and no document is returned.
"""

from __future__ import annotations

import re
from http import HTTPStatus
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from svcspec.converter.aliases import default_alias
from svcspec.exceptions import MappingError
from svcspec.models import (
    HTTP_METHODS,
    Annotation,
    Contact,
    ConverterConfig,
    ExternalDocs,
    Info,
    License,
    Operation,
    Parameter,
    PathItem,
    Resource,
    ResourceParameter,
    Response,
    ServiceDefinition,
    Swagger2Doc,
    Tag,
    TypeDefinition,
    TypeDescriptor,
    TypeRef,
)

_PRIMITIVE_SCHEMAS: dict[str, dict[str, str]] = {
    "string": {"type": "string"},
    "int": {"type": "integer", "format": "int64"},
    "float": {"type": "number", "format": "double"},
    "decimal": {"type": "number"},
    "boolean": {"type": "boolean"},
    "byte": {"type": "string", "format": "byte"},
    "blob": {"type": "string", "format": "binary"},
}

_OBJECT_TYPES = frozenset({"json", "map", "xml", "any", "anydata", "record"})

_PARAMETER_LOCATIONS = ("query", "header", "path", "formData", "body")

_SCHEMES = ("http", "https", "ws", "wss")

_PATH_VARIABLE = re.compile(r"\{(\w+)\}")

_SUCCESS_DESCRIPTION = "Successful"

_M = TypeVar("_M", bound=BaseModel)


class SpecMapper:
    """Converts service definitions to :class:`~svcspec.models.Swagger2Doc`.

    A mapper holds only its configuration; every :meth:`map_to_spec` call
    builds a new document, so one instance may be reused.

    Args:
        http_alias: Alias of the HTTP framework package in the source, or
            ``None`` when it is not imported.
        spec_alias: Alias of the API documentation package, or ``None``.
        types: Record and enum definitions of the compilation unit, keyed by
            name, used to emit ``definitions``.
        config: Converter settings; supplies the fallback aliases and the
            default ``info.version``.
    """

    def __init__(
        self,
        http_alias: Optional[str],
        spec_alias: Optional[str],
        types: Optional[dict[str, TypeDefinition]] = None,
        config: Optional[ConverterConfig] = None,
    ) -> None:
        self._config = config or ConverterConfig()
        self._http = http_alias or default_alias(self._config.http_package)
        self._spec = spec_alias or default_alias(self._config.spec_package)
        self._types = dict(types or {})

    @property
    def http_alias(self) -> str:
        return self._http

    @property
    def spec_alias(self) -> str:
        return self._spec

    def map_to_spec(self, service: ServiceDefinition) -> Swagger2Doc:
        """Build the Swagger 2.0 document for *service*.

        Raises:
            MappingError: If an annotation attribute has the wrong shape or a
                resource cannot be represented in Swagger 2.0.
        """
        fields: dict[str, Any] = {
            "info": Info(title=service.name, version=self._config.default_version),
            "base_path": "/",
        }
        extensions: dict[str, Any] = {}

        for annotation in service.annotations:
            key = (annotation.prefix, annotation.name)
            if key == (self._http, "ServiceConfig"):
                base_path = _string_attr(annotation, "basePath")
                if base_path is not None:
                    fields["base_path"] = _leading_slash(base_path)
            elif key == (self._spec, "ServiceInfo"):
                self._apply_service_info(annotation, fields)
            elif key == (self._spec, "ServiceConfig"):
                fields["host"] = _string_attr(annotation, "host")
                fields["schemes"] = _schemes_attr(annotation)
                fields["consumes"] = _string_list_attr(annotation, "consumes")
                fields["produces"] = _string_list_attr(annotation, "produces")
            else:
                _add_extension(extensions, annotation)

        if fields.get("host") is None:
            fields["host"] = _host_from_bind(service.bind)

        definitions: dict[str, dict[str, Any]] = {}
        paths: dict[str, PathItem] = {}
        for resource in service.resources:
            for method, path, operation in self._map_resource(resource, definitions):
                item = paths.setdefault(path, PathItem())
                if getattr(item, method) is not None:
                    raise MappingError(
                        f"Duplicate operation {method.upper()} {path} "
                        f"(resource '{resource.name}')"
                    )
                setattr(item, method, operation)

        fields["paths"] = paths
        if definitions:
            fields["definitions"] = definitions
        return _construct(Swagger2Doc, f"service '{service.name}'", **fields, **extensions)

    # ------------------------------------------------------------------ #
    # Service level
    # ------------------------------------------------------------------ #

    def _apply_service_info(self, annotation: Annotation, fields: dict[str, Any]) -> None:
        info: Info = fields["info"]
        title = _string_attr(annotation, "title")
        version = _string_attr(annotation, "version")
        contact = _record_attr(annotation, "contact")
        license_ = _record_attr(annotation, "license")
        fields["info"] = Info(
            title=title or info.title,
            version=version or info.version,
            description=_string_attr(annotation, "description"),
            terms_of_service=_string_attr(annotation, "termsOfService"),
            contact=_build(Contact, contact, annotation, "contact") if contact else None,
            license=_build(License, license_, annotation, "license") if license_ else None,
        )

        tags = _list_attr(annotation, "tags")
        if tags:
            fields["tags"] = [
                _build(Tag, {"name": t} if isinstance(t, str) else t, annotation, "tags")
                for t in tags
            ]
        docs = _record_attr(annotation, "externalDocs")
        if docs:
            fields["external_docs"] = _build(ExternalDocs, docs, annotation, "externalDocs")

    # ------------------------------------------------------------------ #
    # Resource level
    # ------------------------------------------------------------------ #

    def _map_resource(
        self, resource: Resource, definitions: dict[str, dict[str, Any]]
    ) -> list[tuple[str, str, Operation]]:
        """Return one ``(method, path, operation)`` triple per HTTP method of *resource*."""
        resource_config: Optional[Annotation] = None
        resource_info: Optional[Annotation] = None
        responses_annotation: Optional[Annotation] = None
        extensions: dict[str, Any] = {}
        for annotation in resource.annotations:
            key = (annotation.prefix, annotation.name)
            if key == (self._http, "ResourceConfig"):
                resource_config = annotation
            elif key == (self._spec, "ResourceInfo"):
                resource_info = annotation
            elif key == (self._spec, "Responses"):
                responses_annotation = annotation
            else:
                _add_extension(extensions, annotation)

        methods = self._methods(resource, resource_config)
        path = f"/{resource.name}"
        fields: dict[str, Any] = {"operation_id": resource.name}
        if resource_config is not None:
            path = _leading_slash(_string_attr(resource_config, "path") or path)
            fields["consumes"] = _string_list_attr(resource_config, "consumes")
            fields["produces"] = _string_list_attr(resource_config, "produces")

        parameters = self._parameters(resource, resource_config, path, definitions)

        if resource_info is not None:
            fields["summary"] = _string_attr(resource_info, "summary")
            fields["description"] = _string_attr(resource_info, "description")
            fields["tags"] = _string_list_attr(resource_info, "tags")
            fields["operation_id"] = _string_attr(resource_info, "operationId") or resource.name
            if _bool_attr(resource_info, "deprecated"):
                fields["deprecated"] = True
            docs = _record_attr(resource_info, "externalDocs")
            if docs:
                fields["external_docs"] = _build(
                    ExternalDocs, docs, resource_info, "externalDocs"
                )
            self._merge_declared_parameters(
                resource, resource_info, parameters, path, definitions
            )

        fields["parameters"] = parameters or None
        responses = self._responses(resource, responses_annotation, definitions)

        operations = []
        for method in methods:
            op_fields = dict(fields)
            if len(methods) > 1:
                op_fields["operation_id"] = f"{fields['operation_id']}_{method}"
            operation = _construct(
                Operation,
                f"resource '{resource.name}'",
                **op_fields,
                responses=responses,
                **extensions,
            )
            operations.append((method, path, operation))
        return operations

    def _methods(self, resource: Resource, config: Optional[Annotation]) -> list[str]:
        declared = _string_list_attr(config, "methods") if config is not None else None
        if not declared:
            # A resource without declared methods answers every method.
            return list(HTTP_METHODS)
        methods: list[str] = []
        for method in declared:
            lowered = method.lower()
            if lowered not in HTTP_METHODS:
                raise MappingError(
                    f"Unsupported HTTP method '{method}' on resource '{resource.name}'"
                )
            if lowered not in methods:
                methods.append(lowered)
        return methods

    def _is_framework_parameter(self, param: ResourceParameter) -> bool:
        if param.is_endpoint or param.type is None:
            return True
        primary = param.type.primary
        return primary is not None and primary.prefix == self._http

    def _parameters(
        self,
        resource: Resource,
        config: Optional[Annotation],
        path: str,
        definitions: dict[str, dict[str, Any]],
    ) -> list[Parameter]:
        """Derive parameters from the path template and the resource signature."""
        signature = {
            p.name: p for p in resource.parameters if not self._is_framework_parameter(p)
        }
        path_variables = list(dict.fromkeys(_PATH_VARIABLE.findall(path)))
        body_name = _string_attr(config, "body") if config is not None else None

        parameters: list[Parameter] = []
        for variable in path_variables:
            param = signature.get(variable)
            descriptor = param.type if param is not None else None
            parameters.append(
                self._simple_parameter(resource, variable, "path", descriptor, True, definitions)
            )

        if body_name is not None:
            param = signature.get(body_name)
            if param is None or param.type is None:
                raise MappingError(
                    f"Resource '{resource.name}' declares body '{body_name}' "
                    "but has no such parameter"
                )
            if body_name in path_variables:
                raise MappingError(
                    f"Parameter '{body_name}' of resource '{resource.name}' "
                    "cannot be both a path variable and the body"
                )
            parameters.append(
                Parameter(
                    name=body_name,
                    in_="body",
                    required=not param.type.nullable,
                    schema_=self._schema(param.type, definitions) or {"type": "object"},
                )
            )

        for name, param in signature.items():
            if name in path_variables or name == body_name or param.type is None:
                continue
            parameters.append(
                self._simple_parameter(
                    resource, name, "query", param.type, not param.type.nullable, definitions
                )
            )
        return parameters

    def _simple_parameter(
        self,
        resource: Resource,
        name: str,
        location: str,
        descriptor: Optional[TypeDescriptor],
        required: bool,
        definitions: dict[str, dict[str, Any]],
    ) -> Parameter:
        """Build a non-body parameter; only primitives and arrays of primitives fit."""
        schema = {"type": "string"}
        if descriptor is not None:
            schema = self._schema(descriptor, definitions, inline_enums=True) or {}
        if not _is_simple(schema):
            type_name = descriptor.members[0].qualified_name if descriptor else "?"
            raise MappingError(
                f"Parameter '{name}' of resource '{resource.name}' has type "
                f"'{type_name}', which cannot be used as a {location} parameter"
            )
        return Parameter(
            name=name,
            in_=location,
            required=True if location == "path" else required,
            type=schema["type"],
            format=schema.get("format"),
            items=schema.get("items"),
            enum=schema.get("enum"),
        )

    def _merge_declared_parameters(
        self,
        resource: Resource,
        info: Annotation,
        parameters: list[Parameter],
        path: str,
        definitions: dict[str, dict[str, Any]],
    ) -> None:
        """Merge ``ResourceInfo.parameters`` into the derived parameter list in place.

        A declared entry updates the derived parameter with the same name and
        location, so documentation is added without losing the type taken
        from the signature; otherwise it is appended.
        """
        declared = _list_attr(info, "parameters") or []
        path_variables = _PATH_VARIABLE.findall(path)
        for entry in declared:
            if not isinstance(entry, dict):
                raise MappingError(
                    f"{info.qualified_name}.parameters of resource '{resource.name}' "
                    "must contain records"
                )
            name = entry.get("name")
            location = entry.get("in", "query")
            if not isinstance(name, str) or not name:
                raise MappingError(
                    f"A declared parameter of resource '{resource.name}' has no name"
                )
            if location not in _PARAMETER_LOCATIONS:
                raise MappingError(
                    f"Unsupported parameter location '{location}' for parameter "
                    f"'{name}' of resource '{resource.name}'"
                )
            if location == "path" and name not in path_variables:
                raise MappingError(
                    f"Path parameter '{name}' is not part of the path '{path}' "
                    f"of resource '{resource.name}'"
                )

            existing = next(
                (p for p in parameters if p.name == name and p.in_ == location), None
            )
            if existing is None:
                existing = self._declared_parameter(resource, entry, location, definitions)
                if location == "body" and any(p.in_ == "body" for p in parameters):
                    raise MappingError(
                        f"Resource '{resource.name}' declares more than one body parameter"
                    )
                parameters.append(existing)
            if isinstance(entry.get("description"), str):
                existing.description = entry["description"]
            if isinstance(entry.get("required"), bool) and location != "path":
                existing.required = entry["required"]
            if isinstance(entry.get("allowEmptyValue"), bool):
                existing.allow_empty_value = entry["allowEmptyValue"]

        locations = {p.in_ for p in parameters}
        if "body" in locations and "formData" in locations:
            raise MappingError(
                f"Resource '{resource.name}' mixes body and formData parameters"
            )

    def _declared_parameter(
        self,
        resource: Resource,
        entry: dict[str, Any],
        location: str,
        definitions: dict[str, dict[str, Any]],
    ) -> Parameter:
        type_name = entry.get("type", "string")
        if not isinstance(type_name, str):
            raise MappingError(
                f"Type of declared parameter '{entry['name']}' of resource "
                f"'{resource.name}' must be a type name"
            )
        descriptor = _parse_type_name(type_name)
        if location == "body":
            return Parameter(
                name=entry["name"],
                in_="body",
                required=True,
                schema_=self._schema(descriptor, definitions) or {"type": "object"},
            )
        return self._simple_parameter(
            resource, entry["name"], location, descriptor, location == "path", definitions
        )

    def _responses(
        self,
        resource: Resource,
        annotation: Optional[Annotation],
        definitions: dict[str, dict[str, Any]],
    ) -> dict[str, Response]:
        schema = None
        if resource.returns is not None:
            schema = self._schema(resource.returns, definitions)
        responses = {"200": Response(description=_SUCCESS_DESCRIPTION, schema_=schema)}

        if annotation is None:
            return responses
        for entry in _list_attr(annotation, "responses") or []:
            if not isinstance(entry, dict) or "code" not in entry:
                raise MappingError(
                    f"{annotation.qualified_name}.responses of resource "
                    f"'{resource.name}' must contain records with a 'code'"
                )
            code = _response_code(annotation, resource, entry["code"])
            description = entry.get("description")
            if description is not None and not isinstance(description, str):
                raise MappingError(
                    f"{annotation.qualified_name} description of response {code} "
                    f"on resource '{resource.name}' must be a string"
                )
            type_name = entry.get("type")
            if type_name is not None and not isinstance(type_name, str):
                raise MappingError(
                    f"{annotation.qualified_name} type of response {code} "
                    f"on resource '{resource.name}' must be a type name"
                )
            response_schema = None
            if type_name is not None:
                response_schema = self._schema(_parse_type_name(type_name), definitions)
            elif code in responses:
                response_schema = responses[code].schema_
            responses[code] = Response(
                description=description or _reason_phrase(code), schema_=response_schema
            )
        return responses

    # ------------------------------------------------------------------ #
    # Schemas
    # ------------------------------------------------------------------ #

    def _schema(
        self,
        descriptor: TypeDescriptor,
        definitions: dict[str, dict[str, Any]],
        inline_enums: bool = False,
    ) -> Optional[dict[str, Any]]:
        """JSON schema for *descriptor*, or ``None`` when it carries no payload.

        With *inline_enums*, enumerations are expanded in place instead of
        referenced, as non-body parameters cannot hold a ``$ref``.
        """
        ref = descriptor.primary
        if ref is None:
            return None
        return self._schema_for_ref(ref, definitions, inline_enums)

    def _schema_for_ref(
        self, ref: TypeRef, definitions: dict[str, dict[str, Any]], inline_enums: bool = False
    ) -> Optional[dict[str, Any]]:
        dimensions = ref.dimensions
        if ref.prefix is not None:
            if ref.prefix == self._http:
                return None
            schema: dict[str, Any] = {"type": "object"}
        elif ref.name == "byte" and dimensions:
            schema = {"type": "string", "format": "byte"}
            dimensions -= 1
        elif ref.name in _PRIMITIVE_SCHEMAS:
            schema = dict(_PRIMITIVE_SCHEMAS[ref.name])
        elif ref.name in self._types:
            enum_values = self._types[ref.name].enum_values
            if inline_enums and enum_values is not None:
                schema = {"type": "string", "enum": list(enum_values)}
            else:
                self._define(ref.name, definitions)
                schema = {"$ref": f"#/definitions/{ref.name}"}
        else:
            # json, map, xml, ... and names this unit does not define.
            schema = {"type": "object"}

        for _ in range(dimensions):
            schema = {"type": "array", "items": schema}
        return schema

    def _define(self, name: str, definitions: dict[str, dict[str, Any]]) -> None:
        if name in definitions:
            return
        definitions[name] = {}  # placeholder breaks reference cycles
        type_def = self._types[name]
        if type_def.enum_values is not None:
            definitions[name] = {"type": "string", "enum": list(type_def.enum_values)}
            return

        required: list[str] = []
        properties: dict[str, Any] = {}
        for record_field in type_def.fields:
            properties[record_field.name] = (
                self._schema(record_field.type, definitions) or {"type": "object"}
            )
            if not record_field.optional and not record_field.type.nullable:
                required.append(record_field.name)

        schema: dict[str, Any] = {"type": "object"}
        if required:
            schema["required"] = required
        schema["properties"] = properties
        definitions[name] = schema


def map_to_spec(
    service: ServiceDefinition,
    http_alias: Optional[str],
    spec_alias: Optional[str],
    types: Optional[dict[str, TypeDefinition]] = None,
    config: Optional[ConverterConfig] = None,
) -> Swagger2Doc:
    """Functional shortcut for ``SpecMapper(...).map_to_spec(service)``."""
    return SpecMapper(http_alias, spec_alias, types, config).map_to_spec(service)


# ---------------------------------------------------------------------- #
# Helpers
# ---------------------------------------------------------------------- #


def _extension_key(annotation: Annotation) -> str:
    if annotation.prefix:
        return f"x-{annotation.prefix}-{annotation.name}"
    return f"x-{annotation.name}"


def _add_extension(extensions: dict[str, Any], annotation: Annotation) -> None:
    """Record *annotation* as a vendor extension; repeats collect into a list."""
    key = _extension_key(annotation)
    if key not in extensions:
        extensions[key] = annotation.value
    elif isinstance(extensions[key], list):
        extensions[key].append(annotation.value)
    else:
        extensions[key] = [extensions[key], annotation.value]


def _leading_slash(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


def _host_from_bind(bind: dict[str, Any]) -> Optional[str]:
    port = bind.get("port")
    if port is None:
        return None
    return f"{bind.get('host', 'localhost')}:{port}"


def _response_code(annotation: Annotation, resource: Resource, value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int)) or value == "":
        raise MappingError(
            f"{annotation.qualified_name} response code on resource "
            f"'{resource.name}' must be a status code or 'default'"
        )
    return str(value)


def _reason_phrase(code: str) -> str:
    try:
        return HTTPStatus(int(code)).phrase
    except ValueError:
        return "Default response" if code == "default" else code


def _is_simple(schema: dict[str, Any]) -> bool:
    if schema.get("type") == "array":
        return _is_simple(schema.get("items", {}))
    return schema.get("type") in ("string", "integer", "number", "boolean")


def _parse_type_name(text: str) -> TypeDescriptor:
    """Parse a type written inside an annotation string, e.g. ``"int[]"``."""
    name = text.strip()
    dimensions = 0
    while name.endswith("[]"):
        name = name[:-2].rstrip()
        dimensions += 1
    prefix: Optional[str] = None
    if ":" in name:
        prefix, name = name.split(":", 1)
    return TypeDescriptor(
        members=[TypeRef(name=name, prefix=prefix, dimensions=dimensions)]
    )


def _construct(model: type[_M], owner: str, **fields: Any) -> _M:
    try:
        return model(**fields)
    except ValidationError as exc:
        raise MappingError(f"Cannot represent {owner} in Swagger 2.0: {exc}") from exc


def _build(model: type[_M], data: Any, annotation: Annotation, key: str) -> _M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MappingError(
            f"Invalid {annotation.qualified_name}.{key}: "
            f"{exc.errors()[0]['msg'] if exc.errors() else exc}"
        ) from exc


def _string_attr(annotation: Optional[Annotation], key: str) -> Optional[str]:
    if annotation is None:
        return None
    value = annotation.value.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise MappingError(f"{annotation.qualified_name}.{key} must be a string")
    return str(value)


def _bool_attr(annotation: Annotation, key: str) -> bool:
    value = annotation.value.get(key, False)
    if not isinstance(value, bool):
        raise MappingError(f"{annotation.qualified_name}.{key} must be true or false")
    return value


def _record_attr(annotation: Annotation, key: str) -> Optional[dict[str, Any]]:
    value = annotation.value.get(key)
    if value is not None and not isinstance(value, dict):
        raise MappingError(f"{annotation.qualified_name}.{key} must be a record")
    return value


def _list_attr(annotation: Annotation, key: str) -> Optional[list[Any]]:
    value = annotation.value.get(key)
    if value is not None and not isinstance(value, list):
        raise MappingError(f"{annotation.qualified_name}.{key} must be a list")
    return value


def _string_list_attr(annotation: Optional[Annotation], key: str) -> Optional[list[str]]:
    if annotation is None:
        return None
    value = annotation.value.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise MappingError(f"{annotation.qualified_name}.{key} must be a list of strings")
    return list(value) or None


def _schemes_attr(annotation: Annotation) -> Optional[list[str]]:
    schemes = _string_list_attr(annotation, "schemes")
    for scheme in schemes or []:
        if scheme not in _SCHEMES:
            raise MappingError(
                f"{annotation.qualified_name}.schemes contains unsupported scheme '{scheme}'"
            )
    return schemes
