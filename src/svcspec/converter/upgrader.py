"""Upgrade Swagger 2.0 documents to OpenAPI 3.0.

:class:`SchemaUpgrader` is the seam the orchestrator calls; any
implementation taking legacy text and returning current-schema text can be
passed in. :class:`SwaggerUpgrader` is the built-in one: it validates the
input against :class:`~svcspec.models.Swagger2Doc` and rebuilds it as an
:class:`~svcspec.models.OpenAPI3Doc` with :func:`convert_document`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from svcspec.converter.serializer import serialize
from svcspec.exceptions import UpgradeError
from svcspec.models import (
    HTTP_METHODS,
    Components,
    MediaType,
    OpenAPI3Doc,
    Operation,
    Operation3,
    Parameter,
    Parameter3,
    PathItem3,
    RequestBody,
    Response,
    Response3,
    Server,
    SpecFormat,
    Swagger2Doc,
)

_LEGACY_REF = "#/definitions/"
_CURRENT_REF = "#/components/schemas/"

_DEFAULT_REQUEST_MEDIA_TYPE = "application/json"
_DEFAULT_RESPONSE_MEDIA_TYPE = "*/*"
_FORM_URLENCODED = "application/x-www-form-urlencoded"
_MULTIPART = "multipart/form-data"

# collectionFormat -> (style, explode)
_COLLECTION_STYLES: dict[str, tuple[str, bool]] = {
    "csv": ("form", False),
    "ssv": ("spaceDelimited", False),
    "pipes": ("pipeDelimited", False),
    "multi": ("form", True),
}


class SchemaUpgrader(ABC):
    """Converts a serialized Swagger 2.0 document to a serialized OpenAPI 3.0 one."""

    @abstractmethod
    def upgrade(self, legacy_text: str) -> str:
        """Return the upgraded document text.

        Raises:
            UpgradeError: If *legacy_text* is not a Swagger 2.0 document or
                cannot be upgraded.
        """


class SwaggerUpgrader(SchemaUpgrader):
    """Built-in upgrader; emits its result in *output_format*."""

    def __init__(self, output_format: SpecFormat = SpecFormat.YAML) -> None:
        self.output_format = SpecFormat(output_format)

    def upgrade(self, legacy_text: str) -> str:
        return serialize(convert_document(load_legacy(legacy_text)), self.output_format)


def load_legacy(legacy_text: str) -> Swagger2Doc:
    """Parse YAML or JSON text into a validated :class:`Swagger2Doc`.

    Raises:
        UpgradeError: If the text is not a mapping declaring ``swagger: "2.0"``
            or does not validate.
    """
    try:
        data = yaml.safe_load(legacy_text)
    except yaml.YAMLError as exc:
        raise UpgradeError(f"Legacy document is not valid YAML or JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise UpgradeError("Legacy document must be a mapping")
    if str(data.get("swagger")) != "2.0":
        raise UpgradeError(
            f"Unsupported legacy document version: {data.get('swagger')!r} "
            "(expected swagger: \"2.0\")"
        )
    data["swagger"] = "2.0"

    try:
        return Swagger2Doc.model_validate(data)
    except ValidationError as exc:
        raise UpgradeError(f"Invalid Swagger 2.0 document: {exc}") from exc


def convert_document(doc: Swagger2Doc) -> OpenAPI3Doc:
    """Rebuild *doc* as an OpenAPI 3.0.1 document."""
    paths: dict[str, PathItem3] = {}
    for path, item in doc.paths.items():
        converted: dict[str, Any] = {}
        for method in HTTP_METHODS:
            operation = getattr(item, method)
            if operation is not None:
                converted[method] = _convert_operation(operation, doc)
        shared = [p for p in item.parameters or [] if p.in_ not in ("body", "formData")]
        if shared:
            converted["parameters"] = [_convert_parameter(p) for p in shared]
        paths[path] = PathItem3(**converted)

    components = None
    if doc.definitions:
        components = Components(schemas=_rewrite_refs(doc.definitions))

    return OpenAPI3Doc(
        info=doc.info,
        external_docs=doc.external_docs,
        servers=_servers(doc),
        tags=doc.tags,
        paths=paths,
        components=components,
        **_extensions(doc),
    )


def _servers(doc: Swagger2Doc) -> Optional[list[Server]]:
    base_path = doc.base_path or ""
    if not doc.host:
        return [Server(url=base_path)] if base_path and base_path != "/" else None
    schemes = doc.schemes or ["http"]
    suffix = "" if base_path == "/" else base_path
    return [Server(url=f"{scheme}://{doc.host}{suffix}") for scheme in schemes]


def _convert_operation(operation: Operation, doc: Swagger2Doc) -> Operation3:
    consumes = operation.consumes or doc.consumes
    produces = operation.produces or doc.produces or [_DEFAULT_RESPONSE_MEDIA_TYPE]

    parameters: list[Parameter3] = []
    body: Optional[Parameter] = None
    form: list[Parameter] = []
    for param in operation.parameters or []:
        if param.in_ == "body":
            body = param
        elif param.in_ == "formData":
            form.append(param)
        else:
            parameters.append(_convert_parameter(param))

    request_body = None
    if body is not None:
        schema = _rewrite_refs(body.schema_ or {"type": "object"})
        request_body = RequestBody(
            description=body.description,
            content={
                media: MediaType(schema_=schema)
                for media in consumes or [_DEFAULT_REQUEST_MEDIA_TYPE]
            },
            required=body.required,
        )
    elif form:
        request_body = _form_body(form, consumes)

    responses = {
        code: _convert_response(response, produces)
        for code, response in operation.responses.items()
    }

    return Operation3(
        tags=operation.tags,
        summary=operation.summary,
        description=operation.description,
        external_docs=operation.external_docs,
        operation_id=operation.operation_id,
        parameters=parameters or None,
        request_body=request_body,
        responses=responses,
        deprecated=operation.deprecated,
        **_extensions(operation),
    )


def _convert_parameter(param: Parameter) -> Parameter3:
    style: Optional[str] = None
    explode: Optional[bool] = None
    if param.type == "array" and param.collection_format in _COLLECTION_STYLES:
        style, explode = _COLLECTION_STYLES[param.collection_format]
        if param.in_ in ("path", "header"):
            style = "simple"
    return Parameter3(
        name=param.name,
        in_=param.in_,
        description=param.description,
        required=param.required,
        allow_empty_value=param.allow_empty_value,
        style=style,
        explode=explode,
        schema_=_parameter_schema(param),
    )


def _parameter_schema(param: Parameter) -> dict[str, Any]:
    if param.schema_ is not None:
        return _rewrite_refs(param.schema_)
    schema: dict[str, Any] = {}
    for key in ("type", "format", "items", "enum", "default"):
        value = getattr(param, key)
        if value is not None:
            schema[key] = value
    if schema.get("type") == "file":
        schema = {"type": "string", "format": "binary"}
    return _rewrite_refs(schema)


def _form_body(form: list[Parameter], consumes: Optional[list[str]]) -> RequestBody:
    properties = {p.name: _parameter_schema(p) for p in form}
    required = [p.name for p in form if p.required]
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required

    multipart = any(p.type == "file" for p in form) or _MULTIPART in (consumes or [])
    media = _MULTIPART if multipart else _FORM_URLENCODED
    return RequestBody(content={media: MediaType(schema_=schema)}, required=bool(required) or None)


def _convert_response(response: Response, produces: list[str]) -> Response3:
    content = None
    if response.schema_ is not None:
        schema = _rewrite_refs(response.schema_)
        content = {media: MediaType(schema_=schema) for media in produces}
    return Response3(
        description=response.description,
        headers=_convert_headers(response.headers),
        content=content,
    )


def _convert_headers(headers: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """Move the schema keywords of each legacy header under ``schema``."""
    if not headers:
        return headers
    converted: dict[str, Any] = {}
    for name, header in headers.items():
        if not isinstance(header, dict):
            raise UpgradeError(f"Response header '{name}' must be a mapping")
        result: dict[str, Any] = {}
        schema: dict[str, Any] = {}
        for key, value in header.items():
            if key == "description" or key.startswith("x-"):
                result[key] = value
            elif key != "collectionFormat":
                schema[key] = value
        result["schema"] = _rewrite_refs(schema) if schema else {"type": "string"}
        converted[name] = result
    return converted


def _rewrite_refs(value: Any) -> Any:
    """Return a copy of *value* with every legacy ``$ref`` pointing at components."""
    if isinstance(value, dict):
        rewritten = {}
        for key, item in value.items():
            if key == "$ref" and isinstance(item, str) and item.startswith(_LEGACY_REF):
                rewritten[key] = _CURRENT_REF + item[len(_LEGACY_REF):]
            else:
                rewritten[key] = _rewrite_refs(item)
        return rewritten
    if isinstance(value, list):
        return [_rewrite_refs(item) for item in value]
    return value


def _extensions(model: Any) -> dict[str, Any]:
    extra = model.model_extra or {}
    return {key: value for key, value in extra.items() if key.startswith("x-")}

