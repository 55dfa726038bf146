"""Canonical Pydantic models shared across all svcspec modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`SpecFormat` and :class:`ConverterConfig`.

**Compilation unit models** -- produced by a
:class:`~svcspec.compiler.Compiler` and consumed by the converter:
    :class:`CompilationUnit` holding an ordered list of top-level nodes, a
    closed union of :class:`ImportDeclaration`, :class:`ServiceDefinition`,
    :class:`TypeDefinition` and :class:`OtherNode` discriminated on ``kind``.

**Specification document models** -- the two schema versions the converter
emits:
    :class:`Swagger2Doc` (legacy, built by the mapper) and
    :class:`OpenAPI3Doc` (current, built by the upgrader).

Document models use Python field names with camelCase aliases, and are dumped
with ``by_alias=True, exclude_none=True``. Models that may carry ``x-``
vendor extensions use ``extra="allow"`` so that the extensions survive
validation and are emitted after the declared fields.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class SpecFormat(str, enum.Enum):
    """Textual encodings a specification document can be rendered to."""

    YAML = "yaml"
    JSON = "json"


class ConverterConfig(BaseModel):
    """Converter settings persisted at ``~/.config/svcspec/config.json``.

    The package paths identify the framework imports whose aliases decide
    how annotations and parameter types are interpreted. They are handed to
    the alias resolver explicitly on every conversion call.

    See Also:
        :func:`~svcspec.config.resolve_config` for the precedence chain.
    """

    http_package: str = Field(
        default="ballerina.net.http",
        description="Package path of the HTTP framework import",
    )
    spec_package: str = Field(
        default="ballerina.net.http.swagger",
        description="Package path of the API documentation annotations import",
    )
    output_format: SpecFormat = Field(
        default=SpecFormat.YAML, description="Output encoding: yaml or json"
    )
    default_version: str = Field(
        default="1.0.0",
        description="info.version used when a service declares none",
    )


# --- Compilation unit ---


class Annotation(BaseModel):
    """An annotation attachment such as ``@http:ResourceConfig { path: "/" }``.

    ``prefix`` is the module alias written before the colon (``None`` for
    unqualified annotations) and ``value`` is the attached record literal.
    """

    prefix: Optional[str] = None
    name: str
    value: dict[str, Any] = Field(default_factory=dict)

    @property
    def qualified_name(self) -> str:
        return f"{self.prefix}:{self.name}" if self.prefix else self.name


class TypeRef(BaseModel):
    """A single named type, e.g. ``string``, ``int[]``, ``http:Request`` or ``Person?``."""

    name: str
    prefix: Optional[str] = None
    dimensions: int = 0
    nullable: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.prefix}:{self.name}" if self.prefix else self.name


class TypeDescriptor(BaseModel):
    """A type as written in source, possibly a union (``string|error``)."""

    members: list[TypeRef] = Field(min_length=1)

    @property
    def primary(self) -> Optional[TypeRef]:
        """The first member that is neither ``error`` nor nil, if any."""
        for member in self.members:
            if member.prefix is None and member.name in ("error", "()"):
                continue
            return member
        return None

    @property
    def nullable(self) -> bool:
        return any(m.nullable or m.name == "()" for m in self.members)


class ResourceParameter(BaseModel):
    """A parameter in a resource signature.

    Endpoint parameters (``endpoint caller``) have no type and are flagged
    with ``is_endpoint``.
    """

    name: str
    type: Optional[TypeDescriptor] = None
    is_endpoint: bool = False


class Resource(BaseModel):
    """A resource function of a service: one network-reachable operation."""

    name: str
    parameters: list[ResourceParameter] = Field(default_factory=list)
    returns: Optional[TypeDescriptor] = None
    annotations: list[Annotation] = Field(default_factory=list)
    line: int = 0


class ImportDeclaration(BaseModel):
    """``import a.b.c [as alias];`` -- binds *alias* to a package path."""

    kind: Literal["import"] = "import"
    package_path: list[str] = Field(min_length=1)
    alias: str
    line: int = 0

    @property
    def package_name(self) -> str:
        return ".".join(self.package_path)


class ServiceDefinition(BaseModel):
    """A named group of resources exposed over the network."""

    kind: Literal["service"] = "service"
    name: str
    service_type: Optional[TypeRef] = None
    bind: dict[str, Any] = Field(default_factory=dict)
    annotations: list[Annotation] = Field(default_factory=list)
    resources: list[Resource] = Field(default_factory=list)
    line: int = 0


class RecordField(BaseModel):
    name: str
    type: TypeDescriptor
    optional: bool = False


class TypeDefinition(BaseModel):
    """``type Name record {...};`` or ``type Name "A"|"B";``.

    Exactly one of ``fields`` (records) or ``enum_values`` (string
    enumerations) is meaningful.
    """

    kind: Literal["type"] = "type"
    name: str
    fields: list[RecordField] = Field(default_factory=list)
    enum_values: Optional[list[str]] = None
    annotations: list[Annotation] = Field(default_factory=list)
    line: int = 0


class OtherNode(BaseModel):
    """Any top-level declaration the converter has no use for (functions, constants)."""

    kind: Literal["other"] = "other"
    keyword: str
    annotations: list[Annotation] = Field(default_factory=list)
    line: int = 0


TopLevelNode = Annotated[
    Union[ImportDeclaration, ServiceDefinition, TypeDefinition, OtherNode],
    Field(discriminator="kind"),
]


class CompilationUnit(BaseModel):
    """The structural representation of one service-description source file.

    ``nodes`` keeps source order, which decides alias resolution and the
    first-service tie-break.
    """

    nodes: list[TopLevelNode] = Field(default_factory=list)

    def imports(self) -> list[ImportDeclaration]:
        return [n for n in self.nodes if isinstance(n, ImportDeclaration)]

    def services(self) -> list[ServiceDefinition]:
        return [n for n in self.nodes if isinstance(n, ServiceDefinition)]

    def type_definitions(self) -> dict[str, TypeDefinition]:
        """Type definitions keyed by name; the first definition of a name wins."""
        types: dict[str, TypeDefinition] = {}
        for node in self.nodes:
            if isinstance(node, TypeDefinition):
                types.setdefault(node.name, node)
        return types


# --- Shared document parts ---


class Contact(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    email: Optional[str] = None


class License(BaseModel):
    name: str
    url: Optional[str] = None


class ExternalDocs(BaseModel):
    description: Optional[str] = None
    url: str


class Info(BaseModel):
    """The *Info Object*, identical in both schema versions."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    version: str
    description: Optional[str] = None
    terms_of_service: Optional[str] = Field(default=None, alias="termsOfService")
    contact: Optional[Contact] = None
    license: Optional[License] = None


class Tag(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")


# --- Swagger 2.0 ---


class Parameter(BaseModel):
    """A Swagger 2.0 *Parameter Object*.

    ``body`` parameters carry ``schema``; every other location carries
    ``type``/``format``/``items`` directly.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    in_: str = Field(alias="in")
    description: Optional[str] = None
    required: Optional[bool] = None
    type: Optional[str] = None
    format: Optional[str] = None
    items: Optional[dict[str, Any]] = None
    collection_format: Optional[str] = Field(default=None, alias="collectionFormat")
    allow_empty_value: Optional[bool] = Field(default=None, alias="allowEmptyValue")
    default: Any = None
    enum: Optional[list[Any]] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    headers: Optional[dict[str, Any]] = None


class Operation(BaseModel):
    """A Swagger 2.0 *Operation Object*; extra ``x-`` keys are preserved."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    tags: Optional[list[str]] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")
    operation_id: Optional[str] = Field(default=None, alias="operationId")
    consumes: Optional[list[str]] = None
    produces: Optional[list[str]] = None
    parameters: Optional[list[Parameter]] = None
    responses: dict[str, Response] = Field(default_factory=dict)
    deprecated: Optional[bool] = None


class PathItem(BaseModel):
    """A Swagger 2.0 *Path Item Object* keyed by lowercase HTTP method."""

    get: Optional[Operation] = None
    put: Optional[Operation] = None
    post: Optional[Operation] = None
    delete: Optional[Operation] = None
    options: Optional[Operation] = None
    head: Optional[Operation] = None
    patch: Optional[Operation] = None
    parameters: Optional[list[Parameter]] = None

    def operations(self) -> list[tuple[str, Operation]]:
        """Return ``(method, operation)`` pairs in canonical method order."""
        return [
            (method, getattr(self, method))
            for method in HTTP_METHODS
            if getattr(self, method) is not None
        ]


HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")
"""HTTP methods a Swagger 2.0 path item can hold, in canonical order."""


class Swagger2Doc(BaseModel):
    """A complete Swagger 2.0 document (the legacy schema).

    A default instance is the empty document emitted when no service is
    selected: ``swagger: "2.0"`` with no paths.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    swagger: Literal["2.0"] = "2.0"
    info: Optional[Info] = None
    host: Optional[str] = None
    base_path: Optional[str] = Field(default=None, alias="basePath")
    tags: Optional[list[Tag]] = None
    schemes: Optional[list[str]] = None
    consumes: Optional[list[str]] = None
    produces: Optional[list[str]] = None
    paths: dict[str, PathItem] = Field(default_factory=dict)
    definitions: Optional[dict[str, dict[str, Any]]] = None
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")


# --- OpenAPI 3.0 ---


class Server(BaseModel):
    url: str
    description: Optional[str] = None


class MediaType(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class RequestBody(BaseModel):
    description: Optional[str] = None
    content: dict[str, MediaType] = Field(default_factory=dict)
    required: Optional[bool] = None


class Parameter3(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    in_: str = Field(alias="in")
    description: Optional[str] = None
    required: Optional[bool] = None
    allow_empty_value: Optional[bool] = Field(default=None, alias="allowEmptyValue")
    style: Optional[str] = None
    explode: Optional[bool] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class Response3(BaseModel):
    description: str
    headers: Optional[dict[str, Any]] = None
    content: Optional[dict[str, MediaType]] = None


class Operation3(BaseModel):
    """An OpenAPI 3.0 *Operation Object*; extra ``x-`` keys are preserved."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    tags: Optional[list[str]] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")
    operation_id: Optional[str] = Field(default=None, alias="operationId")
    parameters: Optional[list[Parameter3]] = None
    request_body: Optional[RequestBody] = Field(default=None, alias="requestBody")
    responses: dict[str, Response3] = Field(default_factory=dict)
    deprecated: Optional[bool] = None


class PathItem3(BaseModel):
    get: Optional[Operation3] = None
    put: Optional[Operation3] = None
    post: Optional[Operation3] = None
    delete: Optional[Operation3] = None
    options: Optional[Operation3] = None
    head: Optional[Operation3] = None
    patch: Optional[Operation3] = None
    parameters: Optional[list[Parameter3]] = None


class Components(BaseModel):
    schemas: Optional[dict[str, dict[str, Any]]] = None


class OpenAPI3Doc(BaseModel):
    """A complete OpenAPI 3.0 document (the current schema)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    openapi: str = "3.0.1"
    info: Optional[Info] = None
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")
    servers: Optional[list[Server]] = None
    tags: Optional[list[Tag]] = None
    paths: dict[str, PathItem3] = Field(default_factory=dict)
    components: Optional[Components] = None


SpecDocument = Union[Swagger2Doc, OpenAPI3Doc]
"""Either schema version; the serializer accepts both."""
