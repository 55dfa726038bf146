"""Recursive-descent parser for the service-description language.

Turns the token stream from :class:`~svcspec.compiler.lexer.Lexer` into a
:class:`~svcspec.models.CompilationUnit`. The grammar covers what the
converter needs to understand precisely (imports, annotations, services,
resources, record and enum types); every other top-level declaration is
skipped as a balanced statement and recorded as an
:class:`~svcspec.models.OtherNode`, and resource bodies are skipped
entirely.

Example source::

    import ballerina.net.http;
    import ballerina.net.http.swagger as oas;

    @oas:ServiceInfo { title: "Greeting API", version: "2.1.0" }
    @http:ServiceConfig { basePath: "/greeting" }
    service<http:Service> Greeter bind { port: 9090 } {

        @http:ResourceConfig { methods: ["GET"], path: "/hello" }
        resource hello(endpoint caller, http:Request req) returns string {
            _ = caller->respond("Hello");
        }
    }
"""

from __future__ import annotations

from typing import Any, Optional

from svcspec.compiler.base import Compiler
from svcspec.compiler.lexer import Lexer, Token, TokenType
from svcspec.exceptions import ParseError
from svcspec.models import (
    Annotation,
    CompilationUnit,
    ImportDeclaration,
    OtherNode,
    RecordField,
    Resource,
    ResourceParameter,
    ServiceDefinition,
    TopLevelNode,
    TypeDefinition,
    TypeDescriptor,
    TypeRef,
)

# Constrained builtin types whose <...> constraint is read and discarded.
_CONSTRAINED_TYPES = frozenset({"map", "stream", "future", "table"})

_OPENERS = {"{": "}", "(": ")", "[": "]"}


class Parser:
    """Parser over a pre-tokenized source.

    Args:
        tokens: Output of :meth:`Lexer.tokenize`, ending with an ``EOF`` token.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    # ------------------------------------------------------------------ #
    # Token helpers
    # ------------------------------------------------------------------ #

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _check(self, value: str, offset: int = 0) -> bool:
        token = self._peek(offset)
        return token.type in (TokenType.SYMBOL, TokenType.IDENTIFIER) and token.value == value

    def _error(self, message: str, token: Optional[Token] = None) -> ParseError:
        token = token or self._peek()
        return ParseError(message, token.line, token.column)

    def _expect(self, value: str) -> Token:
        if not self._check(value):
            raise self._error(f"Expected '{value}' but found {self._peek()}")
        return self._advance()

    def _expect_identifier(self, what: str = "identifier") -> str:
        token = self._peek()
        if token.type != TokenType.IDENTIFIER:
            raise self._error(f"Expected {what} but found {token}")
        return self._advance().value

    def _accept(self, value: str) -> bool:
        if self._check(value):
            self._advance()
            return True
        return False

    # ------------------------------------------------------------------ #
    # Compilation unit
    # ------------------------------------------------------------------ #

    def parse_unit(self) -> CompilationUnit:
        """Parse the whole token stream.

        Raises:
            ParseError: On the first syntax error.
        """
        nodes: list[TopLevelNode] = []
        while self._peek().type != TokenType.EOF:
            if self._check("import"):
                nodes.append(self._parse_import())
                continue

            annotations = self._parse_annotations()
            self._accept("public")
            token = self._peek()
            if token.type == TokenType.EOF:
                raise self._error("Annotation is not attached to a declaration")
            if self._check("service"):
                nodes.append(self._parse_service(annotations))
            elif self._check("type"):
                nodes.append(self._parse_type_definition(annotations))
            else:
                nodes.append(self._parse_other(annotations))
        return CompilationUnit(nodes=nodes)

    def _parse_import(self) -> ImportDeclaration:
        line = self._expect("import").line
        segments = [self._expect_identifier("package name")]
        # Both 'a.b.c' and 'org/pkg.name' spellings name the same path.
        while self._check(".") or self._check("/"):
            self._advance()
            segments.append(self._expect_identifier("package name"))
        alias = segments[-1]
        if self._accept("as"):
            alias = self._expect_identifier("import alias")
        self._expect(";")
        return ImportDeclaration(package_path=segments, alias=alias, line=line)

    # ------------------------------------------------------------------ #
    # Annotations and literals
    # ------------------------------------------------------------------ #

    def _parse_annotations(self) -> list[Annotation]:
        annotations: list[Annotation] = []
        while self._accept("@"):
            first = self._expect_identifier("annotation name")
            prefix: Optional[str] = None
            name = first
            if self._accept(":"):
                prefix = first
                name = self._expect_identifier("annotation name")
            value: dict[str, Any] = {}
            if self._check("{"):
                value = self._parse_record_literal()
            annotations.append(Annotation(prefix=prefix, name=name, value=value))
        return annotations

    def _parse_record_literal(self) -> dict[str, Any]:
        self._expect("{")
        record: dict[str, Any] = {}
        while not self._check("}"):
            key_token = self._peek()
            if key_token.type not in (TokenType.IDENTIFIER, TokenType.STRING):
                raise self._error(f"Expected field name but found {key_token}")
            self._advance()
            if key_token.value in record:
                raise self._error(f"Duplicate field '{key_token.value}'", key_token)
            self._expect(":")
            record[key_token.value] = self._parse_value()
            if not self._accept(","):
                break
        self._expect("}")
        return record

    def _parse_value(self) -> Any:
        token = self._peek()
        if token.type == TokenType.STRING:
            return self._advance().value
        if token.type == TokenType.NUMBER:
            return _number(self._advance().value)
        if self._check("-") and self._peek(1).type == TokenType.NUMBER:
            self._advance()
            return -_number(self._advance().value)
        if self._check("{"):
            return self._parse_record_literal()
        if self._accept("["):
            items: list[Any] = []
            while not self._check("]"):
                items.append(self._parse_value())
                if not self._accept(","):
                    break
            self._expect("]")
            return items
        if token.type == TokenType.IDENTIFIER:
            self._advance()
            if token.value in ("true", "false"):
                return token.value == "true"
            # Constant references are kept by name, qualified ones as 'mod:NAME'.
            if self._accept(":"):
                return f"{token.value}:{self._expect_identifier()}"
            return token.value
        raise self._error(f"Expected a value but found {token}")

    # ------------------------------------------------------------------ #
    # Types
    # ------------------------------------------------------------------ #

    def _parse_type_descriptor(self) -> TypeDescriptor:
        members = [self._parse_type_ref()]
        while self._accept("|"):
            members.append(self._parse_type_ref())
        return TypeDescriptor(members=members)

    def _parse_type_ref(self) -> TypeRef:
        if self._accept("("):
            self._expect(")")
            return TypeRef(name="()")

        first = self._expect_identifier("type name")
        prefix: Optional[str] = None
        name = first
        if self._accept(":"):
            prefix = first
            name = self._expect_identifier("type name")

        if prefix is None and name in _CONSTRAINED_TYPES and self._accept("<"):
            self._parse_type_descriptor()
            self._expect(">")

        dimensions = 0
        while self._check("[") and self._check("]", offset=1):
            self._advance()
            self._advance()
            dimensions += 1

        nullable = self._accept("?")
        return TypeRef(name=name, prefix=prefix, dimensions=dimensions, nullable=nullable)

    def _parse_type_definition(self, annotations: list[Annotation]) -> TopLevelNode:
        start = self._expect("type")
        name = self._expect_identifier("type name")

        if self._accept("record"):
            self._expect("{")
            fields: list[RecordField] = []
            while not self._check("}"):
                field_type = self._parse_type_descriptor()
                field_name = self._expect_identifier("field name")
                optional = self._accept("?")
                self._expect(";")
                fields.append(RecordField(name=field_name, type=field_type, optional=optional))
            self._expect("}")
            self._accept(";")
            return TypeDefinition(
                name=name, fields=fields, annotations=annotations, line=start.line
            )

        if self._peek().type == TokenType.STRING:
            values = [self._advance().value]
            while self._accept("|"):
                token = self._peek()
                if token.type != TokenType.STRING:
                    raise self._error(f"Expected string literal but found {token}")
                values.append(self._advance().value)
            self._expect(";")
            return TypeDefinition(
                name=name, enum_values=values, annotations=annotations, line=start.line
            )

        # Plain aliases ('type Id string;') carry nothing the converter maps.
        self._skip_statement()
        return OtherNode(keyword="type", annotations=annotations, line=start.line)

    # ------------------------------------------------------------------ #
    # Services and resources
    # ------------------------------------------------------------------ #

    def _parse_service(self, annotations: list[Annotation]) -> ServiceDefinition:
        start = self._expect("service")
        service_type: Optional[TypeRef] = None
        if self._accept("<"):
            service_type = self._parse_type_ref()
            self._expect(">")
        name = self._expect_identifier("service name")

        bind: dict[str, Any] = {}
        if self._accept("bind"):
            if self._check("{"):
                bind = self._parse_record_literal()
            else:
                bind = {"endpoint": self._expect_identifier("endpoint name")}

        self._expect("{")
        resources: list[Resource] = []
        while not self._check("}"):
            if self._peek().type == TokenType.EOF:
                raise self._error(f"Unterminated service '{name}'", start)
            member_annotations = self._parse_annotations()
            if self._is_resource_start():
                resources.append(self._parse_resource(member_annotations))
            else:
                # Service-level endpoints and variables.
                self._skip_statement()
        self._expect("}")
        self._accept(";")

        return ServiceDefinition(
            name=name,
            service_type=service_type,
            bind=bind,
            annotations=annotations,
            resources=resources,
            line=start.line,
        )

    def _is_resource_start(self) -> bool:
        if self._check("resource"):
            return True
        return self._peek().type == TokenType.IDENTIFIER and self._check("(", 1)

    def _parse_resource(self, annotations: list[Annotation]) -> Resource:
        line = self._peek().line
        self._accept("resource")
        name = self._expect_identifier("resource name")

        self._expect("(")
        parameters: list[ResourceParameter] = []
        while not self._check(")"):
            parameters.append(self._parse_parameter())
            if not self._accept(","):
                break
        self._expect(")")

        returns: Optional[TypeDescriptor] = None
        if self._accept("returns"):
            returns = self._parse_type_descriptor()

        if not self._accept(";"):
            if not self._check("{"):
                raise self._error(f"Expected resource body or ';' but found {self._peek()}")
            self._skip_balanced()

        return Resource(
            name=name,
            parameters=parameters,
            returns=returns,
            annotations=annotations,
            line=line,
        )

    def _parse_parameter(self) -> ResourceParameter:
        if self._accept("endpoint"):
            return ResourceParameter(
                name=self._expect_identifier("parameter name"), is_endpoint=True
            )
        param_type = self._parse_type_descriptor()
        name = self._expect_identifier("parameter name")
        return ResourceParameter(name=name, type=param_type)

    # ------------------------------------------------------------------ #
    # Skipped declarations
    # ------------------------------------------------------------------ #

    def _parse_other(self, annotations: list[Annotation]) -> OtherNode:
        token = self._peek()
        if token.type == TokenType.SYMBOL and token.value in ("}", ")", "]"):
            raise self._error(f"Unexpected {token}")
        self._skip_statement()
        return OtherNode(keyword=token.value, annotations=annotations, line=token.line)

    def _skip_statement(self) -> None:
        """Skip to the end of a statement: a ';' or a top-level block."""
        while True:
            token = self._peek()
            if token.type == TokenType.EOF:
                raise self._error("Unexpected end of input; missing ';'")
            if self._check(";"):
                self._advance()
                return
            if self._check("{"):
                self._skip_balanced()
                self._accept(";")
                return
            if token.type == TokenType.SYMBOL and token.value in _OPENERS:
                self._skip_balanced()
                continue
            if token.type == TokenType.SYMBOL and token.value in ("}", ")", "]"):
                raise self._error(f"Unexpected {token}")
            self._advance()

    def _skip_balanced(self) -> None:
        """Skip a bracketed group starting at the current opener."""
        opener = self._advance()
        stack = [_OPENERS[opener.value]]
        while stack:
            token = self._advance()
            if token.type == TokenType.EOF:
                raise self._error(f"Unterminated {opener}", opener)
            if token.type != TokenType.SYMBOL:
                continue
            if token.value in _OPENERS:
                stack.append(_OPENERS[token.value])
            elif token.value in ("}", ")", "]"):
                if token.value != stack[-1]:
                    raise self._error(f"Mismatched {token}", token)
                stack.pop()


def _number(text: str) -> int | float:
    return float(text) if "." in text else int(text)


class ServiceCompiler(Compiler):
    """Default :class:`~svcspec.compiler.base.Compiler` for the service-description language."""

    def compile(self, source_text: str) -> CompilationUnit:
        tokens = Lexer(source_text).tokenize()
        return Parser(tokens).parse_unit()


def compile_source(source_text: str) -> CompilationUnit:
    """Compile *source_text* with the default :class:`ServiceCompiler`.

    Raises:
        ParseError: If the source is malformed.
    """
    return ServiceCompiler().compile(source_text)
