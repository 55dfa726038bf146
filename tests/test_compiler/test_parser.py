"""Tests for svcspec.compiler.parser."""

from __future__ import annotations

import textwrap

import pytest

from svcspec.compiler import Compiler, ServiceCompiler, compile_source
from svcspec.exceptions import ParseError
from svcspec.models import (
    CompilationUnit,
    ImportDeclaration,
    OtherNode,
    ServiceDefinition,
    TypeDefinition,
)


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


class TestImports:
    def test_default_alias_is_last_segment(self) -> None:
        unit = compile_source("import ballerina.net.http;")
        (node,) = unit.nodes
        assert isinstance(node, ImportDeclaration)
        assert node.package_path == ["ballerina", "net", "http"]
        assert node.alias == "http"
        assert node.package_name == "ballerina.net.http"

    def test_explicit_alias(self) -> None:
        unit = compile_source("import ballerina.net.http.swagger as oas;")
        assert unit.imports()[0].alias == "oas"

    def test_org_separator(self) -> None:
        unit = compile_source("import ballerina/http;")
        assert unit.imports()[0].package_name == "ballerina.http"

    def test_missing_semicolon(self) -> None:
        with pytest.raises(ParseError, match="Expected ';'"):
            compile_source("import a.b\nimport c;")


# ---------------------------------------------------------------------------
# Services and resources
# ---------------------------------------------------------------------------


class TestServices:
    def test_greeter_fixture(self, greeter_unit: CompilationUnit) -> None:
        kinds = [node.kind for node in greeter_unit.nodes]
        assert kinds == ["import", "import", "type", "type", "type", "service", "other"]

        (service,) = greeter_unit.services()
        assert service.name == "Greeter"
        assert service.service_type.qualified_name == "http:Service"
        assert service.bind == {"port": 9090}
        assert [a.qualified_name for a in service.annotations] == [
            "oas:ServiceInfo",
            "http:ServiceConfig",
        ]
        assert [r.name for r in service.resources] == ["hello", "getPerson", "savePerson"]

    def test_annotation_values(self, greeter_unit: CompilationUnit) -> None:
        info = greeter_unit.services()[0].annotations[0]
        assert info.value["title"] == "Greeting API"
        assert info.value["contact"] == {"name": "API Team", "email": "api@example.com"}
        assert info.value["tags"] == [
            "greetings",
            {"name": "people", "description": "People operations"},
        ]

    def test_resource_signature(self, greeter_unit: CompilationUnit) -> None:
        resource = greeter_unit.services()[0].resources[1]
        caller, req, id_, mood = resource.parameters
        assert caller.is_endpoint and caller.type is None
        assert req.type.primary.qualified_name == "http:Request"
        assert id_.type.primary.name == "int"
        assert mood.type.nullable
        assert resource.returns.primary.name == "Person"

    def test_bind_to_named_endpoint(self) -> None:
        unit = compile_source("service<http:Service> S bind listener { }")
        assert unit.services()[0].bind == {"endpoint": "listener"}

    def test_service_without_type_or_bind(self) -> None:
        unit = compile_source("service S { ping() { } }")
        service = unit.services()[0]
        assert service.service_type is None
        assert service.bind == {}
        assert service.resources[0].name == "ping"

    def test_resource_without_body(self) -> None:
        unit = compile_source("service S { resource ping(); }")
        assert unit.services()[0].resources[0].name == "ping"

    def test_union_return_type(self) -> None:
        unit = compile_source("service S { resource r() returns string|error { } }")
        returns = unit.services()[0].resources[0].returns
        assert [m.name for m in returns.members] == ["string", "error"]
        assert returns.primary.name == "string"

    def test_array_and_constrained_types(self) -> None:
        unit = compile_source(
            "service S { resource r(int[][] grid, map<string> tags, byte[] data) { } }"
        )
        grid, tags, data = unit.services()[0].resources[0].parameters
        assert grid.type.primary.dimensions == 2
        assert tags.type.primary.name == "map"
        assert data.type.primary.name == "byte"
        assert data.type.primary.dimensions == 1

    def test_nil_type(self) -> None:
        unit = compile_source("service S { resource r() returns () { } }")
        returns = unit.services()[0].resources[0].returns
        assert returns.primary is None
        assert returns.nullable

    def test_service_level_members_are_skipped(self) -> None:
        source = textwrap.dedent("""\
            service<http:Service> S bind { port: 9090 } {
                endpoint http:Client backend { url: "http://localhost:8080" };
                int counter = 0;

                @http:ResourceConfig { path: "/ping" }
                resource ping(endpoint caller, http:Request req) { }

                pong() { }
            }
        """)
        service = compile_source(source).services()[0]
        assert [r.name for r in service.resources] == ["ping", "pong"]
        assert service.resources[0].annotations[0].name == "ResourceConfig"

    def test_unterminated_service(self) -> None:
        with pytest.raises(ParseError, match="Unterminated service 'S'"):
            compile_source("service S {\n  resource r() { }\n")

    def test_duplicate_annotation_field(self) -> None:
        with pytest.raises(ParseError, match="Duplicate field 'path'") as exc_info:
            compile_source('@http:ResourceConfig { path: "/a", path: "/b" }\nservice S { }')
        assert exc_info.value.line == 1

    def test_dangling_annotation(self) -> None:
        with pytest.raises(ParseError, match="not attached"):
            compile_source("@http:ServiceConfig { }")


# ---------------------------------------------------------------------------
# Type definitions
# ---------------------------------------------------------------------------


class TestTypeDefinitions:
    def test_record(self, greeter_unit: CompilationUnit) -> None:
        person = greeter_unit.type_definitions()["Person"]
        assert [f.name for f in person.fields] == ["name", "age", "nickname", "address"]
        assert person.fields[2].type.nullable
        assert person.fields[3].optional
        assert person.enum_values is None

    def test_enum(self, greeter_unit: CompilationUnit) -> None:
        assert greeter_unit.type_definitions()["Mood"].enum_values == ["HAPPY", "SAD"]

    def test_plain_alias_is_other(self) -> None:
        unit = compile_source("type Id string;")
        (node,) = unit.nodes
        assert isinstance(node, OtherNode)
        assert node.keyword == "type"

    def test_first_definition_wins(self) -> None:
        unit = compile_source('type T "A";\ntype T "B";')
        assert unit.type_definitions()["T"].enum_values == ["A"]


# ---------------------------------------------------------------------------
# Skipped declarations
# ---------------------------------------------------------------------------


class TestOtherDeclarations:
    def test_function_and_constant_are_skipped(self) -> None:
        source = textwrap.dedent("""\
            const string V = "1";
            function f(string... args) returns int {
                if (true) { return 1; }
                return 0;
            }
            service S { }
        """)
        unit = compile_source(source)
        assert [n.kind for n in unit.nodes] == ["other", "other", "service"]
        assert unit.nodes[1].keyword == "function"

    def test_line_numbers(self) -> None:
        unit = compile_source("import a;\n\nservice S { }")
        assert unit.nodes[1].line == 3

    def test_mismatched_brackets(self) -> None:
        with pytest.raises(ParseError, match="Mismatched"):
            compile_source("function f() { ( }")

    def test_stray_closer(self) -> None:
        with pytest.raises(ParseError, match="Unexpected"):
            compile_source("}")

    def test_missing_semicolon_at_end(self) -> None:
        with pytest.raises(ParseError, match="missing ';'"):
            compile_source("const int x = 1")


# ---------------------------------------------------------------------------
# Compiler interface
# ---------------------------------------------------------------------------


class TestServiceCompiler:
    def test_is_a_compiler(self) -> None:
        assert isinstance(ServiceCompiler(), Compiler)

    def test_fresh_unit_per_call(self) -> None:
        compiler = ServiceCompiler()
        first = compiler.compile("service S { }")
        second = compiler.compile("service S { }")
        assert first == second
        assert first is not second

    def test_nodes_are_tagged(self, greeter_unit: CompilationUnit) -> None:
        restored = CompilationUnit.model_validate(greeter_unit.model_dump())
        assert isinstance(restored.nodes[2], TypeDefinition)
        assert isinstance(restored.nodes[5], ServiceDefinition)
