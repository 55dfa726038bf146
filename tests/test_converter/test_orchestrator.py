"""Tests for svcspec.converter.orchestrator (the public entry points)."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import yaml

from svcspec.compiler import Compiler
from svcspec.converter import (
    SchemaUpgrader,
    generate_legacy_spec,
    generate_upgraded_spec,
    list_services,
)
from svcspec.exceptions import ConversionError, MappingError, ParseError, UpgradeError
from svcspec.exit_codes import EXIT_MAPPING_ERROR, EXIT_PARSE_ERROR, EXIT_UPGRADE_ERROR
from svcspec.models import (
    CompilationUnit,
    ConverterConfig,
    ImportDeclaration,
    ServiceDefinition,
    SpecFormat,
)


HELLO_SOURCE = """\
import ballerina.net.http;

service<http:Service> Greeter bind { port: 9090 } {
    @http:ResourceConfig { methods: ["GET"], path: "/hello" }
    resource hello(endpoint caller, http:Request req) returns string {
        _ = caller->respond("Hello");
    }
}
"""


class _RecordingUpgrader(SchemaUpgrader):
    def __init__(self) -> None:
        self.calls: list[str] = []

    def upgrade(self, legacy_text: str) -> str:
        self.calls.append(legacy_text)
        return "upgraded\n"


# ---------------------------------------------------------------------------
# generate_legacy_spec
# ---------------------------------------------------------------------------


class TestGenerateLegacySpec:
    def test_end_to_end_hello(self) -> None:
        doc = yaml.safe_load(generate_legacy_spec(HELLO_SOURCE, "Greeter"))
        operation = doc["paths"]["/hello"]["get"]
        assert operation["responses"]["200"]["schema"] == {"type": "string"}

    def test_first_service_without_name(self, multi_service_source: str) -> None:
        doc = yaml.safe_load(generate_legacy_spec(multi_service_source))
        assert doc["info"]["title"] == "Alpha"
        assert list(doc["paths"]) == ["/a"]

    def test_blank_name_means_first(self, multi_service_source: str) -> None:
        assert generate_legacy_spec(multi_service_source, "  ") == generate_legacy_spec(
            multi_service_source
        )

    def test_duplicate_names_first_wins(self, multi_service_source: str) -> None:
        doc = yaml.safe_load(generate_legacy_spec(multi_service_source, "Beta"))
        assert doc["basePath"] == "/beta"
        assert list(doc["paths"]["/b"]) == ["get"]

    def test_missing_service_returns_empty_string(self, greeter_source: str) -> None:
        assert generate_legacy_spec(greeter_source, "missing") == ""

    def test_no_services(self, no_service_source: str) -> None:
        assert generate_legacy_spec(no_service_source) == ""

    def test_aliases_resolved_from_imports(self, multi_service_source: str) -> None:
        # The HTTP package is imported as 'web'.
        doc = yaml.safe_load(generate_legacy_spec(multi_service_source, "Beta"))
        assert doc["host"] == "api.example.com:443"

    def test_config_package_paths(self) -> None:
        source = (
            HELLO_SOURCE.replace("import ballerina.net.http;", "import ballerina.http as h;")
            .replace(", http:Request req", "")
            .replace("http:", "h:")
        )
        config = ConverterConfig(http_package="ballerina.http")
        doc = yaml.safe_load(generate_legacy_spec(source, config=config))
        assert list(doc["paths"]["/hello"]) == ["get"]

        # Without the package path the annotation is not recognised.
        doc = yaml.safe_load(generate_legacy_spec(source))
        assert len(doc["paths"]["/hello"]) == 7

    def test_json_format(self) -> None:
        config = ConverterConfig(output_format=SpecFormat.JSON)
        doc = json.loads(generate_legacy_spec(HELLO_SOURCE, config=config))
        assert doc["swagger"] == "2.0"

    def test_idempotent(self, greeter_source: str) -> None:
        assert generate_legacy_spec(greeter_source) == generate_legacy_spec(greeter_source)

    def test_parse_error_wrapped(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            generate_legacy_spec("service Broken {")
        assert isinstance(exc_info.value.__cause__, ParseError)
        assert exc_info.value.exit_code == EXIT_PARSE_ERROR
        assert "Unterminated service 'Broken'" in str(exc_info.value)

    def test_mapping_error_wrapped(self) -> None:
        source = 'service S { @http:ResourceConfig { methods: ["FETCH"] } resource r() { } }'
        with pytest.raises(ConversionError, match="Unsupported HTTP method") as exc_info:
            generate_legacy_spec(source)
        assert isinstance(exc_info.value.__cause__, MappingError)
        assert exc_info.value.exit_code == EXIT_MAPPING_ERROR

    @pytest.mark.parametrize("generate", [generate_legacy_spec, generate_upgraded_spec])
    def test_badly_shaped_response_is_a_conversion_error(self, generate) -> None:
        source = HELLO_SOURCE.replace(
            "    @http:ResourceConfig",
            "    @swagger:Responses { responses: [{ code: 404, description: 42 }] }\n"
            "    @http:ResourceConfig",
        )
        with pytest.raises(ConversionError, match="must be a string") as exc_info:
            generate(source)
        assert isinstance(exc_info.value.__cause__, MappingError)
        assert exc_info.value.exit_code == EXIT_MAPPING_ERROR

    def test_custom_compiler(self) -> None:
        unit = CompilationUnit(
            nodes=[
                ImportDeclaration(package_path=["ballerina", "net", "http"], alias="h"),
                ServiceDefinition(name="FromCompiler"),
            ]
        )
        compiler = MagicMock(spec=Compiler)
        compiler.compile.return_value = unit
        doc = yaml.safe_load(generate_legacy_spec("ignored", compiler=compiler))
        compiler.compile.assert_called_once_with("ignored")
        assert doc["info"]["title"] == "FromCompiler"


# ---------------------------------------------------------------------------
# generate_upgraded_spec
# ---------------------------------------------------------------------------


class TestGenerateUpgradedSpec:
    def test_end_to_end_hello(self) -> None:
        doc = yaml.safe_load(generate_upgraded_spec(HELLO_SOURCE, "Greeter"))
        assert doc["openapi"] == "3.0.1"
        response = doc["paths"]["/hello"]["get"]["responses"]["200"]
        assert response["content"]["*/*"]["schema"] == {"type": "string"}

    def test_upgrader_receives_legacy_text(self) -> None:
        upgrader = _RecordingUpgrader()
        result = generate_upgraded_spec(HELLO_SOURCE, upgrader=upgrader)
        assert result == "upgraded\n"
        (legacy_text,) = upgrader.calls
        assert legacy_text == generate_legacy_spec(HELLO_SOURCE)

    def test_missing_service_still_upgrades(self, greeter_source: str) -> None:
        upgrader = _RecordingUpgrader()
        result = generate_upgraded_spec(greeter_source, "missing", upgrader=upgrader)
        assert result == "upgraded\n"
        assert yaml.safe_load(upgrader.calls[0]) == {"swagger": "2.0", "paths": {}}

    def test_missing_service_default_upgrader(self, greeter_source: str) -> None:
        assert generate_upgraded_spec(greeter_source, "missing") == "openapi: 3.0.1\npaths: {}\n"

    def test_json_format(self) -> None:
        config = ConverterConfig(output_format=SpecFormat.JSON)
        doc = json.loads(generate_upgraded_spec(HELLO_SOURCE, config=config))
        assert doc["servers"] == [{"url": "http://localhost:9090"}]

    def test_upgrade_error_wrapped(self) -> None:
        class _Failing(SchemaUpgrader):
            def upgrade(self, legacy_text: str) -> str:
                raise UpgradeError("cannot upgrade")

        with pytest.raises(ConversionError, match="cannot upgrade") as exc_info:
            generate_upgraded_spec(HELLO_SOURCE, upgrader=_Failing())
        assert isinstance(exc_info.value.__cause__, UpgradeError)
        assert exc_info.value.exit_code == EXIT_UPGRADE_ERROR

    def test_parse_error_wrapped(self) -> None:
        upgrader = _RecordingUpgrader()
        with pytest.raises(ConversionError):
            generate_upgraded_spec("service {", upgrader=upgrader)
        assert upgrader.calls == []


# ---------------------------------------------------------------------------
# list_services
# ---------------------------------------------------------------------------


class TestListServices:
    def test_names_in_order(self, multi_service_source: str) -> None:
        assert list_services(multi_service_source) == ["Alpha", "Beta", "Beta"]

    def test_empty(self, no_service_source: str) -> None:
        assert list_services(no_service_source) == []

    def test_parse_error(self) -> None:
        with pytest.raises(ConversionError):
            list_services("service S {")
