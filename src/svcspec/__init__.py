"""svcspec -- Generate API specification documents from service sources.

This package compiles a service-description source file, picks one of its
services and renders it as a Swagger 2.0 document or, by default, as an
OpenAPI 3.0 document upgraded from it.

Typical workflow::

    svcspec services greeter.bal          # list the services in a source
    svcspec export greeter.bal -o api.yaml
    svcspec export greeter.bal --service Greeter --legacy --format json

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    compiler: Source loading and the default service compiler.
    converter: Alias resolution, mapping, serialization and upgrading.
"""

__version__ = "0.1.0"
