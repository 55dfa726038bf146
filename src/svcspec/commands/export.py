"""Export command -- generate a specification document from a service source.

``svcspec export SOURCE`` compiles *SOURCE* (a file, an http(s) URL, or
``-`` for stdin), selects a service and prints its OpenAPI 3.0 document.
``--legacy`` prints the Swagger 2.0 document instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from svcspec.exceptions import SvcspecError
from svcspec.models import SpecFormat
from svcspec.output import debug, error, get_output, success, warning


def export_command(
    source: str = typer.Argument(help="Service source: file path, URL, or '-' for stdin."),
    service: Optional[str] = typer.Option(
        None, "--service", "-s", help="Service to export (default: the first one)."
    ),
    legacy: bool = typer.Option(
        False, "--legacy", help="Emit Swagger 2.0 instead of OpenAPI 3.0."
    ),
    fmt: Optional[SpecFormat] = typer.Option(
        None, "--format", "-F", case_sensitive=False, help="Document format: yaml or json."
    ),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the document to this file."
    ),
    http_package: Optional[str] = typer.Option(
        None, "--http-package", help="Package path of the HTTP framework import."
    ),
    spec_package: Optional[str] = typer.Option(
        None, "--spec-package", help="Package path of the documentation annotations import."
    ),
) -> None:
    """Generate the specification document of a service.

    Example::

        svcspec export greeter.bal
        svcspec export greeter.bal --service Greeter --legacy -F json
        cat greeter.bal | svcspec export - -o openapi.yaml
    """
    from svcspec.compiler import load_source
    from svcspec.config import resolve_config
    from svcspec.converter import generate_legacy_spec, generate_upgraded_spec

    try:
        config = resolve_config(
            cli_format=fmt.value if fmt is not None else None,
            cli_http_package=http_package,
            cli_spec_package=spec_package,
        )
        debug(f"Effective config: {config.model_dump(mode='json')}")
        text = load_source(source)
        if legacy:
            document = generate_legacy_spec(text, service, config=config)
        else:
            document = generate_upgraded_spec(text, service, config=config)
    except SvcspecError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not document:
        # Only the legacy document can be empty.
        warning(f"No service named '{service}' found" if service else "No service found")
        return

    if output_file is not None:
        output_file.write_text(document, encoding="utf-8")
        success(f"Wrote {output_file}")
        return
    get_output().print_document(document, config.output_format.value)
