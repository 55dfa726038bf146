"""Services command -- list the services declared in a source.

Read-only companion to ``export``: shows the service names in source order
so the right ``--service`` value can be picked.
"""

from __future__ import annotations

import typer

from svcspec.exceptions import SvcspecError
from svcspec.output import error, get_output, info


def services_command(
    source: str = typer.Argument(help="Service source: file path, URL, or '-' for stdin."),
) -> None:
    """List the services in a source file.

    The first row is the service ``export`` picks without ``--service``.

    Example::

        svcspec services greeter.bal
        svcspec --json services greeter.bal
    """
    from svcspec.compiler import load_source
    from svcspec.converter import list_services

    try:
        names = list_services(load_source(source))
    except SvcspecError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not names:
        info("No services defined in this source.")
        return

    rows = [[str(index), name] for index, name in enumerate(names, start=1)]
    get_output().print_table(["#", "Service"], rows, title=f"Services ({len(rows)})")
