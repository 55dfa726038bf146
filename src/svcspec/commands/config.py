"""Config commands -- view and modify global configuration.

Provides the ``svcspec config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~svcspec.models.ConverterConfig`).
"""

from __future__ import annotations

import typer

from svcspec.exit_codes import EXIT_INVALID_USAGE
from svcspec.output import error, info, print_mapping, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False, "--effective", help="Show the config after env and project overrides."
    ),
) -> None:
    """Show current configuration.

    Example::

        svcspec config show
        svcspec config show --effective
    """
    from svcspec.config import get_config_dir, load_global_config, resolve_config
    from svcspec.exceptions import ConfigError

    try:
        config = resolve_config() if effective else load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    print_mapping(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. 'output_format'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The updated config is validated against
    :class:`~svcspec.models.ConverterConfig` before saving.

    Example::

        svcspec config set output_format json
        svcspec config set http_package ballerina.http
    """
    from pydantic import ValidationError

    from svcspec.config import load_global_config, save_global_config
    from svcspec.models import ConverterConfig

    config = load_global_config()
    data = config.model_dump(mode="json")
    if key not in data:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    data[key] = value
    try:
        new_config = ConverterConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc.errors()[0]['msg']}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        svcspec config reset
        svcspec --force config reset
    """
    from svcspec.config import save_global_config
    from svcspec.models import ConverterConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(ConverterConfig())
    success("Configuration reset to defaults.")
