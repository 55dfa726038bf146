"""Built-in CLI sub-commands for svcspec.

* :mod:`~svcspec.commands.export` -- generate a specification document.
* :mod:`~svcspec.commands.inspect` -- list the services in a source.
* :mod:`~svcspec.commands.config` -- view and modify global settings.

``export`` and ``services`` are plain callbacks registered directly on the
root app; ``config`` is a :class:`typer.Typer` sub-application.
"""
