import logging
import os
from typing import Annotated

import typer

from tfmodel.cli.extract import locals_, modules, providers

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

app = typer.Typer(
    name="tfmodel",
    help="tfmodel CLI: extract module calls, locals and provider references from Terraform files.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level. Defaults to $TFMODEL_LOG_LEVEL or WARNING."),
    ] = None,
) -> None:
    level = (log_level or os.getenv("TFMODEL_LOG_LEVEL", "WARNING")).upper()
    if level not in _LOG_LEVELS:
        raise typer.BadParameter(f"must be one of {', '.join(_LOG_LEVELS)}", param_hint="--log-level")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


app.command("modules")(modules)
app.command("locals")(locals_)
app.command("providers")(providers)


def main() -> None:
    app()
