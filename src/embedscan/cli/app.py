import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from embedscan.cli.scan import files, packages, scan

app = typer.Typer(
    name="embedscan",
    help="Find Go structs that embed pointers to unexported types.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("embedscan")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)


@app.callback()
def root(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug details to stderr.")] = False,
) -> None:
    _configure_logging(verbose)


app.command("scan")(scan)
app.command("file")(files)
app.command("packages")(packages)


def main() -> None:
    app()
