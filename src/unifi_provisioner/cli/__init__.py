"""CLI application for unifi-provisioner."""

from __future__ import annotations

import logging
import os
import sys

import typer

from unifi_provisioner import __version__

app = typer.Typer(
    name="unifi-provisioner",
    help="Provision the UniFi Network Application and its database init job on Kubernetes.",
    no_args_is_help=True,
    add_completion=False,
)

_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_LOG_ENV_VAR = "UNIFI_LOG"
_VERBOSITY = {1: logging.INFO, 2: logging.DEBUG}
# Loggers of the Kubernetes client stack, only opened up at -vvv
_CLIENT_LOGGERS = ("kubernetes", "urllib3")


def _show_version(value: bool) -> None:
    if not value:
        return
    typer.echo(f"unifi-provisioner {__version__}")
    raise typer.Exit


def _level_from_env() -> int | None:
    name = os.environ.get(_LOG_ENV_VAR, "").strip().upper()
    if not name:
        return None
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    print(
        f"WARNING: invalid {_LOG_ENV_VAR} level '{name}', expected DEBUG, INFO, WARNING, "
        "ERROR or CRITICAL; defaulting to INFO",
        file=sys.stderr,
    )
    return logging.INFO


def _configure_logging(verbose: int) -> None:
    """Scope log output to the ``unifi_provisioner`` logger.

    ``UNIFI_LOG`` wins over ``-v`` flags. Without either, nothing is
    configured and the CLI stays silent apart from its own output.
    """
    level = _level_from_env()
    if level is None and verbose:
        level = _VERBOSITY.get(verbose, logging.DEBUG)
    if level is None:
        return

    logging.basicConfig(
        level=logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("unifi_provisioner").setLevel(level)
    if verbose >= 3:
        for name in _CLIENT_LOGGERS:
            logging.getLogger(name).setLevel(logging.DEBUG)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_show_version,
        is_eager=True,
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Log progress (-v), engine details (-vv) or Kubernetes API calls (-vvv).",
    ),
) -> None:
    _ = version
    _configure_logging(verbose)


# Commands register themselves on ``app`` at import time.
from unifi_provisioner.cli import commands as _commands  # noqa: E402, F401
