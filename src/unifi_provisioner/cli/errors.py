"""Map exceptions to clean stderr messages and exit codes."""

from __future__ import annotations

import typer


def _err(msg: str, *, fg: str | None) -> None:
    """Print a styled message to stderr."""
    typer.echo(typer.style(msg, fg=fg), err=True)


def handle_error(exc: Exception, *, color: bool = True) -> int:
    """Print a clean error message to stderr and return an exit code.

    All errors map to exit code 1.  No tracebacks are printed.
    """
    from unifi_provisioner.config.resolver import ConfigError
    from unifi_provisioner.engine.errors import (
        GraphError,
        ProvisioningCanceled,
        ProvisioningError,
    )

    fg = typer.colors.RED if color else None

    if isinstance(exc, ConfigError):
        _err(f"Configuration error: {exc}", fg=fg)
    elif isinstance(exc, GraphError):
        _err(f"Invalid resource graph: {exc}", fg=fg)
    elif isinstance(exc, ProvisioningError):
        _err(f"Provisioning failed: {exc}", fg=fg)
        if exc.report is not None:
            s = exc.report.summary()
            _err(
                f"  Partial result: {s['ready']} ready, {s['failed']} failed, "
                f"{s['pending']} not submitted.",
                fg=fg,
            )
            for r in exc.report.blocked:
                _err(f"  {r.identity} skipped (waiting on {', '.join(r.blocked_by)})", fg=fg)
    elif isinstance(exc, ProvisioningCanceled):
        _err("Provisioning canceled. Submitted resources were left in place.", fg=fg)
    else:
        _err(f"Error: {exc}", fg=fg)

    return 1
