"""Typer application and CLI entry point for oauthsign.

This module wires together the top-level Typer application and registers the
built-in commands (``sign``, ``get``, ``post``, ``stream`` and the
``profile`` group).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, registers commands and
invokes the Typer app. :class:`~oauthsign.exceptions.OAuthSignError`
instances exit with their own code; anything else is written to a crash log
under the data directory.

See Also:
    :mod:`oauthsign.config`: Profile and global configuration resolution.
    :mod:`oauthsign.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from oauthsign import __version__
from oauthsign.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="oauthsign",
    help="Sign and send OAuth 1.0a requests.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"oauthsign {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output, including signature base strings."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Sign and print requests without sending them."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~oauthsign.output.OutputManager`, attaches
    the log handler, and stores shared options (``profile``, ``dry_run``,
    ``verbose``) in ``ctx.obj`` for the sub-commands.
    """
    from oauthsign.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    configure_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["dry_run"] = dry_run
    ctx.obj["verbose"] = verbose


def register_commands() -> None:
    """Attach the built-in commands to :data:`app`. Safe to call repeatedly."""
    from oauthsign.commands.api import get_command, post_command, stream_command
    from oauthsign.commands.profile import profile_app
    from oauthsign.commands.sign import sign_command

    if getattr(app, "_oauthsign_registered", False):
        return
    app.command("sign")(sign_command)
    app.command("get")(get_command)
    app.command("post")(post_command)
    app.command("stream")(stream_command)
    app.add_typer(profile_app, name="profile", help="Profile management.")
    app._oauthsign_registered = True  # type: ignore[attr-defined]


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from oauthsign.config import get_logs_dir

    logs_dir = get_logs_dir()
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``oauthsign`` console script.

    :class:`~oauthsign.exceptions.OAuthSignError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        register_commands()
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from oauthsign.exceptions import OAuthSignError
        from oauthsign.output import error

        if isinstance(exc, OAuthSignError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
