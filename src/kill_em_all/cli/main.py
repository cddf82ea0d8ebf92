"""Command-line entry point: kill-em-all <pid> [options]."""

import asyncio
import sys
from typing import List, Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ..backends import resolve_signal, signal_name
from ..config import load_settings
from ..controller import terminate_tree
from ..errors import KillEmAllError
from ..utils.rich_logging import TOOL_NAME, setup_logging

USAGE = (
    f"Usage: {TOOL_NAME} <pid> [--signal <signal>] [--timeout <ms>] "
    "[--force-kill-after-timeout] [--force-kill-timeout <ms>]"
)

err_console = Console(stderr=True)


class SignalType(click.ParamType):
    """Signal name (SIGINT, int) or number."""
    name = "signal"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value
        try:
            return resolve_signal(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


@click.command(
    name=TOOL_NAME,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.argument("pid", type=click.IntRange(min=1))
@click.option("--signal", "-s", "sig", type=SignalType(), help="Signal to send first (default: SIGTERM)")
@click.option("--timeout", "-t", type=click.FloatRange(min=0), help="Graceful phase timeout in ms (default: 5000)")
@click.option("--force-kill-after-timeout", "-f", "force_kill", is_flag=True,
              help="Force kill survivors after the timeout (default)")
@click.option("--no-force-kill", is_flag=True, help="Fail instead of force killing after the timeout")
@click.option("--force-kill-timeout", "-F", type=click.FloatRange(min=0),
              help="Forceful phase timeout in ms (default: same as --timeout)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="YAML file with default settings")
def cli(pid, sig, timeout, force_kill, no_force_kill, force_kill_timeout, config_path):
    """Kill a process and all of its descendants, then wait for them to exit."""
    logger = setup_logging()

    try:
        settings = load_settings(config_path)
    except (OSError, ValueError) as e:
        raise click.UsageError(f"Invalid config: {e}")

    if sig is None:
        try:
            sig = resolve_signal(settings.signal)
        except ValueError as e:
            raise click.UsageError(f"Invalid config: {e}")

    escalate = None
    if force_kill:
        escalate = True
    if no_force_kill:
        escalate = False

    try:
        options = settings.to_options(
            graceful_timeout_ms=timeout,
            escalate_on_timeout=escalate,
            forceful_timeout_ms=force_kill_timeout,
        )
    except ValidationError as e:
        details = "; ".join(error["msg"] for error in e.errors())
        raise click.BadParameter(details)

    logger.debug(
        f"Killing tree of {pid} with {signal_name(sig)} "
        f"(timeout {options.graceful_timeout_ms:g}ms, "
        f"force kill {'on' if options.escalate_on_timeout else 'off'})"
    )

    try:
        asyncio.run(terminate_tree(pid, sig, options, logger=logger))
    except KillEmAllError as e:
        raise click.ClickException(str(e))


def _print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)


def main(argv: Optional[List[str]] = None) -> None:
    """Console script entry point. Exit codes: 0 ok/help, 1 bad arguments or failure."""
    args = sys.argv[1:] if argv is None else list(argv)

    if not args:
        click.echo(USAGE)
        sys.exit(0)

    try:
        exit_code = cli.main(args=args, prog_name=TOOL_NAME, standalone_mode=False)
    except click.UsageError as e:
        _print_error(e.format_message())
        click.echo(USAGE)
        sys.exit(1)
    except click.ClickException as e:
        _print_error(e.format_message())
        sys.exit(1)
    except click.exceptions.Abort:
        _print_error("Aborted")
        sys.exit(1)

    # standalone_mode=False returns the exit code for --help and None otherwise
    sys.exit(exit_code if isinstance(exit_code, int) else 0)


if __name__ == "__main__":
    main()
