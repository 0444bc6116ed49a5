"""CLI entry point for gitidm."""

import sys

import click
import typer
from rich.console import Console
from rich.markup import escape

# Shared console instances
console = Console()
err_console = Console(stderr=True, soft_wrap=True)

# Subcommands keep -h/--help; the top level handles them itself
SUBCOMMAND_SETTINGS = {"help_option_names": ["-h", "--help"]}


def print_error(message: str) -> None:
    """Print a fatal diagnostic."""
    err_console.print(f"[red]ERROR:[/red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print an advisory diagnostic; never changes the exit code."""
    err_console.print(f"[yellow]WARNING:[/yellow] {escape(message)}")


# Create main app
app = typer.Typer(
    name="gitidm",
    help="Manage multiple git identities and switch the global one",
    add_completion=False,
    context_settings={"help_option_names": []},
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    show_version: bool = typer.Option(
        False, "--version", "-v", is_eager=True, help="Show version and exit"
    ),
    show_help: bool = typer.Option(
        False, "--help", "-h", is_eager=True, help="Show usage and exit"
    ),
) -> None:
    """Manage multiple git identities and switch the global one."""
    if show_version:
        main.version()
        raise typer.Exit(0)

    if show_help or ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(1)

    if ctx.invoked_subcommand not in ("version", "help"):
        # Loaded once per invocation; subcommands read it from ctx.obj
        ctx.obj = main.load_settings()
        main.warn_if_git_outdated(ctx.obj)


# Import and register command modules
from . import main

# Register main commands
app.command(context_settings=SUBCOMMAND_SETTINGS)(main.active)
app.command(context_settings=SUBCOMMAND_SETTINGS)(main.add)
app.command("list", context_settings=SUBCOMMAND_SETTINGS)(main.list_identities)
app.command("ls", hidden=True, context_settings=SUBCOMMAND_SETTINGS)(
    main.list_identities
)
app.command(context_settings=SUBCOMMAND_SETTINGS)(main.remove)
app.command("rm", hidden=True, context_settings=SUBCOMMAND_SETTINGS)(main.remove)
app.command(context_settings=SUBCOMMAND_SETTINGS)(main.use)
app.command(context_settings=SUBCOMMAND_SETTINGS)(main.uninstall)
app.command(context_settings=SUBCOMMAND_SETTINGS)(main.version)
app.command("help")(main.help_command)


def cli_main() -> None:
    """Main entry point.

    Usage errors exit with status 1 rather than click's default of 2.
    """
    try:
        exit_code = app(standalone_mode=False)
    except click.UsageError as e:
        print_error(e.format_message())
        sys.exit(1)
    except click.ClickException as e:
        print_error(e.format_message())
        sys.exit(e.exit_code)
    except click.Abort:
        print_error("Aborted")
        sys.exit(1)
    sys.exit(exit_code or 0)


if __name__ == "__main__":
    cli_main()
