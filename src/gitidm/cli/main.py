"""Core CLI commands: active, add, list, remove, use, uninstall, version."""

import os
import shutil
import sys
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import typer
from rich.markup import escape

from . import console, print_error, print_warning
from .. import __version__
from ..audit import AuditLogger
from ..config import GitIdmConfig, load_config
from ..connectors.gitconfig import parse_version
from ..errors import ConfigError, DriftError, GitIdmError
from ..identities.models import IdentityFields, RESERVED_ID
from ..identities.repository import group_entries


def load_settings() -> GitIdmConfig:
    """Load settings, exiting with an ERROR line if they are unusable."""
    try:
        return load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1)


def _engine(config: GitIdmConfig):
    from ..identities import get_activation_engine

    return get_activation_engine(config)


def _audit(config: GitIdmConfig) -> AuditLogger:
    try:
        return AuditLogger(config.audit, uuid.uuid4().hex[:8])
    except OSError as e:
        print_error(f"Cannot create audit log directory {config.audit.log_dir}: {e}")
        raise typer.Exit(1)


def _print_listing(
    grouped: Dict[str, List[Tuple[str, str]]], active_id: Optional[str] = None
) -> None:
    """Print each identity as a header line followed by its fields."""
    for identity_id, fields in grouped.items():
        status = " [green]● active[/green]" if identity_id == active_id else ""
        console.print(f"[bold cyan]{escape(identity_id)}[/bold cyan]{status}")
        for field, value in fields:
            console.print(f"  [dim]{field}:[/dim] {escape(value)}")


def warn_if_git_outdated(config: GitIdmConfig) -> None:
    """Warn when git predates core.sshCommand support."""
    found = _engine(config).store.version()
    required = parse_version(config.git.min_version)
    if found and required and found < required:
        print_warning(
            f"git {'.'.join(map(str, found))} is older than {config.git.min_version}; "
            "core.sshCommand will be ignored"
        )


def active(ctx: typer.Context) -> None:
    """Show the active identity and check it against live git config."""
    engine = _engine(ctx.obj)

    drift = None
    try:
        report = engine.active()
    except DriftError as e:
        report, drift = e.report, e
    except GitIdmError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not report.is_active:
        console.print("[yellow]No identity active[/yellow]")
        return

    console.print("\n[bold cyan]Active Identity[/bold cyan]\n")
    if report.listing:
        _print_listing(group_entries(report.listing), report.active_id)
    else:
        console.print(
            f"[bold cyan]{escape(report.active_id)}[/bold cyan] [dim](no stored fields)[/dim]"
        )

    if report.agent_warning:
        print_warning(report.agent_warning)

    for discrepancy in report.discrepancies:
        print_warning(discrepancy.message)

    if drift is not None:
        print_error(str(drift))
        raise typer.Exit(1)

    console.print("\n[green]✓[/green] Live git config matches the active identity")


def add(
    ctx: typer.Context,
    identity_id: str = typer.Argument(..., metavar="ID", help="Identity id"),
    name: Optional[str] = typer.Option(None, "--name", help="Commit author name"),
    email: Optional[str] = typer.Option(None, "--email", help="Commit author email"),
    key: Optional[Path] = typer.Option(
        None, "--key", help="Private key file to authenticate with"
    ),
    ssh_command: Optional[str] = typer.Option(
        None, "--ssh-command", help="Custom ssh command to authenticate with"
    ),
) -> None:
    """Create an identity, or update fields of an existing one."""
    if identity_id == RESERVED_ID:
        print_error(f"'{RESERVED_ID}' is reserved and cannot be used as an identity id")
        raise typer.Exit(1)

    if key is not None and ssh_command is not None:
        print_error("--key and --ssh-command are mutually exclusive")
        raise typer.Exit(1)

    key_path = None
    if key is not None:
        key = key.expanduser().absolute()
        if not key.is_file() or not os.access(key, os.R_OK):
            print_error(f"Key file not readable: {key}")
            raise typer.Exit(1)
        key_path = str(key)

    engine = _engine(ctx.obj)
    audit = _audit(ctx.obj)
    repository = engine.repository
    fields = IdentityFields(
        name=name, email=email, ssh_key=key_path, ssh_command=ssh_command
    )

    try:
        existed = repository.exists(identity_id)
        repository.upsert(identity_id, fields)
    except GitIdmError as e:
        audit.log_failure("add", e)
        print_error(str(e))
        raise typer.Exit(1)

    audit.log_event(
        "add",
        {
            "success": True,
            "identity_id": identity_id,
            "created": not existed,
            "fields": sorted(fields.to_store()),
        },
    )
    verb = "Updated" if existed else "Created"
    console.print(f"[green]✓[/green] {verb} identity: [cyan]{escape(identity_id)}[/cyan]")


def list_identities(ctx: typer.Context) -> None:
    """List all stored identities."""
    engine = _engine(ctx.obj)

    try:
        entries = engine.repository.list()
        active_id = engine.active_id()
    except GitIdmError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not entries:
        console.print("[yellow]No identities found[/yellow]")
        return

    _print_listing(group_entries(entries), active_id)


def remove(
    ctx: typer.Context,
    identity_id: str = typer.Argument(
        ..., metavar="ID", help=f"Identity id, or '{RESERVED_ID}' to remove every identity"
    ),
) -> None:
    """Remove an identity, or all of them."""
    engine = _engine(ctx.obj)
    audit = _audit(ctx.obj)

    try:
        report = engine.repository.remove(identity_id)
    except GitIdmError as e:
        audit.log_failure("remove", e)
        print_error(str(e))
        raise typer.Exit(1)

    audit.log_event(
        "remove",
        {"success": not report.failed, "removed": report.removed, "failed": report.failed},
    )

    if not report.outcomes:
        console.print("[yellow]No identities to remove[/yellow]")
        return

    for removed_id in report.removed:
        console.print(f"[green]✓[/green] Removed identity: [cyan]{escape(removed_id)}[/cyan]")
    for failed_id, error in report.failed.items():
        print_error(f"Failed to remove '{failed_id}': {error}")

    if report.failed:
        raise typer.Exit(1)


def use(
    ctx: typer.Context,
    identity_id: str = typer.Argument(..., metavar="ID", help="Identity id to activate"),
) -> None:
    """Apply an identity to the global git config."""
    engine = _engine(ctx.obj)
    audit = _audit(ctx.obj)

    try:
        result = engine.use(identity_id)
    except GitIdmError as e:
        audit.log_failure("use", e)
        print_error(str(e))
        raise typer.Exit(1)

    audit.log_event(
        "use",
        {"success": True, "identity_id": identity_id, "applied": sorted(result.applied)},
    )

    console.print(f"[green]✓[/green] Now using identity: [cyan]{escape(identity_id)}[/cyan]")
    for live_key, value in result.applied.items():
        console.print(f"  [dim]{live_key}:[/dim] {escape(value)}")

    if result.agent_warning:
        print_warning(result.agent_warning)


def uninstall(ctx: typer.Context) -> None:
    """Remove every identity and clear the active identity."""
    engine = _engine(ctx.obj)
    audit = _audit(ctx.obj)

    try:
        report = engine.repository.remove_all()
        for removed_id in report.removed:
            console.print(f"[green]✓[/green] Removed identity: [cyan]{escape(removed_id)}[/cyan]")
        for failed_id, error in report.failed.items():
            print_error(f"Failed to remove '{failed_id}': {error}")

        if engine.clear_active():
            console.print("[green]✓[/green] Cleared active identity")
    except GitIdmError as e:
        audit.log_failure("uninstall", e)
        print_error(str(e))
        raise typer.Exit(1)

    audit.log_event(
        "uninstall",
        {"success": not report.failed, "removed": report.removed, "failed": report.failed},
    )

    executable = shutil.which("gitidm") or sys.argv[0]
    console.print("\n[yellow]Next step:[/yellow]")
    console.print(f"Delete the gitidm executable manually: [cyan]{escape(executable)}[/cyan]")

    if report.failed:
        raise typer.Exit(1)


def version() -> None:
    """Show version information."""
    console.print(f"[cyan]gitidm[/cyan] version [green]{__version__}[/green]")


def help_command(ctx: typer.Context) -> None:
    """Show usage and exit."""
    typer.echo(ctx.parent.get_help())
    raise typer.Exit(1)
