"""Media Vault CLI - Main entry point."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from media_vault_cli import __version__
from media_vault_cli.config import (
    DEFAULT_CONFIG_TEMPLATE,
    Config,
    get_config_paths,
    load_config,
    load_config_from_file,
)
from media_vault_cli.core.dispatcher import MediaVaultCommand
from media_vault_cli.core.errors import HostError, MediaVaultError
from media_vault_cli.core.models import Action
from media_vault_cli.host.library import LibraryStore
from media_vault_cli.host.vault import FilesystemVault
from media_vault_cli.ui.console import create_console, print_error, print_success, setup_logging

app = typer.Typer(
    name="media-vault",
    help="Protect and unprotect media attachments with Media Vault.",
    no_args_is_help=True,
)
console = create_console()


class State:
    """Global state container for CLI."""

    def __init__(self) -> None:
        self.config: Config = Config()  # Default until loaded


state = State()


def build_command(config: Config) -> MediaVaultCommand:
    """Wire the filesystem library and vault described by the config."""
    library = LibraryStore(config.library_path)
    vault = FilesystemVault(
        library=library,
        uploads_dir=config.uploads_path,
        protected_dir=config.protected_path,
        permissions=config.permissions,
        active=config.vault.active,
    )
    return MediaVaultCommand(
        vault=vault,
        datastore=library,
        console=console,
        show_progress=config.output.progress,
    )


def _run(action: Action, attachment_id: int | None, all_items: bool) -> None:
    """Run an action and turn fatal errors into exit status 1."""
    command = build_command(state.config)
    try:
        command.run(action, attachment_id=attachment_id, all_items=all_items)
    except (MediaVaultError, HostError) as e:
        print_error(console, str(e))
        raise typer.Exit(1) from e


def _print_config_locations(xdg_path: Path, cwd_path: Path) -> None:
    """List where config files are looked up; the local file overrides the global one."""
    console.print("\n[bold]Config locations:[/bold]")
    for label, path in (("Global", xdg_path), ("Local", cwd_path)):
        status = "[green]exists[/green]" if path.exists() else "[dim]not found[/dim]"
        console.print(f"  {label + ':':<8}{escape(str(path))} ({status})")


ID_ARGUMENT_HELP = "The attachment ID"
ALL_OPTION_HELP = "Act on every attachment of the library"


@app.command()
def protect(
    attachment_id: int | None = typer.Argument(None, help=ID_ARGUMENT_HELP, show_default=False),
    all_items: bool = typer.Option(False, "--all", help=ALL_OPTION_HELP),
) -> None:
    """Protect media with Media Vault.

    Examples: media-vault protect 10, media-vault protect --all
    """
    _run("protect", attachment_id, all_items)


@app.command()
def unprotect(
    attachment_id: int | None = typer.Argument(None, help=ID_ARGUMENT_HELP, show_default=False),
    all_items: bool = typer.Option(False, "--all", help=ALL_OPTION_HELP),
) -> None:
    """Unprotect media with Media Vault.

    Examples: media-vault unprotect 10, media-vault unprotect --all
    """
    _run("unprotect", attachment_id, all_items)


# Config subcommand group
config_app = typer.Typer(
    name="config",
    help="Manage Media Vault CLI configuration.",
    no_args_is_help=True,
)
app.add_typer(config_app)


@config_app.command("init")
def config_init(
    global_config: bool = typer.Option(
        True,
        "--global/--local",
        help="Create in XDG config (--global) or current directory (--local)",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config file"),
) -> None:
    """Write the commented default configuration."""
    xdg_path, cwd_path = get_config_paths()
    target = xdg_path if global_config else cwd_path

    if target.exists() and not force:
        print_error(console, f"Config already exists: {target} (use --force to overwrite)")
        raise typer.Exit(1)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(DEFAULT_CONFIG_TEMPLATE)
    except OSError as e:
        print_error(console, f"Cannot write {target}: {e}")
        raise typer.Exit(1) from e

    print_success(console, f"Created {target}")


@config_app.command("show")
def config_show(
    resolved: bool = typer.Option(
        True,
        "--resolved/--raw",
        help="Show merged config (--resolved) or raw file (--raw)",
    ),
) -> None:
    """Display the active configuration and its source."""
    config = state.config
    xdg_path, cwd_path = get_config_paths()

    source_text = str(config._source) if config._source else "[dim]defaults only[/dim]"
    console.print(
        Panel.fit(
            f"[bold]Active config:[/bold] {source_text}",
            title="Configuration Source",
        )
    )

    if resolved:
        table = Table(title="Resolved Configuration", show_header=True)
        table.add_column("Section", style="cyan")
        table.add_column("Key", style="green")
        table.add_column("Value")

        for section_name in ["vault", "library", "output"]:
            section = getattr(config, section_name)
            for key, value in vars(section).items():
                if not key.startswith("_"):
                    table.add_row(section_name, key, str(value))

        for name, permission in config.permissions.items():
            login = "logged in" if permission.logged_in else "public"
            table.add_row("permissions", name, f"{permission.description} ({login})")

        console.print(table)
    else:
        if config._source and config._source.exists():
            console.print(config._source.read_text(), markup=False)
        else:
            console.print("[dim]No config file found[/dim]")

    _print_config_locations(xdg_path, cwd_path)


@config_app.command("path")
def config_path() -> None:
    """Show configuration file locations and status."""
    xdg_path, cwd_path = get_config_paths()
    _print_config_locations(xdg_path, cwd_path)


def _version_callback(value: bool) -> None:
    """Print the version and exit before any command runs."""
    if value:
        console.print(f"Media Vault CLI v{__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (overrides default locations)",
        exists=True,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log every move and metadata write",
    ),
) -> None:
    """Media Vault CLI - protect media attachments from direct access."""
    setup_logging(console, verbose=verbose)

    # Load config (custom file or default locations)
    try:
        state.config = load_config_from_file(config_file) if config_file else load_config()
    except ValueError as e:
        console.print(f"[red]Config error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
