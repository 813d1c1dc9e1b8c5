"""
pakman CLI — install and manage paks from a local or HTTP repository.

Usage:
    pakman install widget gadget@1.2.0
    pakman upgrade               # upgrade everything installed
    pakman upgradable
    pakman search wid

Settings are read from pakman.yml in the working directory (see
pakman.config), or from the file given with --config.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pakman.config import DEFAULT_CONFIG_PATH, Config, ConfigError, load_config
from pakman.core.errors import PakError
from pakman.core.listing import search as search_index
from pakman.core.listing import sorted_specs
from pakman.core.manager import Manager
from pakman.core.resilience import ExponentialBackoff, RetryingSource
from pakman.models.pak import InstallSpec, Spec
from pakman.repositories import FSRepository, get_source

console = Console()


def _load(ctx: click.Context) -> Config:
    try:
        config = load_config(ctx.obj["config_path"])
    except ConfigError as e:
        raise click.ClickException(f"Error loading config: {e}") from e

    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    return config


@asynccontextmanager
async def _open_manager(config: Config):
    remote = get_source(config.remote_path, cache_ttl=config.cache_ttl, timeout=config.timeout)
    if config.retries > 0:
        remote = RetryingSource(remote, ExponentialBackoff(max_retries=config.retries))

    try:
        yield Manager(
            local=FSRepository(config.local_path),
            remote=remote,
            logger=logging.getLogger("pakman"),
        )
    finally:
        close = getattr(remote, "aclose", None)
        if close is not None:
            await close()


def _run(ctx: click.Context, action, error_message: str):
    """Run action(manager) on a fresh manager, turning pak errors into CLI errors."""
    config = _load(ctx)

    async def main():
        async with _open_manager(config) as manager:
            return await action(manager)

    try:
        return asyncio.run(main())
    except PakError as e:
        raise click.ClickException(f"{error_message}: {e}") from e


def _print_specs(specs: list[Spec]) -> None:
    if not specs:
        console.print("No packages found.")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID")
    table.add_column("Version")
    table.add_column("Description")
    for spec in specs:
        for version in spec.versions or [spec.current_version]:
            table.add_row(spec.id, version, escape(spec.description))
    console.print(table)


@click.group()
@click.version_option(package_name="pakman")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Configuration file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def cli(ctx, config_path, verbose):
    """pakman — package manager for pak repositories."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = {"config_path": config_path}


@cli.command()
@click.argument("ids", nargs=-1, required=True)
@click.pass_context
def install(ctx, ids):
    """Install one or more packages (ID or ID@VERSION)."""
    specs = [InstallSpec.parse(i) for i in ids]

    async def action(manager: Manager):
        with console.status("[bold cyan]Installing...[/bold cyan]"):
            await manager.install(*specs)

    _run(ctx, action, "Error installing packages")
    console.print(f"[green]Installed {len(specs)} package(s).[/green]")


@cli.command()
@click.argument("ids", nargs=-1, required=True)
@click.pass_context
def uninstall(ctx, ids):
    """Uninstall one or more packages."""

    async def action(manager: Manager):
        await manager.uninstall(*ids)

    _run(ctx, action, "Error uninstalling packages")


@cli.command()
@click.argument("ids", nargs=-1)
@click.pass_context
def upgrade(ctx, ids):
    """Upgrade packages. Without IDs, every installed package is upgraded."""
    specs = [InstallSpec.parse(i) for i in ids]

    async def action(manager: Manager):
        with console.status("[bold cyan]Upgrading...[/bold cyan]"):
            await manager.upgrade(*specs)

    _run(ctx, action, "Error upgrading packages")


@cli.command()
@click.pass_context
def upgradable(ctx):
    """List packages with a newer version available."""

    async def action(manager: Manager):
        return await manager.upgradable()

    result = _run(ctx, action, "Error listing upgradable packages")
    if not result:
        console.print("All packages are up to date.")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID")
    table.add_column("Installed")
    table.add_column("Latest")
    for pak in result:
        table.add_row(pak.id, pak.current_version, pak.latest_version)
    console.print(table)


@cli.command(name="list")
@click.pass_context
def list_(ctx):
    """List all packages in the remote repository."""

    async def action(manager: Manager):
        return await manager.list()

    index = _run(ctx, action, "Error listing packages")
    _print_specs(sorted_specs(index))


@cli.command()
@click.pass_context
def installed(ctx):
    """List installed packages."""

    async def action(manager: Manager):
        return await manager.list_installed()

    manifests = _run(ctx, action, "Error listing installed packages")
    if not manifests:
        console.print("No packages installed.")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID")
    table.add_column("Version")
    for manifest in manifests:
        table.add_row(manifest.id, manifest.version)
    console.print(table)


@cli.command()
@click.argument("query")
@click.pass_context
def search(ctx, query):
    """Search packages by ID."""

    async def action(manager: Manager):
        return await manager.list()

    index = _run(ctx, action, "Error listing packages")
    _print_specs(search_index(index, query))


if __name__ == "__main__":
    cli()
