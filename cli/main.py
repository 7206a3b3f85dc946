"""nativelib CLI - inspect platform mapping and stage bundled native libraries."""
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from nativelib.config import get_config
from nativelib.exceptions import NativeLibError, PlatformError

# Setup logging
logging.basicConfig(
    level=get_config().log_level.upper(),
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True, show_path=False)]
)
logger = logging.getLogger("nativelib")

# Rich console for pretty output
console = Console()

# CLI app
app = typer.Typer(
    name="nativelib",
    help="nativelib - Native Library Loader CLI",
    no_args_is_help=True,
)

config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")


def handle_error(e: Exception) -> None:
    """Handle and display errors nicely."""
    if isinstance(e, (NativeLibError, ValueError)):
        console.print(f"[red]Error:[/red] {e}")
    else:
        console.print(f"[red]Unexpected error:[/red] {e}")
        logger.exception("Unexpected error")
    raise typer.Exit(1)


def _make_loader(bundle: List[Path], context: Optional[str] = None):
    from nativelib.extractors import ContextExtractor, SharedExtractor
    from nativelib.loader import NativeLoader
    from nativelib.resources import ResourceBundle

    resources = ResourceBundle.from_paths(*bundle) if bundle else ResourceBundle.from_sys_path()
    if context:
        extractor = ContextExtractor(context, bundle=resources)
    else:
        extractor = SharedExtractor(bundle=resources)
    return NativeLoader(bundle=resources, extractor=extractor)


# ============================================================================
# Platform Commands
# ============================================================================

@app.command("info")
def info_cmd():
    """Show platform detection results."""
    from nativelib.platform import path_for_platform, resolve_platform
    from nativelib.schemas import SystemSignals
    from nativelib.sysinfo import get_sysinfo

    signals = SystemSignals.current()

    console.print("\n[bold]Platform Information:[/bold]")
    console.print(f"  OS name: {signals.os_name}")
    console.print(f"  Architecture: {signals.arch}")
    console.print(f"  Pointer width: {signals.data_model} (alternate: {signals.vm_bitmode})")

    try:
        platform = resolve_platform(signals)
        console.print(f"  Platform: [cyan]{platform}[/cyan]")
        console.print(f"  Canonical path: {path_for_platform(platform)}")
    except PlatformError as e:
        console.print(f"  Platform: [red]{e}[/red]")

    console.print(f"  Sysinfo: {get_sysinfo()}")
    console.print(f"  Temp root: {get_config().temp_root()}")


@app.command("paths")
def paths_cmd(
    family: Optional[str] = typer.Option(None, "--family", "-f", help="OS family (linux, windows, osx, ...)"),
    arch: Optional[str] = typer.Option(None, "--arch", "-a", help="Architecture (e.g. amd64, aarch64)"),
    bitness: Optional[int] = typer.Option(None, "--bitness", "-b", help="Pointer width (32 or 64)"),
    special: str = typer.Option("", "--special", "-s", help="Extra path qualifier"),
    root: List[str] = typer.Option([], "--root", "-r", help="Extra search root (repeatable)"),
):
    """Show the bundle paths searched for a platform."""
    from nativelib.architectures import normalize_architecture
    from nativelib.mapping import default_search_paths
    from nativelib.platform import guess_bitness_from_architecture, platform_from_values, resolve_platform

    try:
        if family or arch:
            if not (family and arch):
                console.print("[red]Error:[/red] --family and --arch must be given together")
                raise typer.Exit(1)
            if bitness is None:
                bitness = guess_bitness_from_architecture(normalize_architecture(arch))
            platform = platform_from_values(family, arch, bitness, special)
        else:
            platform = resolve_platform()

        paths = default_search_paths(platform, root, get_config().search_root)
    except typer.Exit:
        raise
    except Exception as e:
        handle_error(e)

    table = Table(title=f"Search paths for {platform}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Path", style="cyan")
    for index, path in enumerate(paths, start=1):
        table.add_row(str(index), path or "(bundle root)")
    console.print(table)


# ============================================================================
# Library Commands
# ============================================================================

@app.command("extract")
def extract_cmd(
    name: str = typer.Argument(..., help="Logical library name"),
    bundle: List[Path] = typer.Option([], "--bundle", "-B", help="Bundle directory or archive (repeatable)"),
    root: List[str] = typer.Option([], "--root", "-r", help="Extra search root (repeatable)"),
    context: Optional[str] = typer.Option(None, "--context", "-c", help="Extract into a per-context directory"),
    keep: bool = typer.Option(False, "--keep", "-k", help="Keep the staging directory after exit"),
):
    """Extract a library without loading it."""
    from nativelib.utils import calculate_sha256, format_bytes

    try:
        loader = _make_loader(bundle, context)
        path = loader.stage(name, root)
        if keep:
            loader.extractor.keep()

        console.print(f"[green]✓[/green] Extracted '[bold]{name}[/bold]'")
        console.print(f"  Path: {path}")
        console.print(f"  Size: {format_bytes(path.stat().st_size)}")
        console.print(f"  SHA256: {calculate_sha256(path)}")

    except Exception as e:
        handle_error(e)


@app.command("load")
def load_cmd(
    name: str = typer.Argument(..., help="Logical library name"),
    bundle: List[Path] = typer.Option([], "--bundle", "-B", help="Bundle directory or archive (repeatable)"),
    root: List[str] = typer.Option([], "--root", "-r", help="Extra search root (repeatable)"),
    versioned: Optional[str] = typer.Option(None, "--versioned", "-V", help="Append this distribution's version"),
):
    """Extract and load a library."""
    try:
        loader = _make_loader(bundle)
        if versioned:
            loaded = loader.load_versioned_library(versioned, name, root)
        else:
            loaded = loader.stage_and_load(name, root)
    except Exception as e:
        handle_error(e)

    if not loaded:
        console.print("[yellow]No native library available for this platform.[/yellow]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Library '[bold]{name}[/bold]' loaded.")


@app.command("cleanup")
def cleanup_cmd():
    """Delete staging directories left over from earlier runs."""
    from nativelib.extractors import SharedExtractor

    try:
        extractor = SharedExtractor(cleanup_leftovers=False)
        deleted = extractor.delete_leftover_files()
        console.print(f"Deleted {deleted} leftover staging director{'y' if deleted == 1 else 'ies'}.")

    except Exception as e:
        handle_error(e)


# ============================================================================
# Config Commands
# ============================================================================

@config_app.command("show")
def show_config_cmd():
    """Show current configuration."""
    config = get_config()
    console.print("\n[bold]nativelib Configuration:[/bold]")
    for key, value in config.model_dump().items():
        console.print(f"  {key}: {value}")


@config_app.command("path")
def config_path_cmd():
    """Show configuration file path."""
    from nativelib.config import get_config_manager

    manager = get_config_manager()
    console.print(f"Config file: {manager.config_path}")


# ============================================================================
# Root Commands
# ============================================================================

@app.command("version")
def version_cmd():
    """Show nativelib version."""
    from nativelib import __version__
    console.print(f"nativelib (Native Library Loader) v{__version__}")


def main():
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        sys.exit(0)


if __name__ == "__main__":
    main()
