"""Main CLI entry point for the OpenAPI inliner."""

import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from specinliner.config import CONFIG_FILENAME, InlinerSettings, load_settings, save_settings
from specinliner.core.loader import load_spec
from specinliner.inliner.manager import check_refs, inline_spec_file

app = typer.Typer(
    name="spec-inliner",
    help="Inline $ref components of OpenAPI specifications",
    no_args_is_help=True,
)
console = Console()


def default_output_path(input_path: Path) -> Path:
    """
    Derive the output file next to the input.

    Args:
        input_path: The specification being inlined

    Returns:
        ``<stem>.inlined<suffix>`` in the same directory
    """
    return input_path.with_name(f"{input_path.stem}.inlined{input_path.suffix}")


def configure_logging(settings: InlinerSettings, verbose: bool = False) -> None:
    """Send loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else settings.log_level)


@app.command()
def inline(
    input_file: str = typer.Argument(..., help="OpenAPI specification (.json, .yaml or .yml)"),
    output: str = typer.Option(
        None,
        "--output",
        "-o",
        help="Where to write the inlined spec (defaults to <name>.inlined.<ext>)",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Never substitute same-named components for circular references",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug diagnostics"),
) -> None:
    """Inline every component reference under paths and empty components."""
    input_path = Path(input_file).resolve()
    output_path = Path(output).resolve() if output else default_output_path(input_path)

    try:
        settings = load_settings(input_path.parent)
    except Exception as e:
        console.print(f"[bold red]✗[/bold red] Invalid configuration: {e}")
        raise typer.Exit(1)
    if strict:
        settings.recover_circular = False
    configure_logging(settings, verbose)

    console.print()
    console.print("[bold blue]OpenAPI Inliner[/bold blue]")
    console.print(f"[dim]Input: {input_path}[/dim]")
    console.print()

    with console.status("[bold yellow]Inlining components..."):
        try:
            summary = inline_spec_file(input_path, output_path, settings=settings)
        except Exception as e:
            console.print(f"[bold red]✗[/bold red] Failed to inline spec: {e}")
            raise typer.Exit(1)

    console.print(f"[bold green]✓[/bold green] Inlined specification written to: {output_path.name}")

    for location, pointer in summary.dangling:
        console.print(f"[bold yellow]![/bold yellow] Unresolved $ref {pointer} at {location}")
    for location, pointer in summary.circular:
        console.print(f"[bold yellow]![/bold yellow] Circular reference {pointer} at {location}")

    if summary.is_self_contained:
        console.print("[bold green]✓ Success![/bold green] The specification is self-contained.")
    console.print()


@app.command()
def check(
    input_file: str = typer.Argument(..., help="OpenAPI specification (.json, .yaml or .yml)"),
) -> None:
    """List the $ref pointers under paths and whether they resolve."""
    input_path = Path(input_file).resolve()

    try:
        settings = load_settings(input_path.parent)
    except Exception as e:
        console.print(f"[bold red]✗[/bold red] Invalid configuration: {e}")
        raise typer.Exit(1)
    configure_logging(settings)

    try:
        spec, _ = load_spec(input_path)
    except Exception as e:
        console.print(f"[bold red]✗[/bold red] Failed to load spec: {e}")
        raise typer.Exit(1)

    refs = check_refs(spec)
    dangling = 0
    for location, pointer, resolves in refs:
        if resolves:
            console.print(f"[bold green]✓[/bold green] {pointer} [dim]({location})[/dim]")
        else:
            dangling += 1
            console.print(f"[bold red]✗[/bold red] {pointer} [dim]({location})[/dim]")

    console.print(f"{len(refs)} reference(s), {dangling} unresolved")
    if dangling:
        raise typer.Exit(1)


@app.command()
def init(
    target_dir: str = typer.Argument(".", help="Project directory for the settings file"),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Never substitute same-named components for circular references",
    ),
    inline_on_save: bool = typer.Option(
        False,
        "--inline-on-save",
        help="Inline all components whenever the specification is saved",
    ),
) -> None:
    """Write a .spec-inliner.yaml with the current settings (kept if it exists)."""
    target_path = Path(target_dir).resolve()

    try:
        settings = load_settings(target_path)
    except Exception as e:
        console.print(f"[bold red]✗[/bold red] Invalid configuration: {e}")
        raise typer.Exit(1)
    if strict:
        settings.recover_circular = False
    if inline_on_save:
        settings.inline_components_on_save = True

    if save_settings(target_path, settings):
        console.print(f"[bold green]✓[/bold green] Created {CONFIG_FILENAME}")
    else:
        console.print(f"[bold blue]✓[/bold blue] {CONFIG_FILENAME} already exists (preserved)")


if __name__ == "__main__":
    app()
