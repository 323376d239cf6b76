"""CLI entry point."""

import asyncio
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from agentx.agent import (
    PERMISSION_MODES,
    Permission,
    PermissionManager,
    set_permission_manager,
)
from agentx.config import Config
from agentx.core import EventBus, EventLogger, get_console, set_debug
from agentx.generate import GenerateOptions, GenerateResult, generate
from agentx.hooks import HookBlockedError, get_hook_registry, load_hooks
from agentx.provider import ProviderError, get_provider
from agentx.tools import GeneratedFile


console = Console()


def show_files(files: list[GeneratedFile]) -> None:
    """List generated files."""
    if not files:
        return
    console.print(f"\n[bold]Files ({len(files)})[/bold]")
    for file in files:
        suffix = f" [dim]- {file.description}[/dim]" if file.description else ""
        console.print(f"  [green]+[/green] {file.path}{suffix}")


async def write_files(
    files: list[GeneratedFile], output_dir: Path, permissions: PermissionManager
) -> int:
    """Write files under output_dir after a permission check. Returns the count written."""
    written = 0
    root = output_dir.resolve()
    for file in files:
        target = (root / file.path).resolve()
        if not target.is_relative_to(root):
            console.print(f"[red]Refused (outside output dir):[/red] {file.path}")
            continue
        permission = await permissions.check_file_write(file.path)
        if permission != Permission.ALLOW:
            console.print(f"[yellow]Skipped ({permission.value}):[/yellow] {file.path}")
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(file.content, encoding="utf-8")
        written += 1
    return written


@click.group()
@click.version_option()
def cli() -> None:
    """agentx - agentic code generation with tools, permissions and hooks."""
    pass


@cli.command()
@click.argument("task")
@click.option(
    "--mode",
    type=click.Choice(PERMISSION_MODES),
    default=None,
    help="Permission mode (default: from config)",
)
@click.option(
    "--max-iterations",
    type=int,
    default=None,
    help="Maximum provider calls for this run",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Report edits without writing them",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug output (permission decisions, hooks, loop steps)",
)
@click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Project directory tools operate in",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Write generated files under this directory",
)
def run(
    task: str,
    mode: str | None,
    max_iterations: int | None,
    dry_run: bool,
    debug: bool,
    cwd: str | None,
    output_dir: str | None,
) -> None:
    """Run a single generation task."""
    cwd = os.path.abspath(cwd or os.getcwd())
    config = Config(cwd)

    # CLI overrides
    if mode:
        config.set("permission_mode", mode)
    if dry_run:
        config.set("dry_run", True)
    if debug:
        config.set("debug", True)
    set_debug(bool(config.get("debug")))

    permissions = PermissionManager.from_config(config)
    set_permission_manager(permissions)

    hooks = get_hook_registry()
    load_hooks(config, hooks)

    bus = EventBus()
    logger = EventLogger(console=get_console(), verbose=bool(config.get("debug")))
    logger.attach(bus)

    if config.get("dry_run"):
        console.print("[yellow]Dry run: edits will not be written[/yellow]\n")

    try:
        provider = get_provider(config.get("provider", "claude"), config)
        options = GenerateOptions(
            task=task,
            cwd=cwd,
            config=config,
            provider=provider,
            max_iterations=max_iterations,
            permission_manager=permissions,
            hook_registry=hooks,
        )
        result: GenerateResult = asyncio.run(generate(options, on_progress=bus.publish))
    except HookBlockedError as e:
        console.print(f"\n[red bold]Blocked by {e.event} hook[/red bold]")
        console.print(f"[yellow]{e.message}[/yellow]")
        sys.exit(1)
    except ProviderError as e:
        console.print("\n[red bold]Provider Error[/red bold]")
        console.print(f"[yellow]{str(e)}[/yellow]")
        console.print("[dim]Please check your connection and API key.[/dim]")
        sys.exit(1)
    finally:
        logger.detach()

    if result.content:
        console.print()
        console.print(Markdown(result.content))

    if result.follow_up:
        console.print(Panel(result.follow_up, title="Question", border_style="cyan"))

    show_files(result.files)

    if output_dir and result.files:
        written = asyncio.run(write_files(result.files, Path(output_dir), permissions))
        console.print(f"\n[green]Wrote {written} file(s) to {output_dir}[/green]")

    console.print(
        f"\n[dim]{result.iterations} iteration(s), {result.tokens_used:,} tokens[/dim]"
    )


if __name__ == "__main__":
    cli()
