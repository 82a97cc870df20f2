"""CLI for per-branch memory bank management (``mb``).

Verbs operate on the project containing the current directory (or
``-C <dir>``). The ``hook`` group holds the git hook entry points; those
always exit 0 so a memory bank problem never blocks a git operation.
"""

import logging
from pathlib import Path

import click
from git.exc import GitCommandError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import ConfigError, Settings, load_settings
from .errors import BankError, MissingArgument, UnknownCommand
from .manager import BankManager
from .models import GitignoreStatus, NewBranchFromParent, NonBranchCheckout
from .paths import resolve_context

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("membank")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(settings: Settings, verbose: bool = False) -> None:
    """Log to <central-root>/membank.log and to stderr.

    Safe to call more than once; previous handlers are replaced.
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    log_file = settings.resolved_log_file
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
    except OSError as e:
        err_console.print(f"[yellow]![/yellow] Cannot write log file {log_file}: {e}")
    else:
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    stderr_handler = RichHandler(console=err_console, show_time=False, show_path=False)
    stderr_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.addHandler(stderr_handler)


class BankGroup(click.Group):
    """Command group that exits 1 (not 2) on an unknown verb."""

    def resolve_command(self, ctx, args):
        name = args[0] if args else ""
        if name and not name.startswith("-") and self.get_command(ctx, name) is None:
            raise click.ClickException(f"{UnknownCommand(name)}\nRun 'mb help' for usage information.")
        return super().resolve_command(ctx, args)


def _manager(ctx: click.Context) -> BankManager:
    """Resolve settings and project context once per invocation."""
    obj = ctx.find_object(dict)
    if "manager" not in obj:
        try:
            settings = load_settings(obj.get("config_path"))
        except ConfigError as e:
            raise click.ClickException(str(e))
        setup_logging(settings, obj.get("verbose", False))
        context, oracle = resolve_context(settings, obj.get("directory"))
        obj["manager"] = BankManager(settings, context, oracle)
    return obj["manager"]


def _fail(e: Exception) -> None:
    console.print(f"[red]Error:[/red] {e}")
    click.get_current_context().exit(1)


def _mark(ok: bool) -> str:
    return "✅" if ok else "❌"


def _print_gitignore(status: GitignoreStatus) -> None:
    if status.ok:
        console.print("✅ Memory bank is properly gitignored")
    else:
        console.print("⚠️ Warning: Memory bank may not be gitignored!")
        console.print("Run 'mb fix-gitignore' to fix this issue.")


@click.group(cls=BankGroup, invoke_without_command=True)
@click.option(
    "-C", "--directory",
    type=click.Path(path_type=Path, file_okay=False),
    help="Run as if started in this directory",
)
@click.option(
    "--config", "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Settings file (default: $MEMBANK_CONFIG or ~/.config/membank/config.yaml)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, directory, config_path, verbose):
    """Memory Bank Manager - per-branch memory banks outside version control."""
    ctx.ensure_object(dict)
    ctx.obj["directory"] = directory
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose
    if ctx.invoked_subcommand is None:
        ctx.invoke(status)


@cli.command()
@click.pass_context
def status(ctx):
    """Show identity, bank locations and gitignore status."""
    st = _manager(ctx).status()

    console.print("[bold]Memory Bank Status:[/bold]")
    console.print(f"Project: [cyan]{st.identity.project}[/cyan]")
    console.print(f"Domain: [cyan]{st.identity.domain}[/cyan]")
    console.print(f"Branch: [cyan]{st.identity.branch}[/cyan]")
    console.print(f"Project Path: {st.root}")
    console.print(f"Central Path: {st.central_path}")
    console.print(f"Project Memory Bank: {_mark(st.local_exists)} {'Exists' if st.local_exists else 'Not found'}")
    console.print(f"Central Memory Bank: {_mark(st.central_exists)} {'Exists' if st.central_exists else 'Not found'}")
    if st.gitignore.ok:
        console.print("Gitignore Status: ✅ Properly ignored")
    else:
        console.print("Gitignore Status: ⚠️ May not be ignored")
    if st.missing_hooks:
        console.print(f"Git Hooks: [yellow]missing {', '.join(st.missing_hooks)}[/yellow] in {st.hooks_dir}")
    else:
        console.print(f"Git Hooks: ✅ Installed in {st.hooks_dir}")


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Overwrite an existing bank without asking")
@click.pass_context
def create(ctx, yes):
    """Create a new memory bank for the current branch."""
    manager = _manager(ctx)
    central = manager.central()
    if central.is_dir() and any(central.iterdir()) and not yes:
        console.print(f"[yellow]⚠  A memory bank already exists at {central}.[/yellow]")
        if not click.confirm("Overwrite it with empty templates?", default=False):
            console.print("[dim]Cancelled.[/dim]")
            return

    try:
        path = manager.create()
    except (BankError, OSError) as e:
        _fail(e)
    console.print(f"[green]✓[/green] Created new memory bank at {path}")


def _prompt_seed(target: str, current: str) -> str:
    console.print(f"Memory bank for [cyan]{target}[/cyan] does not exist.")
    console.print("Options:")
    console.print("  1. Create new memory bank (default)")
    console.print(f"  2. Copy from current branch ({current})")
    choice = click.prompt("Enter choice", default="1").strip()
    if choice == "2":
        return "copy"
    if choice != "1":
        console.print("[yellow]Invalid choice. Creating new memory bank.[/yellow]")
    return "create"


@cli.command()
@click.argument("branch", required=False)
@click.option("--copy", "seed", flag_value="copy", help="Seed a missing bank from the current branch")
@click.option("--new", "seed", flag_value="create", help="Seed a missing bank from templates")
@click.pass_context
def switch(ctx, branch, seed):
    """Save the current bank and load BRANCH's bank.

    Examples:
        mb switch feature-login
        mb switch feature-login --copy
    """
    manager = _manager(ctx)
    chooser = (lambda target, current: seed) if seed else _prompt_seed
    try:
        target = manager.switch(branch, chooser)
    except (BankError, OSError) as e:
        _fail(e)
    console.print(f"[green]✓[/green] Switched to memory bank for {target.project} ({target.branch})")


@cli.command()
@click.pass_context
def sync(ctx):
    """Sync the project bank with the central bank (both directions)."""
    manager = _manager(ctx)
    try:
        manager.sync_all()
    except (BankError, OSError) as e:
        _fail(e)
    identity = manager.identity
    console.print(f"[green]✓[/green] Synchronized memory bank for {identity.project} ({identity.branch})")


@cli.command("list")
@click.option("--archived", is_flag=True, help="List archived banks instead")
@click.pass_context
def list_banks(ctx, archived):
    """List memory banks stored for this project."""
    manager = _manager(ctx)
    names = manager.list_banks(archived=archived)

    label = "Archived Memory Banks" if archived else "Available Memory Banks"
    console.print(f"[bold]{label} for {manager.identity.project}:[/bold]")
    if not names:
        console.print("None found.")
        return

    table = Table(show_header=False, box=None)
    table.add_column("Branch", style="cyan")
    table.add_column("")
    for name in names:
        table.add_row(name, "[green]← current[/green]" if name == manager.identity.branch else "")
    console.print(table)


@cli.command()
@click.argument("branch", required=False)
@click.pass_context
def archive(ctx, branch):
    """Move a branch's central bank into the archive."""
    manager = _manager(ctx)
    try:
        path = manager.archive(branch)
    except (BankError, OSError) as e:
        _fail(e)
    console.print(f"[green]✓[/green] Archived memory bank for {branch or manager.identity.branch}")
    console.print(f"[dim]   {path}[/dim]")


@cli.command()
@click.argument("branch", required=False)
@click.pass_context
def merge(ctx, branch):
    """Merge BRANCH's memory bank into the current one."""
    manager = _manager(ctx)
    try:
        if not branch:
            raise MissingArgument("Source branch", "mb merge <source_branch>")
        manager.merge(branch)
    except (BankError, OSError) as e:
        _fail(e)
    console.print(f"[green]✓[/green] Merged memory bank from {branch} into {manager.identity.branch}")


@cli.command()
@click.argument("branch", required=False)
@click.pass_context
def rebase(ctx, branch):
    """Rebase the current memory bank on top of BRANCH's."""
    manager = _manager(ctx)
    try:
        if not branch:
            raise MissingArgument("Base branch", "mb rebase <base_branch>")
        manager.rebase(branch)
    except (BankError, OSError) as e:
        _fail(e)
    console.print(f"[green]✓[/green] Rebased memory bank from {branch} into {manager.identity.branch}")


@cli.command()
@click.pass_context
def check(ctx):
    """Check that the project bank is gitignored."""
    _print_gitignore(_manager(ctx).check_gitignore())


@cli.command("fix-gitignore")
@click.pass_context
def fix_gitignore(ctx):
    """Add the memory bank to project and global gitignore files."""
    manager = _manager(ctx)
    try:
        project_changed, global_changed = manager.fix_gitignore()
    except (OSError, GitCommandError) as e:
        _fail(e)
    if project_changed:
        console.print(f"Added /memory-bank to {manager.root / '.gitignore'}")
    if global_changed:
        console.print(f"Added memory-bank/ to {manager.settings.global_gitignore}")
    console.print("[green]✓[/green] Fixed gitignore settings")


@cli.command("help")
@click.pass_context
def help_(ctx):
    """Show this help."""
    click.echo(ctx.parent.get_help())


# --- Git hook entry points ---


@cli.group(cls=BankGroup)
def hook():
    """Git hook entry points (always exit 0)."""
    pass


def _run_hook(ctx: click.Context, name: str, call) -> None:
    try:
        result = call(_manager(ctx))
    except (click.ClickException, BankError, OSError, UnicodeError, GitCommandError) as e:
        message = e.format_message() if isinstance(e, click.ClickException) else str(e)
        err_console.print(f"[yellow]![/yellow] memory bank {name} skipped: {message}")
        return
    logger.debug(f"{name} finished: {result!r}")


@hook.command("pre-checkout")
@click.argument("args", nargs=-1)
@click.pass_context
def hook_pre_checkout(ctx, args):
    """Flush the current bank before the branch changes."""
    _run_hook(ctx, "pre-checkout", lambda m: m.pre_checkout())


@hook.command("post-checkout")
@click.argument("prev_ref", required=False, default="")
@click.argument("new_ref", required=False, default="")
@click.argument("branch_flag", required=False, default="1")
@click.pass_context
def hook_post_checkout(ctx, prev_ref, new_ref, branch_flag):
    """Load (or inherit) the bank for the branch just checked out."""

    def call(manager):
        result = manager.post_checkout(prev_ref, new_ref, branch_flag)
        if isinstance(result, NewBranchFromParent):
            err_console.print(f"Memory bank for {manager.identity.branch} created from {result.parent}")
        elif result is not None and not isinstance(result, NonBranchCheckout):
            err_console.print(f"Switched to memory bank for {manager.identity.branch}")
        return result

    _run_hook(ctx, "post-checkout", call)


@hook.command("post-merge")
@click.argument("args", nargs=-1)
@click.pass_context
def hook_post_merge(ctx, args):
    """Record a merge in the current bank."""
    _run_hook(ctx, "post-merge", lambda m: m.post_merge())


@hook.command("post-rebase")
@click.argument("args", nargs=-1)
@click.pass_context
def hook_post_rebase(ctx, args):
    """Record a rebase and fold in the base branch's bank."""
    _run_hook(ctx, "post-rebase", lambda m: m.post_rebase())


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
