"""Demo data command line.

Sets up demo clients, fills them with generated people, and removes them
again, against the hosted store configured through ``FLOWS_STORE_*``.

Usage:
    flows-demo setup run [--force] [--verbose]
    flows-demo setup status
    flows-demo populate run [--keep-existing] [--count N] [--batch-size N]
                            [--resume-batch N]
    flows-demo reset run [--force] [--reset-files]

Every command takes ``--client CODE``; without it the client selected in
the persisted settings is used, then ``FLOWS_DEMO_DEFAULT_CLIENT_CODE``.

Exit status is 0 on success and 1 on any failure. Summaries go to stdout;
logs and tracebacks go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Callable, Sequence
from functools import partial
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
)
from rich.prompt import Confirm
from rich.table import Table

from demo.application.generator import DemoDataGenerator
from demo.application.services import (
    DemoPopulationService,
    DemoSetupService,
)
from demo.ports.exceptions import BatchInsertError, DemoClientNotFoundError
from infrastructure.logging import configure_logging
from infrastructure.remote_store import PostgrestRemoteStore
from infrastructure.settings import (
    DemoSettings,
    get_demo_settings,
    get_remote_store_settings,
)
from infrastructure.settings_blob import SettingsBlobStore
from people.application.queries import PEOPLE
from shared_kernel.remote_store import IRemoteStore

console = Console()
err_console = Console(stderr=True)

StoreFactory = Callable[[], IRemoteStore]


def build_parser() -> argparse.ArgumentParser:
    """Build the ``flows-demo`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="flows-demo",
        description="Set up, populate and reset demo clients",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s setup run
  %(prog)s setup status --client meridian-brands
  %(prog)s populate run --count 1200 --batch-size 100
  %(prog)s populate run --keep-existing --resume-batch 6
  %(prog)s reset run --force --reset-files
        """,
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Environment file to load before reading settings (default: .env)",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--client", default=None, help="Demo client code")
    common.add_argument(
        "--settings-path",
        type=Path,
        default=None,
        help="Persisted settings file (default: FLOWS_DEMO_SETTINGS_PATH)",
    )
    common.add_argument(
        "--verbose", action="store_true", help="Show debug logs on stderr"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    setup = commands.add_parser("setup", help="Create the demo client")
    setup_actions = setup.add_subparsers(dest="action", required=True)
    setup_run = setup_actions.add_parser(
        "run",
        parents=[common],
        help="Create the demo client, applications and invitations",
    )
    setup_run.add_argument(
        "--force",
        action="store_true",
        help="Write applications and invitations even if the client exists",
    )
    setup_actions.add_parser(
        "status", parents=[common], help="Check the current demo setup"
    )

    populate = commands.add_parser("populate", help="Generate demo people")
    populate_actions = populate.add_subparsers(dest="action", required=True)
    populate_run = populate_actions.add_parser(
        "run",
        parents=[common],
        help="Insert generated people, enrollments, documents and tasks",
    )
    populate_run.add_argument(
        "--keep-existing",
        action="store_true",
        help="Keep people already stored for the client",
    )
    populate_run.add_argument(
        "--count", type=int, default=None, help="People to generate"
    )
    populate_run.add_argument(
        "--batch-size", type=int, default=None, help="Rows per insert batch"
    )
    populate_run.add_argument(
        "--resume-batch",
        type=int,
        default=0,
        help="First people batch to insert, as reported by a failed run",
    )

    reset = commands.add_parser("reset", help="Remove the demo client")
    reset_actions = reset.add_subparsers(dest="action", required=True)
    reset_run = reset_actions.add_parser(
        "run", parents=[common], help="Delete the demo client and all of its data"
    )
    reset_run.add_argument(
        "--force", action="store_true", help="Skip the confirmation prompt"
    )
    reset_run.add_argument(
        "--reset-files",
        action="store_true",
        help="Also clear the persisted settings blob",
    )

    return parser


def _client_code(
    args: argparse.Namespace, blob: SettingsBlobStore, demo: DemoSettings
) -> str:
    return args.client or blob.selected_client(default=demo.default_client_code)


# --- setup ---


async def setup_run(
    store: IRemoteStore,
    client_code: str,
    blob: SettingsBlobStore,
    generator: DemoDataGenerator,
    force: bool,
) -> int:
    service = DemoSetupService(store, generator)
    with console.status("Setting up demo..."):
        summary = await service.setup(client_code, force=force)

    client = summary.client
    if summary.skipped:
        console.print(
            f"[yellow]![/yellow] Demo client [bold]{client_code}[/bold] already "
            "exists; use --force to write its applications and invitations again"
        )
        return 0

    blob.select_client(client_code)
    verb = "created" if summary.created else "updated"
    console.print(f"\n[bold green]✓ Demo client {verb}[/bold green]\n")
    table = Table(show_header=False, box=None)
    table.add_row("Client", str(client.get("legal_name", "")))
    table.add_row("Code", str(client.get("client_code", "")))
    table.add_row("Domain", str(client.get("domain", "")))
    table.add_row("Applications", str(len(summary.applications)))
    table.add_row("Invitations", str(len(summary.invitations)))
    console.print(table)

    for app in summary.applications:
        console.print(f"  • {app.get('app_name')} ({app.get('app_code')})")
    for invitation in summary.invitations:
        console.print(
            f"  • {invitation.get('invitation_code')} "
            f"[dim](expires {invitation.get('expires_at')})[/dim]"
        )
    console.print(
        "\n[cyan]Next:[/cyan] flows-demo populate run "
        f"--client {client_code}\n"
    )
    return 0


async def setup_status(store: IRemoteStore, client_code: str) -> int:
    service = DemoSetupService(store)
    status = await service.status(client_code)
    if not status.exists:
        console.print(f"[yellow]![/yellow] Demo client {client_code} not found")
        console.print("[blue]Run: flows-demo setup run[/blue]")
        return 0

    client = status.client or {}
    console.print("[green]✓ Demo client exists[/green]")
    console.print(f"   Code:         {client.get('client_code')}")
    console.print(f"   ID:           {client.get('id')}")
    console.print(f"   Applications: {status.applications}")
    console.print(f"   Invitations:  {status.invitations}")
    console.print(f"   People:       {status.people}")
    return 0


# --- populate ---


async def populate_run(
    store: IRemoteStore,
    client_code: str,
    generator: DemoDataGenerator,
    count: int,
    batch_size: int,
    keep_existing: bool,
    resume_batch: int,
) -> int:
    service = DemoPopulationService(store, generator, batch_size=batch_size)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    ) as progress:
        people_task = progress.add_task("People", total=count)
        related_task = progress.add_task("Enrollments, documents, tasks", total=count)
        progress.update(people_task, completed=resume_batch * batch_size)

        def on_progress(stage: str, done: int) -> None:
            task = people_task if stage == PEOPLE else related_task
            progress.update(task, completed=done)

        try:
            summary = await service.populate(
                client_code,
                count,
                keep_existing=keep_existing,
                resume_batch=resume_batch,
                progress=on_progress,
            )
        except BatchInsertError as e:
            progress.stop()
            _print_batch_failure(e)
            return 1

    console.print(f"\n[bold green]✓ Populated {client_code}[/bold green]\n")
    table = Table(show_header=False, box=None)
    if summary.removed:
        table.add_row("Removed rows", str(summary.removed))
    table.add_row(
        "People",
        f"{summary.people_inserted} inserted in {summary.people_batches} batches"
        + (
            f" ({summary.skipped_batches} batches skipped)"
            if summary.skipped_batches
            else ""
        ),
    )
    table.add_row("Enrollments", str(summary.enrollments))
    table.add_row("Without enrollment", str(summary.missing_enrollments))
    table.add_row("Documents", str(summary.documents))
    table.add_row("Tasks", str(summary.tasks))
    console.print(table)
    return 0


def _print_batch_failure(error: BatchInsertError) -> None:
    console.print(f"\n[bold red]Population failed:[/bold red] {error}")
    if error.table == PEOPLE:
        console.print(
            f"[yellow]Resume with:[/yellow] flows-demo populate run --keep-existing "
            f"--resume-batch {error.resume_batch}"
        )
    else:
        console.print(
            "[yellow]All people are stored; rerun with --keep-existing to add "
            "the missing related rows[/yellow]"
        )


# --- reset ---


async def reset_run(
    store: IRemoteStore,
    client_code: str,
    blob: SettingsBlobStore,
    force: bool,
    reset_files: bool,
) -> int:
    console.print("[bold red]Demo reset[/bold red]")
    console.print(
        f"[yellow]This permanently deletes client {client_code} with its "
        "applications, invitations, people and processes.[/yellow]"
    )
    if not force and not Confirm.ask("Reset the demo?", default=False):
        console.print("[blue]Demo reset cancelled.[/blue]")
        return 0

    service = DemoSetupService(store)
    with console.status("Resetting demo..."):
        summary = await service.reset(client_code)

    if summary is None:
        console.print(
            f"[yellow]![/yellow] No demo client {client_code}; nothing to reset"
        )
    else:
        console.print(
            f"[bold green]✓ Removed {summary.client.get('legal_name')} "
            f"({summary.removed_count} rows)[/bold green]"
        )
        for table, count in sorted(summary.removed.items()):
            console.print(f"   {table}: {count}")

    if reset_files:
        cleared = blob.clear()
        console.print(
            f"[green]✓[/green] Settings blob cleared ({blob.path})"
            if cleared
            else f"[dim]No settings blob stored in {blob.path}[/dim]"
        )
    else:
        console.print("[blue]Settings kept (use --reset-files to clear them)[/blue]")
    return 0


async def run_command(
    args: argparse.Namespace,
    store: IRemoteStore,
    blob: SettingsBlobStore,
    demo: DemoSettings,
) -> int:
    """Dispatch parsed arguments to a command."""
    client_code = _client_code(args, blob, demo)
    generator = DemoDataGenerator(seed=demo.seed)

    match (args.command, args.action):
        case ("setup", "run"):
            return await setup_run(store, client_code, blob, generator, args.force)
        case ("setup", "status"):
            return await setup_status(store, client_code)
        case ("populate", "run"):
            count = args.count if args.count is not None else demo.target_people
            batch_size = args.batch_size or demo.batch_size
            if count < 0 or batch_size < 1 or args.resume_batch < 0:
                console.print(
                    "[bold red]Error:[/bold red] --count and --resume-batch must "
                    "not be negative and --batch-size must be positive"
                )
                return 1
            return await populate_run(
                store,
                client_code,
                generator,
                count,
                batch_size,
                args.keep_existing,
                args.resume_batch,
            )
        case ("reset", "run"):
            return await reset_run(
                store, client_code, blob, args.force, args.reset_files
            )
    raise ValueError(f"Unknown command: {args.command} {args.action}")


async def _run(
    args: argparse.Namespace, store_factory: StoreFactory, demo: DemoSettings
) -> int:
    blob = SettingsBlobStore(args.settings_path or demo.settings_path)
    store = store_factory()
    try:
        return await run_command(args, store, blob, demo)
    finally:
        aclose = getattr(store, "aclose", None)
        if aclose is not None:
            await aclose()


def main(
    argv: Sequence[str] | None = None,
    store_factory: StoreFactory | None = None,
) -> int:
    """Entry point of ``flows-demo``; returns the process exit status."""
    args = build_parser().parse_args(argv)
    load_dotenv(args.env_file)
    configure_logging("DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    if store_factory is None:
        store_settings = get_remote_store_settings()
        if not store_settings.service_key.get_secret_value():
            console.print(
                "[bold red]Error:[/bold red] Missing FLOWS_STORE_SERVICE_KEY; "
                "set it in the environment or .env"
            )
            return 1
        store_factory = partial(PostgrestRemoteStore, store_settings)

    try:
        return asyncio.run(_run(args, store_factory, get_demo_settings()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except DemoClientNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    except Exception as e:
        console.print(f"[bold red]{args.command} {args.action} failed:[/bold red] {e}")
        err_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
