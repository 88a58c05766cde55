"""CLI for Story Contest."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, TypeVar

import pydantic
import structlog
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from story_contest import __version__
from story_contest.core.config import ContestConfig, load_config
from story_contest.core.errors import ConfigurationError, ContestError
from story_contest.ranking import LeaderboardEntry, RoleFilter
from story_contest.services.importer import import_contest_data, load_contest_data
from story_contest.services.leaderboard import LeaderboardService
from story_contest.services.otp import FakeSmsSender, OtpService, create_sms_sender
from story_contest.services.payment import PaymentOrder, PaymentService, create_gateway
from story_contest.services.reporting import format_score
from story_contest.services.storage import ContestStore, ReportStore
from story_contest.services.voting import VoteService

T = TypeVar("T")

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="story-contest",
    help="Story Contest - rank contest entries from judge and community votes",
    add_completion=False,
)
console = Console()

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to config YAML file")
]
EventOption = Annotated[str | None, typer.Option("--event", "-e", help="Restrict to one event")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"story-contest v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")] = False,
) -> None:
    """Story Contest CLI."""
    load_dotenv()
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load(config_path: Path | None) -> ContestConfig:
    if config_path is None:
        return ContestConfig()
    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except pydantic.ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1) from e


def _run(fn: Callable[[], Awaitable[T]]) -> T:
    """Run an async command body, mapping known errors to exit code 1."""
    try:
        return asyncio.run(fn())
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except ContestError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _print_entries(title: str, entries: list[LeaderboardEntry], max_score: int) -> None:
    if not entries:
        console.print(f"[yellow]{title}: no entries yet[/yellow]")
        return
    table = Table(title=title)
    table.add_column("Rank", justify="right")
    table.add_column("Submission")
    table.add_column("Group")
    table.add_column("Score", justify="right")
    table.add_column("Votes", justify="right")
    for e in entries:
        table.add_row(
            str(e.rank),
            e.submission.title or e.submission.id,
            e.submission.group_key or "-",
            format_score(e, max_score),
            str(e.count),
        )
    console.print(table)


@app.command()
def load(
    data_path: Annotated[Path, typer.Argument(help="YAML file with submissions, roles, votes")],
    config_path: ConfigOption = None,
) -> None:
    """Import submissions, role assignments and votes."""
    config = _load(config_path)

    async def _body() -> dict[str, int]:
        data = load_contest_data(data_path)
        store = ContestStore(config)
        try:
            return await import_contest_data(data, store, VoteService(config, store))
        finally:
            await store.close()

    counts = _run(_body)
    console.print(
        f"[green]Imported[/green] {counts['submissions']} submissions, "
        f"{counts['roles']} roles, {counts['votes']} votes"
    )


@app.command()
def vote(
    voter_id: Annotated[str, typer.Argument(help="Voter identifier")],
    submission_id: Annotated[str, typer.Argument(help="Submission identifier")],
    score: Annotated[int, typer.Argument(help="Integer score")],
    config_path: ConfigOption = None,
) -> None:
    """Cast or replace a vote."""
    config = _load(config_path)

    async def _body() -> None:
        store = ContestStore(config)
        try:
            await VoteService(config, store).cast_vote(voter_id, submission_id, score)
        finally:
            await store.close()

    _run(_body)
    console.print(f"[green]Recorded[/green] {voter_id} -> {submission_id}: {score}")


@app.command()
def leaderboard(
    event_id: EventOption = None,
    role_filter: Annotated[
        str, typer.Option("--filter", "-f", help="judge-only, community-only or all")
    ] = RoleFilter.ALL.value,
    top: Annotated[
        bool, typer.Option("--top", help="Show the balanced top-N selection only")
    ] = False,
    export: Annotated[
        str | None, typer.Option("--export", help="Export md/csv/json under this name")
    ] = None,
    config_path: ConfigOption = None,
) -> None:
    """Print a ranked leaderboard."""
    config = _load(config_path)

    async def _body() -> list[LeaderboardEntry]:
        store = ContestStore(config)
        try:
            service = LeaderboardService(config, store)
            entries = await service.leaderboard(event_id, role_filter)
            if top:
                entries = service.balance(entries)
            if export:
                reports = ReportStore(Path(config.output_dir), config.scoring.max_score)
                path = await reports.save_leaderboard(export, entries)
                console.print(f"Exported to: {path}")
            return entries
        finally:
            await store.close()

    entries = _run(_body)
    title = f"Leaderboard ({role_filter})" + (f" - {event_id}" if event_id else "")
    _print_entries(title, entries, config.scoring.max_score)


@app.command()
def community(
    event_id: EventOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Print the community leaderboard over the eligible voting pool."""
    config = _load(config_path)

    async def _body() -> list[LeaderboardEntry]:
        store = ContestStore(config)
        try:
            return await LeaderboardService(config, store).community_leaderboard(event_id)
        finally:
            await store.close()

    _print_entries("Community leaderboard", _run(_body), config.scoring.max_score)


@app.command("request-otp")
def request_otp(
    phone: Annotated[str, typer.Argument(help="Phone number")],
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Do not send a real SMS")] = False,
    config_path: ConfigOption = None,
) -> None:
    """Issue a one-time password and send it by SMS."""
    config = _load(config_path)

    async def _body() -> bool:
        store = ContestStore(config)
        sender = create_sms_sender(config.otp, dry_run=dry_run)
        try:
            dispatch = await OtpService(config.otp, store.otp_codes, sender).request_code(phone)
            return dispatch.delivered
        finally:
            await sender.close()
            await store.close()

    if _run(_body):
        console.print("[green]OTP sent successfully[/green]")
    else:
        console.print("[yellow]OTP generated (SMS delivery may have failed)[/yellow]")


@app.command("verify-otp")
def verify_otp(
    phone: Annotated[str, typer.Argument(help="Phone number")],
    code: Annotated[str, typer.Argument(help="Code received by SMS")],
    config_path: ConfigOption = None,
) -> None:
    """Verify and consume a one-time password."""
    config = _load(config_path)

    async def _body() -> None:
        store = ContestStore(config)
        try:
            await OtpService(config.otp, store.otp_codes, FakeSmsSender()).verify_code(phone, code)
        finally:
            await store.close()

    _run(_body)
    console.print("[green]OTP verified successfully[/green]")


@app.command("create-order")
def create_order(
    amount: Annotated[int, typer.Argument(help="Amount in minor currency units")],
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Use a fake gateway")] = False,
    config_path: ConfigOption = None,
) -> None:
    """Create a payment order at the gateway."""
    config = _load(config_path)

    async def _body() -> PaymentOrder:
        gateway = create_gateway(config.payment, dry_run=dry_run)
        try:
            return await PaymentService(config.payment, gateway).create_order(amount)
        finally:
            await gateway.close()

    order = _run(_body)
    console.print(f"[green]Order created:[/green] {order.id} ({order.amount} {order.currency})")


@app.command("verify-payment")
def verify_payment(
    order_id: Annotated[str, typer.Argument(help="Gateway order reference")],
    payment_id: Annotated[str, typer.Argument(help="Gateway payment reference")],
    signature: Annotated[str, typer.Argument(help="Signature returned by the gateway")],
    config_path: ConfigOption = None,
) -> None:
    """Check a payment signature against the configured secret."""
    config = _load(config_path)

    async def _body() -> bool:
        return PaymentService(config.payment).verify_signature(order_id, payment_id, signature)

    if not _run(_body):
        console.print("[red]Invalid signature[/red]")
        raise typer.Exit(1)
    console.print("[green]Payment verified successfully[/green]")


@app.command("verify-webhook")
def verify_webhook(
    payload_path: Annotated[Path, typer.Argument(help="File holding the raw webhook body")],
    signature: Annotated[str, typer.Argument(help="Signature header, t=<timestamp>,v=<hex>")],
    config_path: ConfigOption = None,
) -> None:
    """Check a Zoho webhook body against its signature header."""
    config = _load(config_path)

    async def _body() -> bool:
        payload = payload_path.read_text(encoding="utf-8")
        return PaymentService(config.payment).verify_webhook(payload, signature)

    if not _run(_body):
        console.print("[red]Invalid webhook signature[/red]")
        raise typer.Exit(1)
    console.print("[green]Webhook verified[/green]")


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file.

    Args:
        config_path: Path to YAML configuration file.
    """
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Contest: {config.name}")
        console.print(f"  Score range: {config.scoring.min_score}-{config.scoring.max_score}")
        console.print(f"  Groups: {', '.join(config.leaderboard.groups) or '(none)'}")
        console.print(
            f"  Top-N: {config.leaderboard.total_quota} "
            f"({config.leaderboard.per_group_quota} per group)"
        )
        console.print(f"  Database: {config.database_path}")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Validation error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]Story Contest[/bold]")
    console.print(f"Version: {__version__}\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Import seed data")
    console.print("  story-contest load data.yaml -c contest.yaml\n")

    console.print("  # Judge leaderboard for one event")
    console.print("  story-contest leaderboard --event spring-2025 --filter judge-only\n")

    console.print("  # Balanced top six, exported as md/csv/json")
    console.print("  story-contest leaderboard --filter judge-only --top --export finals\n")

    console.print("  # Community leaderboard over the eligible pool")
    console.print("  story-contest community --event spring-2025\n")

    console.print("  # Validate config")
    console.print("  story-contest validate contest.yaml")


if __name__ == "__main__":
    app()
