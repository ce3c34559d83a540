"""Main CLI entry point using Typer."""

import logging
import sys
from datetime import datetime, time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..azure.arm import create_arm_api
from ..config import Config
from ..exceptions import DeletionTimeoutError, FatalStepError, TeardownError
from ..models.resource_id import ResourceId
from ..models.teardown_operation import OperationStatus
from ..teardown.audit import AuditStorage
from ..teardown.context import TeardownContext
from ..teardown.orchestrator import TeardownOrchestrator
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="azteardown",
    help="Azure Teardown - delete a virtual machine and the resources it owns",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None

OUTCOME_STYLES = {
    "deleted": "green",
    "deletion-pending": "yellow",
    "already-absent": "dim",
}


@app.callback()
def main(
    subscription: Optional[str] = typer.Option(
        None, "--subscription", "-s", help="Azure subscription ID (default: $AZURE_SUBSCRIPTION_ID)"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Config file (default: ~/.azteardown/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """Azure Teardown - delete a virtual machine and the resources it owns."""
    global config

    try:
        config = Config.load(config_path)
    except ValueError as e:
        console.print(f"✗ Invalid configuration: {e}", style="bold red")
        raise typer.Exit(code=1)

    # Override with CLI options
    if subscription:
        config.subscription_id = subscription

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    # Disable colors if requested
    if no_color:
        console.no_color = True


@app.command()
def version():
    """Show version information."""
    from .. import __version__

    console.print(f"azure-teardown version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")


@app.command()
def teardown(
    resource_id: str = typer.Argument(..., help="Slash-encoded virtual machine id, e.g. eastus/vm1"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Seconds to wait for each deletion"),
    no_wait: bool = typer.Option(
        False,
        "--no-wait",
        help=(
            "Do not wait for the virtual machine deletion. Azure rejects deleting a NIC "
            "that is still attached (NicInUse), so the NIC step may fail"
        ),
    ),
    no_audit: bool = typer.Option(False, "--no-audit", help="Do not write an audit log"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
):
    """Delete a virtual machine and its NICs, public IPs and storage.

    The resource group is deleted as well once nothing is left in it.

    Examples:
        # Tear down vm1 in eastus (prompts for confirmation)
        azteardown teardown eastus/vm1

        # Non-interactive, 5 minute deletion timeout
        azteardown teardown eastus/vm1 --yes --timeout 300
    """
    try:
        parsed_id = ResourceId.from_slash_encoded(resource_id)
    except ValueError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)

    if not config.subscription_id:
        console.print(
            "✗ Error: No Azure subscription. Use --subscription or set AZURE_SUBSCRIPTION_ID",
            style="bold red",
        )
        raise typer.Exit(code=1)

    if timeout is not None:
        if timeout <= 0:
            console.print("✗ Error: --timeout must be positive", style="bold red")
            raise typer.Exit(code=1)
        config.delete_timeout = timeout
    if no_wait:
        config.wait_for_root = False

    if not yes:
        confirmed = typer.confirm(
            f"Delete virtual machine {parsed_id.id} in {parsed_id.region} and all resources it owns?"
        )
        if not confirmed:
            console.print("Aborted.", style="yellow")
            raise typer.Exit(code=1)

    try:
        context = TeardownContext.from_config(
            config,
            api=create_arm_api(config.subscription_id),
            audit=not no_audit,
        )
        orchestrator = TeardownOrchestrator(context)

        console.print(f"\n🗑  Tearing down [bold cyan]{parsed_id}[/bold cyan]\n")
        operation = orchestrator.run(parsed_id)

        if operation.status == OperationStatus.NOOP:
            console.print(f"✓ Virtual machine {parsed_id.id} not found, nothing to do", style="green")
            return

        table = Table(title=f"Teardown {operation.operation_id}")
        table.add_column("Kind", style="cyan")
        table.add_column("Name")
        table.add_column("Outcome")

        for record in operation.records:
            style = "red" if not record.succeeded else OUTCOME_STYLES.get(record.outcome.value, "")
            table.add_row(record.kind.value, record.name, f"[{style}]{record.outcome.value}[/{style}]")

        console.print(table)

        if operation.scope_deleted:
            console.print(f"\n✓ Resource group [cyan]{operation.scope}[/cyan] was empty and has been deleted")

        if not operation.root_deleted:
            console.print(f"\n✗ Deletion of virtual machine {parsed_id.id} failed", style="bold red")
            raise typer.Exit(code=1)

        console.print(f"\n✓ [bold green]Teardown of {parsed_id} complete[/bold green]")

    except typer.Exit:
        raise
    except DeletionTimeoutError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=2)
    except FatalStepError as e:
        console.print(f"✗ Storage cleanup failed: {e}", style="bold red")
        raise typer.Exit(code=2)
    except TeardownError as e:
        console.print(f"✗ Teardown failed: {e}", style="bold red")
        raise typer.Exit(code=2)
    except Exception as e:
        console.print(f"✗ Error during teardown: {e}", style="bold red")
        logger.exception("Error in teardown command")
        raise typer.Exit(code=2)


# Resource id commands group
id_app = typer.Typer(help="Resource id encoding commands")
app.add_typer(id_app, name="id")


@id_app.command("encode")
def id_encode(
    region: str = typer.Argument(..., help="Azure location, e.g. eastus"),
    name: str = typer.Argument(..., help="Virtual machine name"),
):
    """Print the slash-encoded id of a virtual machine."""
    try:
        console.print(ResourceId(region=region, id=name).slash_encode())
    except ValueError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)


@id_app.command("decode")
def id_decode(resource_id: str = typer.Argument(..., help="Slash-encoded id")):
    """Show the region and name in a slash-encoded id."""
    try:
        parsed_id = ResourceId.from_slash_encoded(resource_id)
    except ValueError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)

    console.print(f"Region: {parsed_id.region}")
    console.print(f"Name:   {parsed_id.id}")


# Audit commands group
audit_app = typer.Typer(help="Teardown audit log commands")
app.add_typer(audit_app, name="audit")


def parse_date(value: Optional[str], option: str, end_of_day: bool = False) -> Optional[datetime]:
    """Parse a --since/--until value.

    A bare date (YYYY-MM-DD) with end_of_day set covers the whole day.
    """
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        console.print(f"✗ Invalid {option} date: {value} (expected YYYY-MM-DD)", style="bold red")
        raise typer.Exit(code=1)

    if end_of_day and "T" not in value and " " not in value:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed


@audit_app.command("list")
def audit_list(
    since: Optional[str] = typer.Option(None, "--since", help="Only operations on or after this date (YYYY-MM-DD)"),
    until: Optional[str] = typer.Option(None, "--until", help="Only operations on or before this date (YYYY-MM-DD)"),
):
    """List recorded teardown operations."""
    storage = AuditStorage(config.audit_dir)
    operations = storage.query_operations(
        since=parse_date(since, "--since"),
        until=parse_date(until, "--until", end_of_day=True),
    )

    if not operations:
        console.print("No teardown operations recorded.", style="yellow")
        return

    table = Table(title="Teardown Operations")
    table.add_column("Operation", style="cyan")
    table.add_column("Resource")
    table.add_column("Timestamp")
    table.add_column("Status")
    table.add_column("Resources", justify="right")

    for data in operations:
        op = data["operation"]
        table.add_row(
            op["operation_id"],
            op["resource_id"],
            op["timestamp"],
            op["status"],
            str(len(data.get("records") or [])),
        )

    console.print(table)


@audit_app.command("show")
def audit_show(operation_id: str = typer.Argument(..., help="Operation ID")):
    """Show the deletion records of a teardown operation."""
    storage = AuditStorage(config.audit_dir)
    data = storage.get_operation(operation_id)

    if data is None:
        console.print(f"✗ Operation '{operation_id}' not found", style="bold red")
        raise typer.Exit(code=1)

    op = data["operation"]
    console.print(f"[bold]Operation:[/bold] {op['operation_id']}")
    console.print(f"[bold]Resource:[/bold]  {op['resource_id']} (resource group {op['scope']})")
    console.print(f"[bold]Status:[/bold]    {op['status']}")
    if op.get("error_message"):
        console.print(f"[bold]Error:[/bold]     {op['error_message']}", style="red")

    table = Table()
    table.add_column("Kind", style="cyan")
    table.add_column("Name")
    table.add_column("Outcome")
    table.add_column("Timestamp")

    for record in data.get("records") or []:
        table.add_row(record["kind"], record["name"], record["outcome"], record["timestamp"])

    console.print(table)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
