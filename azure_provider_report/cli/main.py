#!/usr/bin/env python3
"""Command-line interface for Azure Resource Provider Report"""

import asyncio
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from azure.core.exceptions import ClientAuthenticationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..core.models import ProviderReport
from ..auth.manager import AuthenticationManager
from ..core.runner import OutputDirectoryError, ProviderReportRunner
from ..dashboard.generator import ReportGenerator, export_report_json
from ..utils.config import ConfigurationLoader, create_sample_config
from ..utils.logger import setup_logger

app = typer.Typer(
    name="azure-provider-report",
    help="Azure resource provider usage and baseline compliance report",
    add_completion=False
)

console = Console()


@app.command()
def report(
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", "-o",
        help="Directory the HTML report is written to (default: reports)"
    ),
    title: Optional[str] = typer.Option(
        None, "--title", "-t",
        help="Report title"
    ),
    include_unregistered: Optional[bool] = typer.Option(
        None, "--include-unregistered/--registered-only",
        help="List not-registered providers in the subscription drill-down"
    ),
    subscription_ids: Optional[List[str]] = typer.Option(
        None, "--subscription", "-s",
        help="Subscription IDs to include (if not specified, all enabled subscriptions)"
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c",
        help="YAML configuration file"
    ),
    export_json: Optional[bool] = typer.Option(
        None, "--json/--no-json",
        help="Also write the report dataset as JSON"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable verbose logging"
    )
):
    """Collect provider registrations for every subscription and render the HTML report"""

    setup_logger("cli", "DEBUG" if verbose else None)

    try:
        config = ConfigurationLoader().load_configuration(
            config_file,
            output_dir=output_dir,
            report_title=title,
            include_unregistered=include_unregistered,
            export_json=export_json,
            subscription_ids=subscription_ids or None,
        )
    except (ValueError, OSError) as e:
        console.print(f"Invalid configuration: {e}", style="red")
        raise typer.Exit(1)

    try:
        console.print("\nCollecting resource providers...\n")
        runner = ProviderReportRunner(config)
        with console.status("Querying Azure Resource Manager..."):
            provider_report = asyncio.run(runner.run())
    except ClientAuthenticationError as e:
        console.print(f"Authentication failed: {e}", style="red")
        raise typer.Exit(1)
    except OutputDirectoryError as e:
        console.print(str(e), style="red")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\nRun cancelled by user.", style="red")
        raise typer.Exit(130)
    except Exception as e:
        console.print(f"Report run failed: {e}", style="red")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)

    display_report_summary(provider_report)

    stem = f"azure_provider_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    try:
        html_path = ReportGenerator().generate_report(provider_report, str(Path(config.output_dir) / f"{stem}.html"))
        console.print(f"Report generated: {html_path}", style="green")
        console.print(f"Open in browser: file://{html_path}", style="blue")

        if config.export_json:
            json_path = export_report_json(provider_report, str(Path(config.output_dir) / f"{stem}.json"))
            console.print(f"Dataset exported to: {json_path}", style="green")
    except OSError as e:
        console.print(f"Failed to write report: {e}", style="red")
        raise typer.Exit(1)

    if provider_report.failed_subscriptions:
        console.print(
            f"\n{len(provider_report.failed_subscriptions)} subscription(s) could not be collected "
            f"and are excluded from the report.",
            style="yellow"
        )


@app.command()
def list_subscriptions():
    """List accessible Azure subscriptions"""

    try:
        console.print("Discovering accessible Azure subscriptions...\n")
        subscriptions = asyncio.run(AuthenticationManager().get_accessible_subscriptions())
    except Exception as e:
        console.print(f"Failed to list subscriptions: {e}", style="red")
        raise typer.Exit(1)

    if not subscriptions:
        console.print("No accessible subscriptions found.", style="red")
        return

    table = Table(title="Accessible Azure Subscriptions")
    table.add_column("Subscription ID", style="cyan")
    table.add_column("Name", style="green")

    for subscription_id, name in subscriptions:
        table.add_row(subscription_id, name)

    console.print(table)
    console.print(f"\nTotal: {len(subscriptions)} accessible subscriptions")


@app.command()
def init_config(
    output_file: str = typer.Argument("azure_provider_report.yml", help="Where to write the sample configuration")
):
    """Write a sample configuration file"""

    if Path(output_file).exists():
        console.print(f"{output_file} already exists, not overwriting.", style="yellow")
        raise typer.Exit(1)

    path = create_sample_config(output_file)
    console.print(f"Sample configuration created: {path}", style="green")


@app.command()
def version():
    """Show version information"""

    version_info = {
        "Azure Provider Report": __version__,
        "Python": sys.version.split()[0],
        "Platform": sys.platform
    }

    panel_content = "\n".join([f"{k}: {v}" for k, v in version_info.items()])
    console.print(Panel(panel_content, title="Version Information", expand=False))


def display_report_summary(provider_report: ProviderReport, top: int = 15):
    """Print run totals, baseline compliance and the most widely registered providers"""

    summary_content = (
        f"Subscriptions: {provider_report.total_subscriptions}\n"
        f"Registered providers: {len(provider_report.providers)} "
        f"({provider_report.data_plane_count} data plane, {provider_report.control_plane_count} control plane)\n"
        f"Resources: {provider_report.total_resources}"
    )

    if provider_report.required_compliance:
        summary_content += f"\nBaseline compliance: {provider_report.required_compliance.compliance_percentage:.1f}%"
    if provider_report.failed_subscriptions:
        summary_content += f"\nFailed subscriptions: {len(provider_report.failed_subscriptions)}"

    console.print(Panel(summary_content, title="Run Summary", expand=False))

    if provider_report.providers:
        table = Table(title=f"Top {min(top, len(provider_report.providers))} Providers")
        table.add_column("Provider", style="cyan")
        table.add_column("Subscriptions", justify="right")
        table.add_column("Adoption", justify="right", style="green")
        table.add_column("Resources", justify="right")
        table.add_column("Band", style="yellow")
        table.add_column("Plane", style="magenta")

        for provider in provider_report.providers[:top]:
            table.add_row(
                provider.namespace,
                str(provider.registered_count),
                f"{provider.percentage:.2f}%",
                str(provider.total_resources),
                provider.usage_band.value,
                provider.plane
            )

        console.print(table)

    compliance = provider_report.required_compliance
    if compliance and compliance.missing:
        console.print("\nRequired providers not registered in any subscription:", style="yellow")
        for namespace in compliance.missing:
            console.print(f"  - {namespace}", style="red")

    for failed in provider_report.failed_subscriptions:
        console.print(f"  {failed.subscription_name} ({failed.subscription_id}): {failed.error}", style="red")


def main():
    """Main entry point"""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\nInterrupted by user.", style="red")
        sys.exit(130)


if __name__ == "__main__":
    main()
