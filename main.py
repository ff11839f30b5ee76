"""
Gaming Dashboard - Main Entry Point

CLI for serving the dashboard API with its scheduled agents, running a
single agent by hand, and checking the effective configuration.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gaming_dashboard.agents.state import AGENT_NAMES
from gaming_dashboard.config.loader import load_settings
from gaming_dashboard.config.schema import DashboardSettings
from gaming_dashboard.exceptions import AgentRunError, ConfigurationError
from gaming_dashboard.observability.logging_config import configure_logging

# .env values take precedence over the inherited environment
root_env = Path(__file__).parent / ".env"
if root_env.exists():
    load_dotenv(root_env, override=True)
else:
    load_dotenv(override=True)

app = typer.Typer(
    name="gaming-dashboard",
    help="Gaming Dashboard - scheduled AI/commerce agents behind a JSON API",
)
console = Console()
logger = logging.getLogger("gaming_dashboard")


def _get_settings(config: Optional[Path]) -> DashboardSettings:
    """Load settings, with a friendly error on failure."""
    try:
        settings = load_settings(config)
    except ConfigurationError as e:
        console.print(Panel(
            f"[red]{e}[/]",
            title="⚠ Configuration Error",
            border_style="red",
        ))
        raise typer.Exit(code=1)

    configure_logging(env=settings.env, level=settings.log_level)
    return settings


# =========================================================================
# Commands
# =========================================================================


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: HOST or 0.0.0.0)"),
    port: Optional[int] = typer.Option(None, help="Port (default: PORT or 3000)"),
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
    no_scheduler: bool = typer.Option(False, help="Serve the API without running agents"),
):
    """Serve the dashboard API and run the agents on their schedule."""
    from gaming_dashboard.api.server import create_app_from_settings

    settings = _get_settings(config)
    schedule = settings.schedule

    console.print(Panel(
        f"[cyan]Gaming Dashboard starting[/]\n\n"
        f"Storefront: {settings.storefront_provider}"
        f"{'' if settings.shopify.is_configured else ' [yellow](not configured)[/]'}\n"
        f"OpenAI: {'✅' if settings.openai.api_key else '❌'}  "
        f"Claude: {'✅' if settings.claude.api_key else '❌'}\n"
        f"Agents: Content ({schedule.content:g}s), Marketing ({schedule.marketing:g}s), "
        f"Customer ({schedule.customer:g}s), Analytics ({schedule.analytics:g}s)"
        f"{' [yellow](scheduler disabled)[/]' if no_scheduler else ''}\n"
        f"Target: €{settings.target_revenue:,.0f} per month",
        title="🎮 Dashboard",
    ))

    logger.info(
        "dashboard_serve_starting",
        extra={
            "host": host or settings.host,
            "port": port or settings.port,
            "scheduler": not no_scheduler,
        },
    )
    api = create_app_from_settings(settings, start_scheduler=not no_scheduler)
    uvicorn.run(
        api,
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


@app.command()
def run_agent(
    name: str = typer.Argument(..., help=f"Agent name ({', '.join(AGENT_NAMES)})"),
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
):
    """Run one agent once and print its resulting stats."""
    from gaming_dashboard.runtime import build_runtime

    if name not in AGENT_NAMES:
        console.print(f"[red]Unknown agent:[/] {name}. Choose from: {', '.join(AGENT_NAMES)}")
        raise typer.Exit(code=1)

    settings = _get_settings(config)

    async def _run():
        runtime = build_runtime(settings)
        try:
            await runtime.agents[name].run(raise_errors=True)
        finally:
            await runtime.aclose()
        return runtime

    logger.info("manual_agent_run", extra={"agent": name})
    try:
        runtime = asyncio.run(_run())
    except AgentRunError as e:
        logger.exception("manual_agent_run_failed", extra={"agent": name})
        console.print(f"[red]Agent {name} failed:[/] {e}")
        raise typer.Exit(code=1)

    table = Table(title=f"Agent: {name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    for key, value in runtime.state.get_agent(name).to_dict().items():
        table.add_row(key, str(value))
    console.print(table)

    metrics = runtime.state.metrics
    console.print(
        f"Dashboard: revenue={metrics.revenue} "
        f"({metrics.revenue_percentage:.1f}% of target), "
        f"content={metrics.content}, campaigns={metrics.campaigns}, "
        f"clients={metrics.clients}, alerts={metrics.alerts}"
    )


@app.command()
def show_config(
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
):
    """Print the effective configuration (credentials masked)."""
    settings = _get_settings(config)
    console.print_json(json.dumps(settings.redacted()))


if __name__ == "__main__":
    app()
