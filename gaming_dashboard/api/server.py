"""
Dashboard API Server.

FastAPI application exposing the dashboard state to the front-end and a
few manual controls. No authentication: the dashboard is a demo surface.

Usage:
    from gaming_dashboard.api.server import create_app_from_settings

    app = create_app_from_settings(load_settings())
    uvicorn.run(app, host="0.0.0.0", port=3000)

Endpoints:
    GET  /api/dashboard             Metrics + all agent stats
    GET  /api/agents/status         Agent stats + uptime
    POST /api/agents/{name}/toggle  Pause / resume an agent
    POST /api/content/generate      Run the Content agent now
    GET  /api/shopify/products      Store products (50)
    GET  /api/shopify/orders        Store orders (100, any status)
    GET  /api/health                Health check
    GET  /                          Dashboard page
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from gaming_dashboard import __version__
from gaming_dashboard.agents.scheduler import AgentScheduler
from gaming_dashboard.agents.state import DashboardState
from gaming_dashboard.config.schema import DashboardSettings
from gaming_dashboard.exceptions import AgentNotFoundError, AgentRunError
from gaming_dashboard.runtime import Runtime, build_runtime

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_DIR = Path(__file__).resolve().parent.parent.parent / "public"

PRODUCTS_PROXY_LIMIT = 50
ORDERS_PROXY_LIMIT = 100


# ── Response Models ──────────────────────────────────────────


class ToggleResponse(BaseModel):
    """Result of flipping an agent on or off."""
    success: bool = True
    agent: str
    active: bool
    status: str


# ── App Factory ──────────────────────────────────────────────


def create_dashboard_app(
    state: DashboardState,
    agents: dict[str, Any],
    commerce: Any,
    *,
    scheduler: Optional[AgentScheduler] = None,
    closeables: Sequence[Any] = (),
    public_dir: Optional[str | Path] = None,
    cors_origins: Optional[list[str]] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        state: Shared DashboardState read by every endpoint.
        agents: Agent name -> agent; "content" backs /api/content/generate.
        commerce: CommerceClient used by the Shopify proxy endpoints.
        scheduler: Started on app startup and stopped on shutdown. None
            disables periodic runs (tests, one-off scripts).
        closeables: Objects with an async aclose(), closed on shutdown.
        public_dir: Directory holding index.html and static assets.
        cors_origins: Allowed CORS origins (default: all).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if scheduler is not None:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                await scheduler.stop()
            for resource in closeables:
                try:
                    await resource.aclose()
                except Exception as e:
                    logger.warning(f"Failed to close {resource!r}: {e}")

    app = FastAPI(
        title="Gaming Dashboard API",
        description="Scheduled AI/commerce agents and their dashboard metrics.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AgentNotFoundError)
    async def agent_not_found_handler(request: Request, exc: AgentNotFoundError):
        return JSONResponse(status_code=404, content={"error": "Agent not found"})

    # ── Dashboard ────────────────────────────────────────

    @app.get("/api/dashboard", tags=["Dashboard"])
    async def get_dashboard():
        """Metrics, revenue history and every agent's stats."""
        return state.dashboard_snapshot()

    # ── Agents ───────────────────────────────────────────

    @app.get("/api/agents/status", tags=["Agents"])
    async def get_agents_status():
        return {
            "agents": state.agents_dict(),
            "systemHealth": "optimal",
            "uptime": state.uptime(),
        }

    @app.post(
        "/api/agents/{agent_name}/toggle",
        tags=["Agents"],
        response_model=ToggleResponse,
    )
    async def toggle_agent(agent_name: str):
        """Flip an agent between active and stopped."""
        stats = state.toggle_agent(agent_name)
        return ToggleResponse(
            agent=agent_name,
            active=stats.active,
            status=stats.status.value,
        )

    @app.post("/api/content/generate", tags=["Agents"])
    async def generate_content():
        """Run the Content agent once and return its stats."""
        agent = agents["content"]
        try:
            ran = await agent.run(raise_errors=True)
        except AgentRunError as e:
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": str(e)},
            )

        return {
            "success": True,
            "message": (
                "Content generated successfully" if ran
                else "Content agent is inactive; nothing generated"
            ),
            "stats": state.content.to_dict(),
        }

    # ── Shopify Proxy ────────────────────────────────────

    @app.get("/api/shopify/products", tags=["Shopify"])
    async def list_products():
        try:
            products = await commerce.get_products(limit=PRODUCTS_PROXY_LIMIT)
        except Exception as e:
            logger.error(f"Error fetching Shopify products: {e}")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Failed to fetch products",
                    "message": str(e),
                },
            )
        return {"success": True, "products": products, "count": len(products)}

    @app.get("/api/shopify/orders", tags=["Shopify"])
    async def list_orders():
        try:
            orders = await commerce.get_orders(limit=ORDERS_PROXY_LIMIT, status="any")
        except Exception as e:
            logger.error(f"Error fetching Shopify orders: {e}")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Failed to fetch orders",
                    "message": str(e),
                },
            )
        return {"success": True, "orders": orders, "count": len(orders)}

    # ── Health ───────────────────────────────────────────

    @app.get("/api/health", tags=["Health"])
    async def health_check():
        return state.health_snapshot()

    # ── Front-end ────────────────────────────────────────

    static_dir = Path(public_dir) if public_dir else DEFAULT_PUBLIC_DIR
    index_file = static_dir / "index.html"

    @app.get("/", include_in_schema=False)
    async def index():
        if not index_file.is_file():
            return JSONResponse(status_code=404, content={"error": "Dashboard page not found"})
        return FileResponse(index_file)

    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir), name="static")
    else:
        logger.warning(f"Public directory not found, static assets disabled: {static_dir}")

    return app


def create_app_from_settings(
    settings: DashboardSettings,
    *,
    runtime: Optional[Runtime] = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """Wire state, clients, agents and scheduler from settings."""
    runtime = runtime or build_runtime(settings)
    scheduler = (
        AgentScheduler(runtime.agents, settings.schedule) if start_scheduler else None
    )
    return create_dashboard_app(
        runtime.state,
        runtime.agents,
        runtime.commerce,
        scheduler=scheduler,
        closeables=runtime.closeables,
        public_dir=settings.public_dir or None,
    )
