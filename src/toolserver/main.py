"""Entry point for the MCP tool server.

Over HTTP the MCP streamable endpoint is mounted into a FastAPI application
alongside /health and /metrics. With transport "stdio" the server speaks
MCP over standard input and output instead.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry

from src.toolserver.budget.metrics import generate_metrics_output, get_metrics
from src.toolserver.config import ServerSettings, get_settings
from src.toolserver.server import ToolServices, build_services, create_server
from src.toolserver.text import partial_mask

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _log_configuration(settings: ServerSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Tool server configuration:")
    logger.info(f"  GitLab Base URL: {settings.gitlab_base_url}")
    logger.info(f"  GitLab Token: {partial_mask(settings.gitlab_token)}")
    logger.info(f"  Git Executable: {settings.git_executable}")
    logger.info(f"  Git Timeout Seconds: {settings.git_timeout_seconds}")
    logger.info(f"  Workspace Base Path: {settings.workspace_base_path or '<system temp>'}")
    logger.info(f"  Budget Branch Name: {settings.budget_branch_name}")
    logger.info(f"  Azure Management URL: {settings.azure_management_url}")
    logger.info(f"  Transport: {settings.transport}")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")


def create_app(
    settings: Optional[ServerSettings] = None,
    services: Optional[ToolServices] = None,
    registry: Optional[CollectorRegistry] = None,
) -> FastAPI:
    """Build the FastAPI application serving MCP over streamable HTTP.

    Args:
        settings: Server settings; resolved from the environment when omitted.
        services: Pre-built tool services, mainly for tests.
        registry: Prometheus registry backing /metrics; the default
            registry when omitted.

    Returns:
        FastAPI application with the MCP endpoint mounted at /mcp.
    """
    settings = settings or get_settings()
    if services is None:
        services = build_services(settings, metrics=get_metrics(registry))
    # Host-header checks follow the bind address; loopback binds allow only local names.
    mcp = create_server(services, host=settings.host)
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Tool server starting up...")
        _log_configuration(settings)
        async with mcp.session_manager.run():
            logger.info("Tool server started successfully")
            yield
        logger.info("Tool server shutting down...")
        await services.aclose()
        logger.info("Tool server shutdown complete")

    app = FastAPI(
        title="MCP Tool Server",
        description="GitLab, Azure and budget provisioning tools over MCP",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health():
        """Liveness probe endpoint."""
        return {"status": "healthy"}

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(generate_metrics_output(registry), media_type=CONTENT_TYPE_LATEST)

    app.mount("/", mcp_app)
    return app


async def _serve_stdio(settings: ServerSettings) -> None:
    services = build_services(settings)
    mcp = create_server(services, host=settings.host)
    _log_configuration(settings)
    try:
        await mcp.run_stdio_async()
    finally:
        await services.aclose()


def run() -> None:
    """Console entry point: serve over HTTP or stdio depending on settings."""
    settings = get_settings()
    _configure_logging(settings.log_level)

    if settings.transport == "stdio":
        asyncio.run(_serve_stdio(settings))
        return

    import uvicorn

    uvicorn.run(
        "src.toolserver.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
