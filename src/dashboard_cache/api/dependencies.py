"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
    - Collaborators preset on app.state (source, notifier, query client)
      are used instead of the defaults, which is how tests plug in fakes
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from dashboard_cache.config import configure_logging, settings
from dashboard_cache.handlers import DashboardHandler
from dashboard_cache.notifications import InMemoryNotifier
from dashboard_cache.query_client import QueryClient
from dashboard_cache.repositories import HttpDashboardRepository
from dashboard_cache.services import DashboardService

logger = logging.getLogger(__name__)


def get_dashboard_service(request: Request) -> DashboardService:
    """Dependency injection for DashboardService from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The DashboardService instance from app.state

    Raises:
        RuntimeError: If service is not initialized
    """
    service = getattr(request.app.state, "dashboard_service", None)
    if service is None:
        raise RuntimeError("DashboardService not initialized. Check lifespan setup.")
    return service


def get_handler(request: Request) -> DashboardHandler:
    """Dependency injection for DashboardHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The DashboardHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "dashboard_handler", None)
    if handler is None:
        raise RuntimeError("DashboardHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Data source (backend API client) - preset or created from settings
    2. Query client (the cache) - one per application
    3. Service (query definitions) - stored in app.state.dashboard_service
    4. Handler (HTTP endpoints) - stored in app.state.dashboard_handler

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Cancels pending cache work, closes the HTTP client it created and
        removes the services from app.state
    """
    configure_logging()

    source = getattr(app.state, "dashboard_source", None)
    owns_source = source is None
    if source is None:
        source = HttpDashboardRepository.create()

    notifier = getattr(app.state, "notifier", None) or InMemoryNotifier()
    query_client = getattr(app.state, "query_client", None) or QueryClient()

    dashboard_service = DashboardService.create(
        client=query_client,
        source=source,
        notifier=notifier,
    )
    dashboard_handler = DashboardHandler(dashboard_service=dashboard_service)

    # Store in app.state (FastAPI pattern)
    app.state.dashboard_service = dashboard_service
    app.state.dashboard_handler = dashboard_handler

    logger.info("Dashboard cache initialized")
    logger.info("Backend API: %s", settings.api_base_url)

    yield

    query_client.clear()
    if owns_source:
        await source.close()

    del app.state.dashboard_handler
    del app.state.dashboard_service
    logger.info("Dashboard cache shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[DashboardHandler, Depends(get_handler)]
ServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
