"""FastAPI application factory with lifespan management.

``create_app`` builds the node's components explicitly: one circuit
breaker, one downstream client, one orchestrator and one metrics
collector per application. They live on ``app.state`` for the lifetime
of the process; nothing is held in module-level globals.
"""

from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from chain_breaker.api.middleware import register_error_handlers
from chain_breaker.api.routes import register_routes
from chain_breaker.chain import ChainOrchestrator, DownstreamCaller, FaultInjector
from chain_breaker.circuit_breaker import CircuitBreaker, log_breaker_event
from chain_breaker.client import DownstreamClient
from chain_breaker.config import ChainSettings, load_settings
from chain_breaker.metrics import MetricsCollector

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan (startup and shutdown).

    Closes the downstream client on shutdown when the application created it.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during the application's running state.
    """
    settings: ChainSettings = app.state.settings
    logger.info(
        "Chain node %s starting (jumps=%d, next hop=%s, fault injection=%s)",
        settings.instance_id,
        settings.jumps,
        settings.chain_service,
        "on" if settings.inject_errors else "off",
    )
    try:
        yield
    finally:
        owned_client: DownstreamClient | None = app.state.owned_client
        if owned_client is not None:
            await owned_client.close()
        logger.info("Chain node %s stopped", settings.instance_id)


def create_app(
    settings: ChainSettings | None = None,
    *,
    breaker: CircuitBreaker | None = None,
    caller: DownstreamCaller | None = None,
    fault_injector: FaultInjector | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Node settings. Loaded from the environment if None.
        breaker: Circuit breaker to use. Built from ``settings.breaker`` if None.
        caller: Downstream caller. A ``DownstreamClient`` owned by the app if None.
        fault_injector: Fault injector. Built from ``settings`` if None.

    Returns:
        A configured FastAPI application with lifespan management.
    """
    settings = settings or load_settings()
    breaker = breaker or CircuitBreaker(settings.breaker)
    breaker.add_listener(log_breaker_event)

    metrics = MetricsCollector()
    metrics.attach(breaker)

    owned_client: DownstreamClient | None = None
    if caller is None:
        owned_client = DownstreamClient()
        caller = owned_client

    if fault_injector is None:
        fault_injector = FaultInjector(
            enabled=settings.inject_errors,
            rng=random.Random(settings.fault_seed),
        )

    orchestrator = ChainOrchestrator(
        breaker=breaker,
        caller=caller,
        instance_id=settings.instance_id,
        jumps=settings.jumps,
        fault_injector=fault_injector,
    )

    app = FastAPI(
        title="Chain Breaker",
        version="1.0.0",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.breaker = breaker
    app.state.metrics = metrics
    app.state.orchestrator = orchestrator
    app.state.owned_client = owned_client

    register_error_handlers(app)
    register_routes(app)

    return app
