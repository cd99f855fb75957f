"""Route registration for FastAPI app.

Wires all route modules (chain, health, circuit, metrics) to the FastAPI
app with correct URL prefixes.
"""

from __future__ import annotations

from fastapi import FastAPI

from chain_breaker.api.routes import chain, circuit, health, metrics


def register_routes(app: FastAPI) -> None:
    """Register all route modules to the FastAPI app.

    This function is idempotent - calling it multiple times on the same app
    will not duplicate routes.

    Args:
        app: The FastAPI application instance.
    """
    # Guard against duplicate registration
    if getattr(app.state, "routes_registered", False):
        return

    app.include_router(chain.router, tags=["chain"])
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(circuit.router, prefix="/circuit", tags=["circuit"])
    app.include_router(metrics.router, prefix="/metrics", tags=["metrics"])

    app.state.routes_registered = True
