"""Chain breaker HTTP API package.

This package provides the FastAPI application serving the chain
endpoint together with health, circuit status and metrics endpoints.
"""

from chain_breaker.api.app import create_app

__all__ = ["create_app"]
