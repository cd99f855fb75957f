"""Server runner module for the chain breaker API.

Provides a run_server utility that configures and starts uvicorn
with appropriate defaults.
"""

from __future__ import annotations

from typing import Any

import uvicorn


def run_server(
    host: str = "0.0.0.0",
    port: int = 3000,
    log_level: str = "info",
    reload: bool = False,
    **kwargs: Any,
) -> None:
    """Run the chain breaker API server.

    Settings are read from the environment by the application factory
    in the server process.

    Args:
        host: The host to bind to. Defaults to '0.0.0.0'.
        port: The port to bind to. Defaults to 3000.
        log_level: The log level for uvicorn. Defaults to 'info'.
        reload: Whether to enable auto-reload. Defaults to False.
        **kwargs: Additional keyword arguments to forward to uvicorn.run.
    """
    uvicorn.run(
        "chain_breaker.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level,
        reload=reload,
        **kwargs,
    )
