"""Chain endpoints.

Endpoints:
- GET / - Greeting identifying this node
- GET /chain?count=<n> - Terminate the chain or forward to the next hop
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from chain_breaker.api.dependencies import get_orchestrator_dep, get_settings_dep
from chain_breaker.chain import ChainOrchestrator, ChainRequest, parse_hop_count
from chain_breaker.config import ChainSettings

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def get_greeting(
    orchestrator: ChainOrchestrator = Depends(get_orchestrator_dep),
) -> str:
    """Return a greeting naming this node."""
    return f"{orchestrator.greeting()}\n"


@router.get("/chain")
async def get_chain(
    count: str | None = None,
    orchestrator: ChainOrchestrator = Depends(get_orchestrator_dep),
    settings: ChainSettings = Depends(get_settings_dep),
) -> JSONResponse:
    """Handle one hop of the chain.

    Args:
        count: Hops already taken. Absent, non-integer or negative values
            are treated as 0.
        orchestrator: Chain orchestrator (injected).
        settings: Application settings (injected).

    Returns:
        The hop's envelope with status 200, or 502 when a fault was injected.
    """
    request = ChainRequest(
        hop_count=parse_hop_count(count),
        endpoint_template=settings.chain_service,
    )
    response = await orchestrator.handle(request)
    return JSONResponse(status_code=response.status_code, content=response.body.to_body())
