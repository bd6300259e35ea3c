from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from ..core.orchestrator import PromptOrchestrator
from ..types import PromptRequest

router = APIRouter()


def get_orchestrator() -> PromptOrchestrator:
    return PromptOrchestrator()


@router.post("/prompt")
async def prompt_endpoint(
    request: PromptRequest,
    orchestrator: PromptOrchestrator = Depends(get_orchestrator),
):
    """Stream one model turn as Server-Sent Events.

    Once streaming starts the status stays 200; later failures arrive in-band
    as ``error`` events.
    """
    if not (request.prompt or "").strip() or not (request.wallet_address or "").strip():
        return JSONResponse(status_code=400, content={"error": "Missing prompt or wallet address."})

    return StreamingResponse(
        orchestrator.stream(request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
