from typing import Any, Dict

from fastapi import APIRouter

from ..config import settings
from ..providers.coingecko import get_coingecko_provider
from ..providers.dexscreener import get_dexscreener_provider
from ..providers.helius import get_helius_provider
from ..providers.jupiter import get_jupiter_swap_provider
from ..providers.llm import canonical_provider_name
from ..providers.solana_rpc import get_solana_rpc

router = APIRouter()


def _llm_status() -> Dict[str, Any]:
    if not settings.has_llm_key:
        return {"status": "unavailable", "reason": "No API key configured"}
    return {
        "status": "configured",
        "provider": canonical_provider_name(settings.llm_provider),
        "model": settings.llm_model,
    }


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Report provider configuration without spending upstream quota"""

    provider_status: Dict[str, Any] = {"llm": _llm_status()}
    provider_status["solana_rpc"] = await get_solana_rpc().health_check()
    provider_status["helius"] = await get_helius_provider().health_check()
    provider_status["jupiter"] = await get_jupiter_swap_provider().health_check()
    provider_status["dexscreener"] = await get_dexscreener_provider().health_check()
    provider_status["coingecko"] = await get_coingecko_provider().health_check()

    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] != "unavailable"
    )

    return {
        "status": "healthy" if available_providers == len(provider_status) else "degraded",
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status),
    }
