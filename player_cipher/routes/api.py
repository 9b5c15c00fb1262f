"""
API route definitions for the Player Cipher API.
"""

import logging

from fastapi import APIRouter, HTTPException

from ..core.diagnostics import is_debug_enabled
from ..core.errors import ExtractionError
from ..models.request import FragmentsRequest, ResolveRequest
from ..models.response import ErrorResponse, FragmentsResponse, ResolveResponse
from ..resolver import split_fragments
from ..service import get_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/resolve",
    response_model=ResolveResponse,
    summary="Resolve playable URLs for a list of format descriptors",
    description=(
        "Deciphers signatures and transforms the n parameter of every format "
        "using the given player. Any failure yields an empty result, never a "
        "partial one."
    ),
)
async def resolve_formats(request: ResolveRequest):
    player_url = request.player_url.strip()
    resolved = await get_service().resolve_batch(
        request.formats, player_url, request.fetch_options()
    )
    if request.formats and not resolved:
        logger.info("No formats resolved with player %s", player_url)
    return ResolveResponse(
        success=bool(resolved),
        player_url=player_url,
        count=len(resolved),
        formats=resolved,
    )


@router.post(
    "/fragments",
    response_model=FragmentsResponse,
    responses={
        502: {"model": ErrorResponse, "description": "Player could not be fetched or parsed"},
    },
    summary="Extract the decipher, helper and n-transform code from a player",
)
async def player_fragments(request: FragmentsRequest):
    player_url = request.player_url.strip()
    try:
        fragments = await get_service().get_fragments(player_url, request.fetch_options())
    except ExtractionError as e:
        raise HTTPException(
            status_code=502,
            detail={
                "success": False,
                "error": str(e),
                "error_code": e.error_code or "extraction.failed",
                "player_url": player_url,
            },
        )

    decipher, helpers, n_transform = split_fragments(fragments)
    return FragmentsResponse(
        player_url=player_url,
        decipher=decipher,
        helpers=helpers,
        n_transform=n_transform,
    )


@router.delete("/cache", summary="Forget extracted functions for one or all players")
async def clear_cache(player_url: str | None = None):
    cleared = get_service().cache.invalidate(player_url)
    logger.info("Cleared %d cached player(s)", cleared)
    return {"success": True, "cleared": cleared}


@router.get("/health", summary="Health check")
async def health_check():
    return {
        "status": "ok",
        "cached_players": len(get_service().cache),
        "debug": is_debug_enabled(),
    }
