"""API routes returning JSON for HTMX or external tools."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from streamit.core.dependencies import get_catalog, get_registry
from streamit.core.errors import RetryableFetchError
from streamit.models.media import MediaType, SearchResult
from streamit.providers import ProviderRegistry
from streamit.services.catalog import CatalogClient

router = APIRouter()


@router.get("/search", response_model=List[SearchResult])
async def api_search(
    q: str = Query(..., description="Search query"),
    catalog: CatalogClient = Depends(get_catalog),
):
    """Search the catalog for movies and series."""
    try:
        return await catalog.search(q)
    except RetryableFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get("/providers")
async def list_providers(registry: ProviderRegistry = Depends(get_registry)):
    """List all registered providers in display order."""
    return {
        "providers": [
            {
                "key": p.key,
                "name": p.display_name,
                "media_types": [t.value for t in MediaType if p.supports(t)],
                "referrer_policy": p.referrer_policy,
            }
            for p in registry.all()
        ]
    }


@router.get("/embed")
async def embed_url(
    imdb_id: str = Query(..., alias="id", description="IMDb id"),
    media_type: MediaType = Query(
        MediaType.MOVIE, alias="type", description="movie or series"
    ),
    server: Optional[str] = Query(None, description="Provider key"),
    season: Optional[int] = Query(None, ge=1),
    episode: Optional[int] = Query(None, ge=1),
    registry: ProviderRegistry = Depends(get_registry),
):
    """Resolve an embed URL without opening a watch session."""
    key = server or registry.first().key
    url = registry.resolve_embed_url(key, media_type, imdb_id, season, episode)
    if url is None:
        raise HTTPException(status_code=404, detail="No embed URL for this request")
    return {"server": key, "url": url}


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "streamit"}
