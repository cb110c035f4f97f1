"""UI routes returning HTML via Jinja2 templates."""

import logging
from urllib.parse import urlencode, urlsplit

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from streamit.api.html_gateway import HtmlRenderGateway
from streamit.api.templating import templates
from streamit.core.config import get_settings
from streamit.core.dependencies import get_catalog, get_registry, get_sessions
from streamit.core.errors import MediaNotFound, MissingIdentifier, RetryableFetchError
from streamit.providers import ProviderRegistry
from streamit.services.catalog import CatalogClient
from streamit.services.navigation import (
    WatchController,
    WatchPhase,
    parse_query,
    serialize_state,
)
from streamit.services.sessions import SessionStore, WatchSession

router = APIRouter()
logger = logging.getLogger(__name__)

SESSION_COOKIE = "streamit_session"

ERROR_STATUS = {
    MissingIdentifier: 400,
    MediaNotFound: 404,
    RetryableFetchError: 502,
}


def _new_watch_session(
    catalog: CatalogClient, registry: ProviderRegistry
) -> WatchSession:
    gateway = HtmlRenderGateway(templates.env)
    controller = WatchController(catalog, registry, gateway=gateway, history=gateway)
    return WatchSession(controller=controller, gateway=gateway)


def _set_session_cookie(response, session_id: str) -> None:
    response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")


@router.get("/")
async def watch_page(
    request: Request,
    catalog: CatalogClient = Depends(get_catalog),
    registry: ProviderRegistry = Depends(get_registry),
    sessions: SessionStore = Depends(get_sessions),
):
    """Render the player for ?id=...&season=...&episode=...&server=..."""
    settings = get_settings()
    if (
        not request.query_params.get("id", "").strip()
        and settings.missing_id_behavior == "prompt"
    ):
        return templates.TemplateResponse(
            request=request,
            name="lookup.html",
            context={"page_title": "Stream It"},
        )

    session = _new_watch_session(catalog, registry)
    controller = session.controller
    await controller.start(request.url.query)

    if controller.phase != WatchPhase.READY:
        return templates.TemplateResponse(
            request=request,
            name="error.html",
            context={
                "page_title": "Stream It",
                "message": session.gateway.error_message,
            },
            status_code=ERROR_STATUS.get(type(controller.error), 500),
        )

    # The page is rendered whole, so nothing is pending for HTMX.
    _, url_query = session.gateway.drain()

    session_id = request.cookies.get(SESSION_COOKIE) or sessions.new_id()
    sessions.put(session_id, session)

    response = templates.TemplateResponse(
        request=request,
        name="watch.html",
        context={
            "page_title": f"{controller.metadata.title} - Stream It",
            "regions": session.gateway.fragments,
            "is_series": controller.is_series,
            "url_query": url_query,
        },
    )
    _set_session_cookie(response, session_id)
    return response


async def _command_session(
    request: Request,
    catalog: CatalogClient,
    registry: ProviderRegistry,
    sessions: SessionStore,
) -> tuple[str, WatchSession] | None:
    """Find the caller's watch session.

    The page URL HTMX reports in HX-Current-URL wins: a session that
    expired, was lost on restart, or belongs to another tab of the same
    browser is rebuilt from it.
    """
    session_id = request.cookies.get(SESSION_COOKIE)
    current_url = request.headers.get("HX-Current-URL")
    current_query = urlsplit(current_url).query if current_url else None

    session = sessions.get(session_id)
    if session is not None and _matches_page(session, current_query):
        session.gateway.clear_notice()
        return session_id, session

    if current_query is None:
        return None

    logger.info("Rebuilding watch session from %s", current_url)
    session = _new_watch_session(catalog, registry)
    await session.controller.start(current_query)

    session_id = session_id or sessions.new_id()
    if session.controller.phase == WatchPhase.READY:
        # The rebuilt page regions are already on screen.
        session.gateway.drain()
        sessions.put(session_id, session)
    return session_id, session


def _matches_page(session: WatchSession, current_query: str | None) -> bool:
    if current_query is None:
        return True
    state = session.controller.state
    return parse_query(current_query) == parse_query(serialize_state(state))


def _command_response(request: Request, session_id: str, session: WatchSession):
    fragments, url_query = session.gateway.drain()
    response = HTMLResponse("".join(fragments))
    if url_query is not None:
        path = request.app.url_path_for("watch_page")
        response.headers["HX-Replace-Url"] = f"{path}?{url_query}"
    _set_session_cookie(response, session_id)
    return response


def _expired_response(request: Request):
    return templates.TemplateResponse(
        request=request,
        name="partials/notice.html",
        context={"message": "Your session has expired, please reload the page."},
    )


@router.post("/watch/provider")
async def watch_provider(
    request: Request,
    key: str = Form(...),
    catalog: CatalogClient = Depends(get_catalog),
    registry: ProviderRegistry = Depends(get_registry),
    sessions: SessionStore = Depends(get_sessions),
):
    """Switch the active server."""
    found = await _command_session(request, catalog, registry, sessions)
    if found is None:
        return _expired_response(request)
    session_id, session = found
    session.controller.select_provider(key)
    return _command_response(request, session_id, session)


@router.post("/watch/season")
async def watch_season(
    request: Request,
    season: int = Form(...),
    catalog: CatalogClient = Depends(get_catalog),
    registry: ProviderRegistry = Depends(get_registry),
    sessions: SessionStore = Depends(get_sessions),
):
    """Switch season, starting from its first episode."""
    found = await _command_session(request, catalog, registry, sessions)
    if found is None:
        return _expired_response(request)
    session_id, session = found
    await session.controller.select_season(season)
    return _command_response(request, session_id, session)


@router.post("/watch/episode")
async def watch_episode(
    request: Request,
    episode: int = Form(...),
    catalog: CatalogClient = Depends(get_catalog),
    registry: ProviderRegistry = Depends(get_registry),
    sessions: SessionStore = Depends(get_sessions),
):
    """Switch episode within the current season."""
    found = await _command_session(request, catalog, registry, sessions)
    if found is None:
        return _expired_response(request)
    session_id, session = found
    session.controller.select_episode(episode)
    return _command_response(request, session_id, session)


@router.post("/watch/navigate")
async def watch_navigate(
    request: Request,
    direction: str = Form(...),
    catalog: CatalogClient = Depends(get_catalog),
    registry: ProviderRegistry = Depends(get_registry),
    sessions: SessionStore = Depends(get_sessions),
):
    """Previous/next episode, crossing into neighbouring seasons."""
    found = await _command_session(request, catalog, registry, sessions)
    if found is None:
        return _expired_response(request)
    session_id, session = found
    await session.controller.navigate(direction)
    return _command_response(request, session_id, session)


@router.post("/lookup")
async def lookup(
    request: Request,
    imdb_id: str = Form(...),
    catalog: CatalogClient = Depends(get_catalog),
):
    """Validate an IMDb id from the lookup form and open its player."""
    imdb_id = imdb_id.strip()
    message = "Enter an IMDb ID."
    if imdb_id:
        try:
            metadata = await catalog.fetch_media_metadata(imdb_id)
        except RetryableFetchError:
            message = "An error occurred while validating the ID."
        else:
            if metadata is not None:
                response = HTMLResponse("")
                path = request.app.url_path_for("watch_page")
                response.headers["HX-Redirect"] = f"{path}?{urlencode({'id': imdb_id})}"
                return response
            message = "Invalid IMDb ID. Please try again."

    return templates.TemplateResponse(
        request=request,
        name="partials/lookup_error.html",
        context={"message": message},
    )


@router.post("/search")
async def search(
    request: Request,
    query: str = Form(...),
    catalog: CatalogClient = Depends(get_catalog),
):
    """Handle search form submission and return HTML partial."""
    error = None
    try:
        results = await catalog.search(query)
    except RetryableFetchError:
        results = []
        error = "Search is unavailable right now, please try again."

    return templates.TemplateResponse(
        request=request,
        name="partials/search_results.html",
        context={"results": results, "query": query, "error": error},
    )
