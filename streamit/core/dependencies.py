"""FastAPI dependencies for the shared application services."""

from fastapi import Request

from streamit.providers import ProviderRegistry
from streamit.services.catalog import CatalogClient
from streamit.services.sessions import SessionStore


def get_catalog(request: Request) -> CatalogClient:
    return request.app.state.catalog


def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions
