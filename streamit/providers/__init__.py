"""Provider registry for embed URL resolution."""

import logging
from typing import Dict, Iterable, List, Optional

from streamit.models.media import MediaType
from streamit.providers.base import ProviderDescriptor
from streamit.providers.embed_providers import EMBED_PROVIDERS

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Ordered registry of embed providers.

    Iteration order is registration order; ``first()`` is the default
    provider for new watch sessions.
    """

    def __init__(self, providers: Iterable[ProviderDescriptor] = ()) -> None:
        self._providers: Dict[str, ProviderDescriptor] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: ProviderDescriptor) -> None:
        """Register a provider descriptor. Keys must be unique."""
        if provider.key in self._providers:
            raise ValueError(f"Provider '{provider.key}' is already registered")
        self._providers[provider.key] = provider

    def get(self, key: str) -> ProviderDescriptor | None:
        """Get a provider by key."""
        return self._providers.get(key)

    def all(self) -> List[ProviderDescriptor]:
        """Get all registered providers."""
        return list(self._providers.values())

    def keys(self) -> List[str]:
        """Get keys of all registered providers."""
        return list(self._providers.keys())

    def first(self) -> ProviderDescriptor:
        if not self._providers:
            raise LookupError("No providers registered")
        return next(iter(self._providers.values()))

    def __contains__(self, key: object) -> bool:
        return key in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def resolve_embed_url(
        self,
        provider_key: str,
        media_type: MediaType,
        media_id: str,
        season: int | None = None,
        episode: int | None = None,
    ) -> Optional[str]:
        """Build the embed URL for a provider, or None if it cannot serve it."""
        provider = self._providers.get(provider_key)
        if provider is None:
            return None
        return provider.embed_url(media_type, media_id, season, episode)


def build_registry(enabled: Iterable[str] = ()) -> ProviderRegistry:
    """Build a registry from the built-in table.

    When ``enabled`` is given, only those providers are kept, in that order.
    Unknown keys are skipped with a warning.
    """
    enabled = list(enabled)
    if not enabled:
        return ProviderRegistry(EMBED_PROVIDERS)

    by_key = {p.key: p for p in EMBED_PROVIDERS}
    registry = ProviderRegistry()
    for key in enabled:
        provider = by_key.get(key)
        if provider is None:
            logger.warning("Ignoring unknown provider '%s' in enabled_providers", key)
            continue
        if key not in registry:
            registry.register(provider)
    if not len(registry):
        logger.warning("No enabled provider matched, using the full table")
        return ProviderRegistry(EMBED_PROVIDERS)
    return registry
