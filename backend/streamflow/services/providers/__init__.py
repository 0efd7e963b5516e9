"""Source providers and the factory building them from settings"""
from typing import List, Optional
import logging

from streamflow.config import Settings
from streamflow.services.providers.audius import AudiusProvider
from streamflow.services.providers.base import HttpJsonClient, HttpSourceProvider, SourceProvider
from streamflow.services.providers.discovery import DiscoveryClient
from streamflow.services.providers.soundcloud import SoundCloudProvider
from streamflow.services.providers.youtube import YouTubeProvider
from streamflow.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)

__all__ = [
    "SourceProvider",
    "HttpJsonClient",
    "HttpSourceProvider",
    "YouTubeProvider",
    "SoundCloudProvider",
    "AudiusProvider",
    "DiscoveryClient",
    "build_providers",
    "build_discovery",
]


def build_providers(settings: Settings, cache: ResponseCache) -> List[SourceProvider]:
    """
    Construct the enabled providers in configuration order

    Args:
        settings: Application settings
        cache: Response cache shared by every provider

    Returns:
        List of providers; unknown source names are skipped with a warning
    """
    factories = {
        "youtube": lambda: YouTubeProvider(
            settings.proxy_base_url, cache=cache, timeout=settings.request_timeout_seconds
        ),
        "soundcloud": lambda: SoundCloudProvider(
            settings.proxy_base_url, cache=cache, timeout=settings.request_timeout_seconds
        ),
        "audius": lambda: AudiusProvider(
            settings.audius_api_url, cache=cache, timeout=settings.request_timeout_seconds
        ),
    }

    providers = []
    for name in settings.enabled_sources_list:
        factory = factories.get(name)
        if factory is None:
            logger.warning(f"Ignoring unknown source '{name}' in enabled_sources")
            continue
        providers.append(factory())
    return providers


def build_discovery(settings: Settings, cache: ResponseCache) -> Optional[DiscoveryClient]:
    """Lyrics, artist and recommendation lookups, or None when disabled"""
    if not settings.discovery_enabled:
        logger.info("Discovery lookups disabled")
        return None
    return DiscoveryClient(settings.proxy_base_url, cache=cache, timeout=settings.request_timeout_seconds)
