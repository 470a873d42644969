"""GAIMPORT — Settings-backed Site & Capability Lookups."""

from typing import Dict, List, Optional

from gaimport.config import settings


class StaticSiteLookup:
    """Site lookup answering from a fixed per-site table.

    Sites missing from the table fall back to the configured
    ``site_urls`` / ``site_ecommerce_enabled`` settings.
    """

    def __init__(
        self,
        site_urls: Optional[Dict[int, List[str]]] = None,
        ecommerce_sites: Optional[set] = None,
    ):
        self._site_urls = site_urls or {}
        self._ecommerce_sites = ecommerce_sites

    def get_site_urls(self, site_id: int) -> List[str]:
        urls = self._site_urls.get(site_id) or settings.site_urls
        if not urls:
            raise ValueError(f"No URLs known for site {site_id}")
        return list(urls)

    def is_ecommerce_enabled(self, site_id: int) -> bool:
        if self._ecommerce_sites is None:
            return settings.site_ecommerce_enabled
        return site_id in self._ecommerce_sites


class SettingsCapabilityLookup:
    def is_funnel_capability_available(self) -> bool:
        return settings.funnels_enabled
