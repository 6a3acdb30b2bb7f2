"""Site repository interface and the in-memory store used locally."""

from __future__ import annotations

import uuid
from typing import Any, Iterable, Protocol

from .models import Site


class SiteRepository(Protocol):
    """Data-access collaborator for site records."""

    async def get_sites(self) -> list[Site]: ...

    async def get_site_by_base_url(self, base_url: str) -> Site | None: ...

    async def get_site_by_id(self, site_id: str) -> Site | None: ...

    async def add_site(self, fields: dict[str, Any]) -> Site: ...

    async def update_site(self, site: Site) -> Site: ...

    async def remove_site(self, site_id: str) -> None: ...


class InMemorySiteRepository:
    """Dictionary backed site store for development and tests.

    Sites are kept in insertion order so listing is stable across calls.
    Stored records are copies; callers mutate their own instance and hand it
    back through ``update_site``.
    """

    def __init__(self, sites: Iterable[Site] = ()) -> None:
        self._sites: dict[str, Site] = {}
        for site in sites:
            self._sites[site.id] = site.model_copy(deep=True)

    async def get_sites(self) -> list[Site]:
        return [site.model_copy(deep=True) for site in self._sites.values()]

    async def get_site_by_base_url(self, base_url: str) -> Site | None:
        for site in self._sites.values():
            if site.base_url == base_url:
                return site.model_copy(deep=True)
        return None

    async def get_site_by_id(self, site_id: str) -> Site | None:
        site = self._sites.get(site_id)
        return site.model_copy(deep=True) if site else None

    async def add_site(self, fields: dict[str, Any]) -> Site:
        site = Site.model_validate({**fields, "id": uuid.uuid4().hex})
        if await self.get_site_by_base_url(site.base_url) is not None:
            raise ValueError(f"Site already exists: {site.base_url}")
        self._sites[site.id] = site
        return site.model_copy(deep=True)

    async def update_site(self, site: Site) -> Site:
        if site.id not in self._sites:
            raise KeyError(site.id)
        self._sites[site.id] = site.model_copy(deep=True)
        return site.model_copy(deep=True)

    async def remove_site(self, site_id: str) -> None:
        self._sites.pop(site_id, None)
