"""CRUD operations over site records."""

from __future__ import annotations

import base64
import string
from typing import Any, Protocol

from pydantic import ValidationError

from .errors import BadRequest, ExportUnavailable, NotFound, internal_errors
from .logging_setup import get_logger
from .models import AuditConfig, EventCode, Site
from .schemas import SiteCreate, SiteDto
from .storage import SiteRepository

log = get_logger("sites")

# Request body keys the update operation understands. Anything else is
# ignored and does not count as a modification.
UPDATABLE_FIELDS = ("imsOrgId", "isLive", "auditConfig")

_B64_ALPHABET = frozenset(string.ascii_letters + string.digits + "+/-_")
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


class SiteExporter(Protocol):
    """Formatting collaborator for bulk site exports."""

    def to_csv(self, sites: list[SiteDto]) -> bytes: ...

    def to_xlsx(self, sites: list[SiteDto]) -> bytes: ...


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def decode_base_url(encoded: str) -> str:
    """Decode a base64 encoded base URL path parameter.

    Decoding is lenient: characters outside the standard and URL-safe
    alphabets are skipped, input stops at the first ``=`` and a dangling
    final character is dropped. Undecodable bytes are replaced, so garbage
    decodes to a string that simply matches no site.
    """
    data = "".join(
        char for char in encoded.split("=", 1)[0] if char in _B64_ALPHABET
    )
    if len(data) % 4 == 1:
        data = data[:-1]
    data += "=" * (-len(data) % 4)
    raw = base64.b64decode(data.translate(_URLSAFE_TO_STANDARD))
    return raw.decode("utf-8", errors="replace").strip()


class SitesController:
    """Site operations exposed by the API.

    Each operation returns plain payloads (``SiteDto`` or lists thereof) and
    raises ``ApiError`` subclasses for the routes to map onto status codes.
    """

    def __init__(
        self,
        data_access: SiteRepository | None,
        exporter: SiteExporter | None = None,
    ) -> None:
        if data_access is None:
            raise ValueError("Data access required")
        self.data_access = data_access
        self.exporter = exporter

    @internal_errors("create site")
    async def create_site(self, data: SiteCreate) -> SiteDto:
        fields = data.model_dump(by_alias=True, exclude_none=True)
        site = await self.data_access.add_site(fields)
        log.info(
            EventCode.SITE_CREATED.value, site_id=site.id, base_url=site.base_url
        )
        return SiteDto.from_site(site)

    @internal_errors("list sites")
    async def get_all(self) -> list[SiteDto]:
        sites = await self.data_access.get_sites()
        return [SiteDto.from_site(site) for site in sites]

    @internal_errors("export sites as CSV")
    async def get_all_as_csv(self) -> bytes:
        exporter = self._require_exporter()
        return exporter.to_csv(await self.get_all())

    @internal_errors("export sites as XLSX")
    async def get_all_as_xlsx(self) -> bytes:
        exporter = self._require_exporter()
        return exporter.to_xlsx(await self.get_all())

    @internal_errors("get site by base URL")
    async def get_by_base_url(self, encoded_base_url: str | None) -> SiteDto:
        if not _has_text(encoded_base_url):
            raise BadRequest("Base URL required")
        base_url = decode_base_url(encoded_base_url)
        if not base_url:
            raise BadRequest("Base URL required")

        site = await self.data_access.get_site_by_base_url(base_url)
        if site is None:
            raise NotFound("Site not found")
        return SiteDto.from_site(site)

    @internal_errors("get site by id")
    async def get_by_id(self, site_id: str | None) -> SiteDto:
        site = await self._load_site(site_id)
        return SiteDto.from_site(site)

    @internal_errors("remove site")
    async def remove_site(self, site_id: str | None) -> None:
        site = await self._load_site(site_id)
        await self.data_access.remove_site(site.id)
        log.info(EventCode.SITE_REMOVED.value, site_id=site.id)

    @internal_errors("update site")
    async def update_site(
        self, site_id: str | None, data: dict[str, Any] | None
    ) -> SiteDto:
        site = await self._load_site(site_id)
        if not data:
            if data is None:
                raise BadRequest("Request body required")
            raise BadRequest("No updates provided")

        changed = self._apply_updates(site, data)
        if not changed:
            raise BadRequest("No updates provided")

        updated = await self.data_access.update_site(site)
        log.info(EventCode.SITE_UPDATED.value, site_id=site.id, fields=changed)
        return SiteDto.from_site(updated)

    @staticmethod
    def _apply_updates(site: Site, data: dict[str, Any]) -> list[str]:
        """Apply allow-listed fields to ``site``.

        Returns:
            list[str]: Names of the fields that actually changed.
        """
        changed: list[str] = []

        ims_org_id = data.get("imsOrgId")
        if _has_text(ims_org_id) and ims_org_id != site.ims_org_id:
            site.update_ims_org_id(ims_org_id)
            changed.append("imsOrgId")

        is_live = data.get("isLive")
        if isinstance(is_live, bool) and is_live != site.is_live:
            site.toggle_live()
            changed.append("isLive")

        audit_config = data.get("auditConfig")
        if isinstance(audit_config, dict):
            try:
                new_config = AuditConfig.model_validate(audit_config)
            except ValidationError as exc:
                raise BadRequest("Invalid audit config") from exc
            if new_config != site.audit_config:
                site.update_audit_config(new_config)
                changed.append("auditConfig")

        ignored = sorted(set(data) - set(UPDATABLE_FIELDS))
        if ignored:
            log.info("update_fields_ignored", site_id=site.id, fields=ignored)
        return changed

    async def _load_site(self, site_id: str | None) -> Site:
        if not _has_text(site_id):
            raise BadRequest("Site ID required")
        site = await self.data_access.get_site_by_id(site_id)
        if site is None:
            raise NotFound("Site not found")
        return site

    def _require_exporter(self) -> SiteExporter:
        if self.exporter is None:
            raise ExportUnavailable()
        return self.exporter
