"""Core domain models for sites and audit dispatch."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

AUDIT_TYPE_CWV = "cwv"
AUDIT_TYPE_LHS_DESKTOP = "lhs-desktop"
AUDIT_TYPE_LHS_MOBILE = "lhs-mobile"
AUDIT_TYPE_404 = "404"
AUDIT_TYPE_BROKEN_BACKLINKS = "broken-backlinks"
AUDIT_TYPE_EXPERIMENTATION = "experimentation"
AUDIT_TYPE_ORGANIC_TRAFFIC = "organic-traffic"

# Requested type -> concrete types, dispatched in this order.
AUDIT_TYPE_ALIASES: dict[str, tuple[str, ...]] = {
    "lhs": (AUDIT_TYPE_LHS_DESKTOP, AUDIT_TYPE_LHS_MOBILE),
}

DEFAULT_IMS_ORG_ID = "default"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditTypeConfig(BaseModel):
    """Per audit type switch embedded in a site's audit config."""

    disabled: bool = False


class AuditConfig(BaseModel):
    """Audit settings of a single site."""

    model_config = ConfigDict(populate_by_name=True)

    all_audits_disabled: bool = Field(default=False, alias="auditsDisabled")
    audit_type_configs: dict[str, AuditTypeConfig] = Field(
        default_factory=dict, alias="auditTypeConfigs"
    )

    def audits_disabled(self) -> bool:
        return self.all_audits_disabled

    def get_audit_type_config(self, audit_type: str) -> AuditTypeConfig | None:
        """Return the entry for ``audit_type``, or None when absent."""

        return self.audit_type_configs.get(audit_type)


class Site(BaseModel):
    """A tracked base URL together with its audit configuration."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    base_url: str = Field(alias="baseURL")
    ims_org_id: str = Field(default=DEFAULT_IMS_ORG_ID, alias="imsOrgId")
    is_live: bool = Field(default=False, alias="isLive")
    audit_config: AuditConfig = Field(
        default_factory=AuditConfig, alias="auditConfig"
    )
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Reject blank base URLs; they are the lookup key."""

        if not value or not value.strip():
            raise ValueError("baseURL must not be empty")
        return value.strip()

    def get_audit_config(self) -> AuditConfig:
        return self.audit_config

    # Explicit setters for the fields the API allows to change.

    def update_ims_org_id(self, ims_org_id: str) -> None:
        self.ims_org_id = ims_org_id
        self._touch()

    def toggle_live(self) -> None:
        self.is_live = not self.is_live
        self._touch()

    def update_audit_config(self, audit_config: AuditConfig) -> None:
        self.audit_config = audit_config
        self._touch()

    def _touch(self) -> None:
        self.updated_at = _utcnow()


class DispatchMessage(BaseModel):
    """One queue message: an audit type and the sites eligible for it."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    audit_context: dict[str, Any] | None = Field(
        default=None, alias="auditContext"
    )
    site_ids: list[str] = Field(default_factory=list, alias="siteIds")

    def summary(self) -> str:
        count = len(self.site_ids)
        target = f"{count} sites" if count != 1 else self.site_ids[0]
        return f"Triggered {self.type} audit for {target}"


class EventCode(str, Enum):
    """Enumeration of structured logging event codes."""

    APP_START = "APP_START"
    APP_STOP = "APP_STOP"
    SITES_RESOLVED = "SITES_RESOLVED"
    AUDIT_DISPATCHED = "AUDIT_DISPATCHED"
    AUDIT_TRIGGERED = "AUDIT_TRIGGERED"
    SITE_CREATED = "SITE_CREATED"
    SITE_UPDATED = "SITE_UPDATED"
    SITE_REMOVED = "SITE_REMOVED"
    REQUEST_FAILED = "REQUEST_FAILED"
