"""Pydantic models shared across the REST API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .models import AuditConfig, Site


class SlackContext(BaseModel):
    """Slack thread that asked for the audit."""

    model_config = ConfigDict(extra="allow")

    channel: str
    ts: str | None = None


class AuditContext(BaseModel):
    """Caller supplied context, forwarded to the queue untouched."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    slack_context: SlackContext | None = Field(
        default=None, alias="slackContext"
    )


class AuditTriggerRequest(BaseModel):
    """Body of a trigger request."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(min_length=1, description="Audit type or alias")
    url: str = Field(min_length=1, description='"all" or a site base URL')
    audit_context: AuditContext | None = Field(
        default=None, alias="auditContext"
    )


class TriggerResponse(BaseModel):
    """Dispatch confirmations, one per expanded audit type."""

    message: list[str]


class ErrorResponse(BaseModel):
    message: str


class SiteCreate(BaseModel):
    """Fields accepted when creating a site."""

    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(alias="baseURL", min_length=1)
    ims_org_id: str | None = Field(default=None, alias="imsOrgId")
    is_live: bool | None = Field(default=None, alias="isLive")
    audit_config: AuditConfig | None = Field(default=None, alias="auditConfig")


class SiteDto(BaseModel):
    """JSON representation of a site."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    base_url: str = Field(alias="baseURL")
    ims_org_id: str = Field(alias="imsOrgId")
    is_live: bool = Field(alias="isLive")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    audit_config: AuditConfig = Field(alias="auditConfig")

    @classmethod
    def from_site(cls, site: Site) -> "SiteDto":
        return cls(
            id=site.id,
            base_url=site.base_url,
            ims_org_id=site.ims_org_id,
            is_live=site.is_live,
            created_at=site.created_at,
            updated_at=site.updated_at,
            audit_config=site.audit_config.model_copy(deep=True),
        )
