"""Shared pytest fixtures for the site audit API tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from siteaudit.src.config import Settings
from siteaudit.src.dispatch import LocalQueueDispatcher
from siteaudit.src.main import create_app
from siteaudit.src.models import AuditConfig, AuditTypeConfig, Site
from siteaudit.src.storage import InMemorySiteRepository

QUEUE_URL = "https://queue.test/audit-jobs"


@pytest.fixture()
def settings() -> Settings:
    return Settings(audit_jobs_queue_url=QUEUE_URL, log_json=False)


@pytest.fixture()
def sites() -> list[Site]:
    """Two plain sites, as returned by the repository."""
    return [
        Site(id="site1", base_url="https://site1.com"),
        Site(id="site2", base_url="https://site2.com"),
    ]


@pytest.fixture()
def cwv_disabled_site() -> Site:
    return Site(
        id="site3",
        base_url="https://site3.com",
        audit_config=AuditConfig(
            audit_type_configs={"cwv": AuditTypeConfig(disabled=True)}
        ),
    )


@pytest.fixture()
def audits_disabled_site() -> Site:
    return Site(
        id="site4",
        base_url="https://site4.com",
        audit_config=AuditConfig(all_audits_disabled=True),
    )


@pytest.fixture()
def mock_data_access(sites: list[Site]) -> AsyncMock:
    """Stubbed repository mirroring the happy path for every call."""
    data_access = AsyncMock()
    data_access.add_site.return_value = sites[0]
    data_access.update_site.side_effect = lambda site: site
    data_access.remove_site.return_value = None
    data_access.get_sites.return_value = sites
    data_access.get_site_by_base_url.return_value = sites[0]
    data_access.get_site_by_id.return_value = sites[0]
    return data_access


@pytest.fixture()
def repository(sites: list[Site]) -> InMemorySiteRepository:
    return InMemorySiteRepository(sites)


@pytest.fixture()
def dispatcher() -> LocalQueueDispatcher:
    return LocalQueueDispatcher()


@pytest.fixture()
def client(
    repository: InMemorySiteRepository,
    dispatcher: LocalQueueDispatcher,
    settings: Settings,
):
    app = create_app(repository, dispatcher, settings)
    with TestClient(app) as test_client:
        yield test_client
