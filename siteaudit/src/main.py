"""FastAPI service exposing site CRUD and audit triggering."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, Request, Response
from fastapi.responses import RedirectResponse

from .audits import trigger_audits
from .config import Settings, get_settings
from .dispatch import LocalQueueDispatcher, MessageDispatcher
from .errors import ApiError, api_error_handler
from .logging_setup import bind_request_id, configure_logging, get_logger
from .models import EventCode
from .schemas import (
    AuditTriggerRequest,
    ErrorResponse,
    SiteCreate,
    SiteDto,
    TriggerResponse,
)
from .sites import SiteExporter, SitesController
from .storage import InMemorySiteRepository, SiteRepository

XLSX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
)

api_logger = get_logger("api")

_errors: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def create_app(
    data_access: SiteRepository | None = None,
    dispatcher: MessageDispatcher | None = None,
    settings: Settings | None = None,
    exporter: SiteExporter | None = None,
) -> FastAPI:
    """Build the API around the given collaborators.

    Missing collaborators fall back to the in-memory repository and the local
    queue dispatcher, which is enough for development and tests.
    """

    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)
    if data_access is None:
        data_access = InMemorySiteRepository()
    if dispatcher is None:
        dispatcher = LocalQueueDispatcher()
    sites = SitesController(data_access, exporter)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        api_logger.info(
            EventCode.APP_START.value, queue_url=settings.audit_jobs_queue_url
        )
        if isinstance(dispatcher, LocalQueueDispatcher):
            await dispatcher.start()
        try:
            yield
        finally:
            api_logger.info(EventCode.APP_STOP.value)
            if isinstance(dispatcher, LocalQueueDispatcher):
                await dispatcher.stop()

    app = FastAPI(
        title="Site Audit API",
        version="1.0.0",
        description="Site records and audit trigger dispatch.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.data_access = data_access
    app.state.dispatcher = dispatcher
    app.state.sites = sites
    app.add_exception_handler(ApiError, api_error_handler)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        bind_request_id(request.headers.get("x-request-id") or uuid.uuid4().hex)
        api_logger.info(
            "request_started", method=request.method, path=request.url.path
        )
        response = await call_next(request)
        api_logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
        )
        return response

    @app.get("/", include_in_schema=False)
    async def docs_redirect():
        return RedirectResponse(url="/docs")

    @app.post(
        "/trigger",
        response_model=TriggerResponse,
        responses=_errors,
        tags=["Audits"],
    )
    async def trigger(payload: AuditTriggerRequest) -> TriggerResponse:
        """Queue audits of ``type`` for one site or for all sites."""
        audit_context = (
            payload.audit_context.model_dump(by_alias=True, exclude_unset=True)
            if payload.audit_context is not None
            else None
        )
        message = await trigger_audits(
            data_access,
            dispatcher,
            settings.audit_jobs_queue_url,
            payload.type,
            payload.url,
            audit_context,
        )
        return TriggerResponse(message=message)

    @app.post(
        "/sites",
        response_model=SiteDto,
        status_code=201,
        responses=_errors,
        tags=["Sites"],
    )
    async def create_site(payload: SiteCreate) -> SiteDto:
        return await sites.create_site(payload)

    @app.get("/sites", response_model=list[SiteDto], tags=["Sites"])
    async def get_all() -> list[SiteDto]:
        return await sites.get_all()

    @app.get("/sites.csv", tags=["Sites"])
    async def get_all_as_csv() -> Response:
        content = await sites.get_all_as_csv()
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="sites.csv"'},
        )

    @app.get("/sites.xlsx", tags=["Sites"])
    async def get_all_as_xlsx() -> Response:
        content = await sites.get_all_as_xlsx()
        return Response(
            content=content,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": 'attachment; filename="sites.xlsx"'},
        )

    @app.get(
        "/sites/by-base-url/{base_url:path}",
        response_model=SiteDto,
        responses=_errors,
        tags=["Sites"],
    )
    async def get_by_base_url(base_url: str) -> SiteDto:
        """Look up a site by its base64 encoded base URL."""
        return await sites.get_by_base_url(base_url)

    @app.get(
        "/sites/{site_id}",
        response_model=SiteDto,
        responses=_errors,
        tags=["Sites"],
    )
    async def get_by_id(site_id: str) -> SiteDto:
        return await sites.get_by_id(site_id)

    @app.patch(
        "/sites/{site_id}",
        response_model=SiteDto,
        responses=_errors,
        tags=["Sites"],
    )
    async def update_site(
        site_id: str, payload: dict[str, Any] | None = Body(default=None)
    ) -> SiteDto:
        return await sites.update_site(site_id, payload)

    @app.delete(
        "/sites/{site_id}",
        status_code=204,
        response_class=Response,
        responses=_errors,
        tags=["Sites"],
    )
    async def remove_site(site_id: str) -> Response:
        await sites.remove_site(site_id)
        return Response(status_code=204)

    return app


def run() -> None:
    """Console entry point: serve the default app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "siteaudit.src.main:create_app", factory=True, host="0.0.0.0", port=8000
    )


if __name__ == "__main__":
    run()
