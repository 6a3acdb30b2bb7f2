"""Site resolution, audit config checks and audit trigger fan-out."""

from __future__ import annotations

from typing import Any

from .dispatch import MessageDispatcher
from .errors import NotFound, internal_errors
from .logging_setup import get_logger
from .models import AUDIT_TYPE_ALIASES, DispatchMessage, EventCode, Site
from .storage import SiteRepository

ALL_SITES = "all"

log = get_logger("audits")


def is_audit_for_all(target: str) -> bool:
    return target.upper() == ALL_SITES.upper()


def is_audit_type_enabled(site: Site, audit_type: str) -> bool:
    """Return False only when the site explicitly disables ``audit_type``."""

    type_config = site.get_audit_config().get_audit_type_config(audit_type)
    return not (type_config is not None and type_config.disabled)


def expand_audit_type(audit_type: str) -> list[str]:
    """Resolve an alias into its concrete audit types.

    Args:
        audit_type (str): Requested type, possibly an alias such as ``lhs``.

    Returns:
        list[str]: Concrete types in dispatch order. Non-alias types are
        returned verbatim as a single element.
    """
    return list(AUDIT_TYPE_ALIASES.get(audit_type, (audit_type,)))


async def resolve_sites(repository: SiteRepository, target: str) -> list[Site]:
    """Retrieve the sites a trigger request applies to.

    ``"all"`` (any case) selects every site; anything else is treated as a
    base URL. Sites with all audits disabled are dropped.

    Args:
        repository (SiteRepository): Data-access collaborator.
        target (str): ``"all"`` or a base URL.

    Returns:
        list[Site]: Candidate sites in repository order, possibly empty.
    """
    if is_audit_for_all(target):
        sites = await repository.get_sites()
    else:
        site = await repository.get_site_by_base_url(target)
        sites = [site] if site else []

    candidates = [
        site for site in sites if not site.get_audit_config().audits_disabled()
    ]
    log.info(
        EventCode.SITES_RESOLVED.value,
        target=target,
        found=len(sites),
        candidates=len(candidates),
    )
    return candidates


@internal_errors("trigger audits")
async def trigger_audits(
    repository: SiteRepository,
    dispatcher: MessageDispatcher,
    queue_url: str,
    audit_type: str,
    target: str,
    audit_context: dict[str, Any] | None = None,
) -> list[str]:
    """Send one audit message per concrete audit type.

    Args:
        repository (SiteRepository): Data-access collaborator.
        dispatcher (MessageDispatcher): Queueing collaborator.
        queue_url (str): Destination queue for the messages.
        audit_type (str): Requested audit type or alias.
        target (str): ``"all"`` or a base URL.
        audit_context (dict | None): Opaque context forwarded unmodified.

    Returns:
        list[str]: One summary per dispatch in audit type order, e.g.
        ``"Triggered cwv audit for 2 sites"``.

    Raises:
        NotFound: No enabled site matches ``target``.
        InternalError: A collaborator failed; remaining types are skipped.
    """
    sites = await resolve_sites(repository, target)
    if not sites:
        raise NotFound("Site not found")

    confirmations: list[str] = []
    # Sequential on purpose: messages for one alias must reach the queue in
    # alias order (desktop before mobile). Do not gather these sends.
    for concrete_type in expand_audit_type(audit_type):
        message = DispatchMessage(
            type=concrete_type,
            audit_context=audit_context,
            site_ids=[
                site.id
                for site in sites
                if is_audit_type_enabled(site, concrete_type)
            ],
        )
        message_id = await dispatcher.send(
            queue_url, message.model_dump(by_alias=True)
        )
        summary = message.summary()
        log.info(
            EventCode.AUDIT_DISPATCHED.value,
            type=concrete_type,
            sites=len(message.site_ids),
            message_id=message_id,
            summary=summary,
        )
        confirmations.append(summary)

    log.info(
        EventCode.AUDIT_TRIGGERED.value,
        requested_type=audit_type,
        dispatches=len(confirmations),
    )
    return confirmations
