"""Site audit API: site records and audit trigger dispatch."""

from .src.audits import resolve_sites, trigger_audits
from .src.models import AuditConfig, DispatchMessage, Site
from .src.sites import SitesController
