"""Reporting portal connector.

Example:
    >>> from callcenter.reports.connectors.portal import PortalRESTConnector, load_settings
    >>> async with PortalRESTConnector(load_settings(), tokens) as portal:
    ...     result = await portal.aggregate(
    ...         FetchRequest(report="cdrs", tenant_id="acme", limit=1200)
    ...     )
"""

from .config import PATHS, PortalSettings, load_settings
from .endpoints import get_endpoint_adapter, get_endpoint_spec, get_record_profile, list_endpoints
from .provider import PortalRESTConnector

__all__ = [
    "PATHS",
    "PortalRESTConnector",
    "PortalSettings",
    "get_endpoint_adapter",
    "get_endpoint_spec",
    "get_record_profile",
    "list_endpoints",
    "load_settings",
]
