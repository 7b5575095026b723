"""Upstream connectors."""

from .portal import PortalRESTConnector, PortalSettings, load_settings

__all__ = ["PortalRESTConnector", "PortalSettings", "load_settings"]
