"""Upstream data connectors"""

from seo_reporting.connectors.base_connector import BaseConnector, DataSourceError
from seo_reporting.connectors.dashboard_api import DashboardDataConnector

__all__ = [
    "BaseConnector",
    "DataSourceError",
    "DashboardDataConnector",
]
