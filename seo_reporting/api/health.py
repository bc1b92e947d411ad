"""
Health check and status endpoints
"""
from fastapi import APIRouter, Depends
from datetime import datetime
from seo_reporting.api.deps import get_connector
from seo_reporting.config import get_settings
from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting import __version__

settings = get_settings()

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": __version__
    }


@router.get("/status")
async def get_status(connector: DashboardDataConnector = Depends(get_connector)):
    """Get service status and reporting configuration"""
    return {
        "app_name": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "data_source": {
            "name": connector.name,
            "base_url": connector.base_url,
            "timeout_seconds": connector.timeout_seconds,
        },
        "reporting": {
            "timezone": settings.report_timezone,
            "default_directory_depth": settings.default_directory_depth,
            "max_directory_depth": settings.max_directory_depth,
            "default_page_size": settings.default_page_size,
            "keyword_categories": settings.keyword_categories,
        },
        "timestamp": datetime.utcnow().isoformat()
    }
