"""
Shared dependencies and error mapping for the report endpoints
"""
from typing import Awaitable, Dict, List, Optional

from fastapi import Header, HTTPException

from seo_reporting.config import get_settings
from seo_reporting.connectors.base_connector import DataSourceError
from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.services.path_grouper import parse_brand_terms
from seo_reporting.utils.logger import log

settings = get_settings()


def get_connector(x_tenant_id: Optional[str] = Header(None)) -> DashboardDataConnector:
    """Upstream data connector for the requesting tenant"""
    return DashboardDataConnector(tenant=x_tenant_id)


def validate_category(category: Optional[str]) -> Optional[str]:
    if not category:
        return None
    if category not in settings.keyword_categories:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown category '{category}'. Valid categories: {', '.join(settings.keyword_categories)}",
        )
    return category


def resolve_brand_terms(raw: Optional[str]) -> List[str]:
    """Brand terms from the request, falling back to the configured list"""
    return parse_brand_terms(raw if raw is not None else settings.brand_terms)


async def run_report(description: str, report: Awaitable[Dict]) -> Dict:
    """
    Await a report and map failures to HTTP errors.

    Upstream failures become 502, invalid report options 400, anything
    else 500.
    """
    try:
        return await report
    except DataSourceError as e:
        log.error(f"Upstream error generating {description}: {str(e)}")
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        log.warning(f"Invalid options for {description}: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.error(f"Error generating {description}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
