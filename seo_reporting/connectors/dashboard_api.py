"""
Dashboard data API connector

Reads Search Console rows, snapshots, rank tracker keywords, workflow objects
(tasks, tickets, KVP URLs, briefings) and stored backlinks from the upstream
dashboard REST API. Responses are validated into records before they leave
this module.
"""
import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from seo_reporting.config import get_settings
from seo_reporting.connectors.base_connector import BaseConnector, DataSourceError
from seo_reporting.connectors import parsing
from seo_reporting.models import (
    Backlink,
    Briefing,
    KvpUrl,
    MetricRow,
    Snapshot,
    Task,
    Ticket,
    TrackedKeyword,
)
from seo_reporting.services.date_ranges import DateRange
from seo_reporting.utils.logger import log

settings = get_settings()


class DashboardDataConnector(BaseConnector):
    """Connector for the dashboard's REST data endpoints"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        token: Optional[str] = None,
        tenant: Optional[str] = None,
    ):
        super().__init__("dashboard-api")
        self.base_url = (base_url or settings.data_api_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds
        self.tenant = tenant
        self.headers = {"Accept": "application/json"}
        token = token or settings.data_api_token
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        if tenant:
            self.headers["X-Tenant-Id"] = tenant

    async def request_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with aiohttp.ClientSession(headers=self.headers, timeout=timeout) as session:
                async with session.get(url, params=query) as response:
                    if response.status >= 400:
                        body = await response.text()
                        raise DataSourceError(
                            self.name,
                            f"GET {path} returned HTTP {response.status}: {body[:200]}",
                            status=response.status,
                        )
                    return await response.json(content_type=None)
        except DataSourceError:
            raise
        except asyncio.TimeoutError as e:
            raise DataSourceError(self.name, f"GET {path} timed out after {self.timeout_seconds}s") from e
        except (aiohttp.ClientError, ValueError) as e:
            raise DataSourceError(self.name, f"GET {path} failed: {str(e)}") from e

    async def fetch_search_analytics(
        self,
        site_url: str,
        date_range: DateRange,
        dimension: str,
        row_limit: int = 1000,
        url_filter: Optional[str] = None,
    ) -> List[MetricRow]:
        """Search Console rows for one dimension (date, query, page, device, country)"""
        payload = await self.fetch("gsc/search-analytics", {
            "siteUrl": site_url,
            "startDate": date_range.start.isoformat(),
            "endDate": date_range.end.isoformat(),
            "dimension": dimension,
            "rowLimit": row_limit,
            "urlFilter": url_filter or None,
        })
        rows = parsing.parse_metric_rows(payload)
        log.info(f"Fetched {len(rows)} {dimension} rows for {site_url} ({date_range.start} - {date_range.end})")
        return rows

    async def fetch_snapshot(self, snapshot_id: str) -> Snapshot:
        return parsing.parse_snapshot(await self.fetch(f"snapshots/{snapshot_id}"))

    async def fetch_rank_tracker(self) -> List[TrackedKeyword]:
        return parsing.parse_rank_tracker(await self.fetch("rank-tracker"))

    async def fetch_tasks(self) -> List[Task]:
        return parsing.parse_tasks(await self.fetch("tasks"))

    async def fetch_tickets(self) -> List[Ticket]:
        return parsing.parse_tickets(await self.fetch("tickets"))

    async def fetch_kvp_urls(self) -> List[KvpUrl]:
        return parsing.parse_kvp_urls(await self.fetch("kvp"))

    async def fetch_briefings(self) -> List[Briefing]:
        return parsing.parse_briefings(await self.fetch("briefings"))

    async def fetch_backlinks(self) -> List[Backlink]:
        return parsing.parse_backlinks(await self.fetch("backlinks", {"type": "backlinks", "limit": 1000}))
