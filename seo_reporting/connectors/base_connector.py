"""
Base connector class for upstream data sources
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from datetime import datetime
import time

from seo_reporting.utils.logger import log


class DataSourceError(Exception):
    """Upstream fetch failed: network error, timeout, HTTP error or invalid payload."""

    def __init__(self, source: str, message: str, status: Optional[int] = None):
        self.source = source
        self.status = status
        super().__init__(f"{source}: {message}")


class BaseConnector(ABC):
    """Base class for all data source connectors"""

    def __init__(self, name: str):
        self.name = name
        self.last_fetch = None
        self.fetch_count = 0
        self.error_count = 0

    @abstractmethod
    async def request_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a JSON document from the source"""
        pass

    async def fetch(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Fetch a JSON document with bookkeeping and logging.

        Failures are counted, logged and re-raised as DataSourceError; there
        is no retry, the user triggers a refresh instead.
        """
        start_time = time.time()
        try:
            data = await self.request_json(path, params)
        except DataSourceError:
            self.error_count += 1
            log.error(f"Fetch failed for {self.name} {path}")
            raise
        except Exception as e:
            self.error_count += 1
            log.error(f"Fetch failed for {self.name} {path}: {str(e)}")
            raise DataSourceError(self.name, str(e)) from e

        self.last_fetch = datetime.utcnow()
        self.fetch_count += 1
        log.debug(f"Fetched {self.name} {path} in {time.time() - start_time:.2f}s")
        return data

    def get_status(self) -> Dict[str, Any]:
        """Get connector status"""
        return {
            "name": self.name,
            "last_fetch": self.last_fetch,
            "fetch_count": self.fetch_count,
            "error_count": self.error_count,
            "error_rate": self.error_count / max(self.fetch_count + self.error_count, 1),
        }
