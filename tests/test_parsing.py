"""
Tests for payload parsing at the upstream API boundary.

Guards against:
  - Invalid payloads leaking past the connector as raw dicts or KeyErrors
  - GSC "keys" rows and snapshot "key" rows parsing differently
  - Join-table shapes ({"user": ...}, {"maturityItem": ...}) reaching the services
"""
import asyncio

import pytest

from seo_reporting.connectors.base_connector import DataSourceError
from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.connectors.parsing import (
    parse_backlinks,
    parse_kvp_urls,
    parse_metric_rows,
    parse_rank_tracker,
    parse_snapshot,
    parse_tasks,
    parse_tickets,
)


def test_metric_rows_accept_keys_and_key():
    rows = parse_metric_rows({"rows": [
        {"keys": ["https://a.ch/de"], "clicks": 3, "impressions": 30, "ctr": 0.1, "position": 4.2},
        {"key": "hypothek", "clicks": 1, "impressions": 10, "ctr": 0.1, "position": 7},
    ]})
    assert [r.dimension_key for r in rows] == ["https://a.ch/de", "hypothek"]
    assert rows[0].position == pytest.approx(4.2)


def test_metric_row_position_bounds():
    rows = parse_metric_rows({"rows": [{"key": "https://a.ch/de/neu", "clicks": 0, "impressions": 0, "ctr": 0}]})
    assert rows[0].position == 0.0

    with pytest.raises(DataSourceError):
        parse_metric_rows({"rows": [{"key": "hypothek", "clicks": 1, "impressions": 10, "position": -1}]})


def test_metric_rows_missing_list_is_empty():
    assert parse_metric_rows({}) == []
    assert parse_metric_rows({"rows": None}) == []


@pytest.mark.parametrize("payload", [
    [],
    "rows",
    {"rows": {"not": "a list"}},
    {"rows": [{"key": "x", "clicks": -1}]},
    {"rows": [{"clicks": 1}]},
])
def test_invalid_metric_payloads_raise_data_source_error(payload):
    with pytest.raises(DataSourceError):
        parse_metric_rows(payload)


def test_snapshot():
    snapshot = parse_snapshot({"snapshot": {
        "id": "s1",
        "name": "Mai 2024",
        "startDate": "2024-05-01",
        "endDate": "2024-05-31",
        "data": [
            {"dimension": "page", "key": "https://a.ch/de/a", "clicks": 4, "impressions": 40, "ctr": 0.1, "position": 3},
            {"dimension": "query_page", "key": "hypothek", "pageUrl": "https://a.ch/de/a",
             "clicks": 2, "impressions": 20, "ctr": 0.1, "position": 3},
        ],
    }})
    assert snapshot.id == "s1"
    assert len(snapshot.rows_for("page")) == 1
    assert snapshot.rows_for("query_page")[0].page_url == "https://a.ch/de/a"


def test_snapshot_missing_raises():
    with pytest.raises(DataSourceError):
        parse_snapshot({"snapshot": None})


def test_rank_tracker():
    keywords = parse_rank_tracker({"tracker": {"keywords": [{
        "id": "k1",
        "keyword": "hypothek",
        "category": "Mortgages",
        "targetUrl": "https://a.ch/de/hypotheken",
        "rankings": [
            {"date": "2024-05-01T00:00:00Z", "position": 8, "url": "https://a.ch/de/hypotheken"},
            {"date": "2024-05-02T00:00:00Z", "position": None},
        ],
    }]}})
    assert keywords[0].target_url == "https://a.ch/de/hypotheken"
    assert keywords[0].rankings_newest_first()[0].position is None


def test_rank_tracker_without_tracker():
    assert parse_rank_tracker({"tracker": None}) == []


def test_tasks_flatten_assignee_links():
    tasks = parse_tasks({"tasks": [{
        "id": "t1",
        "title": "Meta descriptions",
        "status": "in_progress",
        "priority": "high",
        "dueDate": "2024-05-20T00:00:00Z",
        "assignees": [{"user": {"id": "u1", "name": "Alice", "email": "alice@example.ch"}}],
        "createdAt": "2024-05-01T09:00:00Z",
        "updatedAt": "2024-05-02T09:00:00Z",
    }]})
    assert tasks[0].assignees[0].email == "alice@example.ch"
    assert tasks[0].due_date.day == 20


def test_tickets_type_alias():
    tickets = parse_tickets({"tickets": [{"id": "1", "type": "feature", "status": "open"}]})
    assert tickets[0].ticket_type == "feature"


def test_kvp_urls_flatten_maturity_links():
    kvps = parse_kvp_urls({"kvpUrls": [{
        "id": "kvp1",
        "url": "https://a.ch/de/konto",
        "focusKeyword": "konto eröffnen",
        "createdAt": "2024-05-03T10:00:00Z",
        "subkeywords": [{"id": "s1", "keyword": "privatkonto"}],
        "maturityLinks": [{"maturityItemId": "m1", "maturityItem": {"id": "m1", "title": "Title tags", "category": "Onpage"}}],
    }]})
    link = kvps[0].maturity_links[0]
    assert (link.maturity_item_id, link.title, link.category) == ("m1", "Title tags", "Onpage")
    assert kvps[0].subkeywords[0].keyword == "privatkonto"


def test_backlinks_snake_case():
    backlinks = parse_backlinks({"backlinks": [{
        "domain_from": "blog.ch",
        "url_from": "https://blog.ch/post",
        "url_to": "https://a.ch/",
        "dofollow": False,
        "is_new": True,
        "domain_from_rank": 310,
    }]})
    assert backlinks[0].dofollow is False
    assert backlinks[0].domain_from_rank == 310


# ---------------------------------------------------------------------------
# Connector
# ---------------------------------------------------------------------------


class _FailingConnector(DashboardDataConnector):

    def __init__(self, error):
        super().__init__(base_url="http://upstream.test/api")
        self.error = error

    async def request_json(self, path, params=None):
        raise self.error


def test_connector_wraps_unexpected_errors():
    connector = _FailingConnector(KeyError("boom"))
    with pytest.raises(DataSourceError):
        asyncio.run(connector.fetch_tasks())
    assert connector.get_status()["error_count"] == 1


def test_connector_passes_data_source_errors_through():
    connector = _FailingConnector(DataSourceError("dashboard-api", "HTTP 503", status=503))
    with pytest.raises(DataSourceError) as exc_info:
        asyncio.run(connector.fetch_tickets())
    assert exc_info.value.status == 503


def test_connector_headers():
    connector = DashboardDataConnector(base_url="http://upstream.test/api/", token="secret", tenant="bank-a")
    assert connector.base_url == "http://upstream.test/api"
    assert connector.headers["Authorization"] == "Bearer secret"
    assert connector.headers["X-Tenant-Id"] == "bank-a"
