"""
API tests for the report endpoints.

The upstream data API is replaced by a connector serving canned payloads,
so requests go through parsing, the report builders and error mapping.

Guards against:
  - Upstream failures surfacing as 500 instead of 502
  - Out-of-range depth or unknown categories/presets reaching the services
  - "/snapshots/compare/directories" being routed as a snapshot id
"""
import pytest
from fastapi.testclient import TestClient

from seo_reporting.api.deps import get_connector
from seo_reporting.connectors.base_connector import DataSourceError
from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.main import app


class FakeConnector(DashboardDataConnector):
    """Serves payloads by path; unknown paths fail like an unreachable upstream"""

    def __init__(self, payloads):
        super().__init__(base_url="http://upstream.test/api")
        self.payloads = payloads
        self.requests = []

    async def request_json(self, path, params=None):
        self.requests.append((path, params))
        payload = self.payloads.get(path)
        if payload is None:
            raise DataSourceError(self.name, f"GET {path} returned HTTP 503", status=503)
        if callable(payload):
            return payload(params)
        return payload


def _snapshot(snapshot_id, pages, query_pages=()):
    return {"snapshot": {
        "id": snapshot_id,
        "name": snapshot_id,
        "data": [
            {"dimension": "page", "key": url, "clicks": clicks, "impressions": impressions, "ctr": 0, "position": position}
            for url, clicks, impressions, position in pages
        ] + [
            {"dimension": "query_page", "key": kw, "pageUrl": url, "clicks": 1, "impressions": 10, "ctr": 0.1, "position": 3}
            for kw, url in query_pages
        ],
    }}


def _search_analytics(params):
    rows = {
        "date": [{"keys": ["2024-05-01"], "clicks": 10, "impressions": 100, "ctr": 0.1, "position": 5}],
        "query": [{"keys": ["hypothek"], "clicks": 8, "impressions": 60, "ctr": 0.13, "position": 4}],
        "page": [{"keys": ["https://a.ch/de/hypotheken"], "clicks": 10, "impressions": 100, "ctr": 0.1, "position": 5}],
        "device": [{"keys": ["MOBILE"], "clicks": 10, "impressions": 100, "ctr": 0.1, "position": 5}],
    }
    return {"rows": rows[params["dimension"]]}


PAYLOADS = {
    "snapshots/s1": _snapshot("s1", [
        ("https://www.example.ch/de/a", 10, 100, 5.0),
        ("https://www.example.ch/de/b", 5, 50, 8.0),
    ], [("hypothek", "https://www.example.ch/de/a")]),
    "snapshots/s2": _snapshot("s2", [
        ("https://www.example.ch/de/neu", 7, 70, 4.0),
    ], [("hypothek", "https://www.example.ch/de/neu")]),
    "gsc/search-analytics": _search_analytics,
    "rank-tracker": {"tracker": {"keywords": [
        {"id": "k1", "keyword": "hypothek", "category": "Mortgages", "rankings": [
            {"date": "2024-05-02T00:00:00Z", "position": 3},
            {"date": "2024-05-01T00:00:00Z", "position": 6},
        ]},
        {"id": "k2", "keyword": "säule 3a", "category": "Pension", "rankings": []},
    ]}},
    "tasks": {"tasks": [
        {"id": "t1", "status": "todo", "createdAt": "2024-05-01T00:00:00Z", "updatedAt": "2024-05-01T00:00:00Z"},
    ]},
    "tickets": {"tickets": [{"id": "1", "type": "bug", "status": "open", "priority": "high"}]},
    "kvp": {"kvpUrls": []},
    "briefings": {"briefings": []},
    "backlinks": {"backlinks": [
        {"domain_from": "blog.ch", "url_from": "https://blog.ch/a", "url_to": "https://a.ch/", "domain_from_rank": 200},
        {"domain_from": "news.ch", "url_from": "https://news.ch/b", "url_to": "https://a.ch/", "dofollow": False},
    ]},
}


@pytest.fixture
def connector():
    return FakeConnector(dict(PAYLOADS))


@pytest.fixture
def client(connector):
    app.dependency_overrides[get_connector] = lambda: connector
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_status(client):
    body = client.get("/status").json()
    assert body["data_source"]["name"] == "dashboard-api"
    assert body["reporting"]["max_directory_depth"] == 5


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


def test_snapshot_directories(client):
    response = client.get("/snapshots/s1/directories", params={"depth": 1})
    assert response.status_code == 200

    body = response.json()
    de = body["directories"]["items"][0]
    assert de["path"] == "/de"
    assert de["clicks"] == 15
    assert de["impressions"] == 150
    assert de["ctr"] == pytest.approx(0.1)
    assert de["position"] == pytest.approx(6.5)
    assert de["page_count"] == 2
    assert de["top_keywords"][0]["keyword"] == "hypothek"


@pytest.mark.parametrize("depth", [0, 6])
def test_snapshot_directories_depth_validated(client, depth):
    assert client.get("/snapshots/s1/directories", params={"depth": depth}).status_code == 422


def test_snapshot_directories_page_beyond_range(client):
    body = client.get("/snapshots/s1/directories", params={"page": 9}).json()
    assert body["directories"]["items"] == []
    assert body["directories"]["total_pages"] == 1


def test_missing_snapshot_is_bad_gateway(client):
    response = client.get("/snapshots/unknown/directories")
    assert response.status_code == 502
    assert "503" in response.json()["detail"]


def test_snapshot_comparison_route(client):
    response = client.get(
        "/snapshots/compare/directories",
        params={"base_id": "s1", "compare_id": "s2", "depth": 2},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["base_snapshot"]["id"] == "s1"
    assert body["comparisons"][0]["base_path"] == "/de/a"
    assert body["comparisons"][0]["compare_path"] == "/de/neu"


def test_snapshot_comparison_unknown_sort(client):
    response = client.get(
        "/snapshots/compare/directories",
        params={"base_id": "s1", "compare_id": "s2", "sort_by": "ctr"},
    )
    assert response.status_code == 400


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def test_traffic_report(client, connector):
    response = client.get("/reporting/traffic", params={"site_url": "https://a.ch/", "period": "7d"})
    assert response.status_code == 200

    body = response.json()
    assert body["current"]["clicks"] == 10
    assert body["changes"]["clicks"] == 0.0
    assert body["directories"][0]["path"] == "/de/hypotheken"

    dimensions = sorted(params["dimension"] for path, params in connector.requests)
    assert dimensions == ["date", "date", "device", "page", "query"]


def test_traffic_report_unknown_period(client):
    response = client.get("/reporting/traffic", params={"site_url": "https://a.ch/", "period": "2w"})
    assert response.status_code == 400


def test_ranking_report(client):
    body = client.get("/reporting/ranking", params={"category": "Mortgages"}).json()
    assert [k["id"] for k in body["keywords"]] == ["k1"]
    assert body["keywords"][0]["delta_last"] == 3


def test_ranking_report_unknown_category(client):
    assert client.get("/reporting/ranking", params={"category": "Crypto"}).status_code == 400


def test_task_and_ticket_reports(client):
    assert client.get("/reporting/tasks").json()["stats"]["total"] == 1
    assert client.get("/reporting/tickets").json()["open"] == 1


def test_kvp_report(client):
    response = client.get("/reporting/kvp", params={"preset": "last_quarter"})
    assert response.status_code == 200
    assert response.json()["stats"]["total_kvps"] == 0


def test_kvp_report_unknown_preset(client):
    assert client.get("/reporting/kvp", params={"preset": "last_week"}).status_code == 400


def test_kvp_report_inverted_custom_range(client):
    response = client.get(
        "/reporting/kvp",
        params={"preset": "custom", "date_from": "2024-05-20", "date_to": "2024-05-01"},
    )
    assert response.status_code == 400


def test_briefing_report(client):
    assert client.get("/reporting/briefings").json()["status_overview"]["total"] == 0


def test_upstream_failure_is_bad_gateway(client, connector):
    del connector.payloads["tasks"]
    assert client.get("/reporting/tasks").status_code == 502


def test_invalid_upstream_payload_is_bad_gateway(client, connector):
    connector.payloads["tickets"] = {"tickets": [{"id": "1", "type": "bug", "createdAt": "yesterday"}]}
    assert client.get("/reporting/tickets").status_code == 502


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def test_rank_tracker_keywords(client):
    body = client.get("/rank-tracker/keywords", params={"sort_key": "current_position", "direction": "desc"}).json()
    assert [k["id"] for k in body["items"]] == ["k1", "k2"]
    assert body["total_items"] == 2


def test_rank_tracker_bad_direction(client):
    assert client.get("/rank-tracker/keywords", params={"direction": "up"}).status_code == 400


def test_backlinks(client):
    body = client.get("/backlinks", params={"dofollow": "true"}).json()
    assert [b["domain_from"] for b in body["items"]] == ["blog.ch"]
    assert body["summary"]["nofollow"] == 1
