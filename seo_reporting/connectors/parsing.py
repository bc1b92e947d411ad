"""
Payload parsing at the upstream API boundary

Every response is validated once here and turned into immutable records;
the aggregation services never see raw JSON. Invalid payloads raise
DataSourceError like any other upstream failure.
"""
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from seo_reporting.connectors.base_connector import DataSourceError
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

M = TypeVar("M", bound=BaseModel)

SOURCE = "dashboard-api"


def _require_dict(payload: Any, what: str) -> Dict:
    if not isinstance(payload, dict):
        raise DataSourceError(SOURCE, f"Expected a JSON object for {what}, got {type(payload).__name__}")
    return payload


def _require_list(value: Any, what: str) -> List:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DataSourceError(SOURCE, f"Expected a list of {what}, got {type(value).__name__}")
    return value


def _validate(model: Type[M], raw: Any, what: str) -> M:
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise DataSourceError(SOURCE, f"Invalid {what}: {e.error_count()} validation error(s): {e}") from e


def _normalize_metric_row(raw: Any) -> Any:
    """Accept GSC style {"keys": [...]} and snapshot style {"key": ...} rows."""
    if not isinstance(raw, dict) or "dimensionKey" in raw or "dimension_key" in raw:
        return raw
    row = dict(raw)
    if "key" in row:
        row["dimensionKey"] = row.pop("key")
    elif row.get("keys"):
        row["dimensionKey"] = row.pop("keys")[0]
    return row


def _flatten_user_links(users: Any) -> Any:
    """Assignee lists arrive either as users or as {"user": {...}} join rows."""
    if not isinstance(users, list):
        return users
    return [u["user"] if isinstance(u, dict) and "user" in u else u for u in users]


def _flatten_maturity_link(link: Any) -> Any:
    if not isinstance(link, dict) or "maturityItem" not in link:
        return link
    item = link.get("maturityItem") or {}
    return {
        "maturityItemId": link.get("maturityItemId", item.get("id")),
        "title": item.get("title"),
        "category": item.get("category"),
    }


def parse_metric_rows(payload: Any, key: str = "rows") -> List[MetricRow]:
    rows = _require_list(_require_dict(payload, "search analytics").get(key), "metric rows")
    return [_validate(MetricRow, _normalize_metric_row(row), "metric row") for row in rows]


def parse_snapshot(payload: Any) -> Snapshot:
    raw = _require_dict(_require_dict(payload, "snapshot response").get("snapshot"), "snapshot")
    snapshot = dict(raw)
    snapshot["data"] = [
        _normalize_metric_row(row) for row in _require_list(raw.get("data"), "snapshot rows")
    ]
    return _validate(Snapshot, snapshot, "snapshot")


def parse_rank_tracker(payload: Any) -> List[TrackedKeyword]:
    """Keywords of the rank tracker; a missing tracker yields no keywords."""
    tracker = _require_dict(payload, "rank tracker response").get("tracker")
    if tracker is None:
        return []
    keywords = _require_list(_require_dict(tracker, "tracker").get("keywords"), "keywords")
    return [_validate(TrackedKeyword, kw, "tracked keyword") for kw in keywords]


def _parse_list(payload: Any, key: str, model: Type[M], prepare=None) -> List[M]:
    items = _require_list(_require_dict(payload, f"{key} response").get(key), key)
    if prepare is not None:
        items = [prepare(item) for item in items]
    return [_validate(model, item, key) for item in items]


def _prepare_task(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    return {**raw, "assignees": _flatten_user_links(raw.get("assignees", []))}


def _prepare_kvp_url(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    return {
        **raw,
        "assignees": _flatten_user_links(raw.get("assignees", [])),
        "maturityLinks": [_flatten_maturity_link(l) for l in raw.get("maturityLinks") or []],
    }


def parse_tasks(payload: Any) -> List[Task]:
    return _parse_list(payload, "tasks", Task, _prepare_task)


def parse_tickets(payload: Any) -> List[Ticket]:
    return _parse_list(payload, "tickets", Ticket)


def parse_kvp_urls(payload: Any) -> List[KvpUrl]:
    return _parse_list(payload, "kvpUrls", KvpUrl, _prepare_kvp_url)


def parse_backlinks(payload: Any) -> List[Backlink]:
    return _parse_list(payload, "backlinks", Backlink)


def parse_briefings(payload: Any) -> List[Briefing]:
    return _parse_list(payload, "briefings", Briefing)
