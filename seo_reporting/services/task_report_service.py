"""
Task and Ticket Report Service

Task report: due-date status per task, status, priority and category
distributions, per-user workload and completion figures.
Ticket report: status per priority, type distribution and open count.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.models.workflow import Task, Ticket
from seo_reporting.services.category_rollup import (
    UPCOMING_WINDOW_DAYS,
    days_until_due,
    fixed_distribution,
    is_open,
    is_overdue,
    is_upcoming,
    rollup,
    sorted_stats,
    workload_rollup,
)
from seo_reporting.utils.helpers import as_utc, round_1
from seo_reporting.utils.logger import log

STATUS_ORDER = ["backlog", "todo", "in_progress", "review", "done"]
STATUS_LABELS = {
    "backlog": "Backlog",
    "todo": "To Do",
    "in_progress": "In Arbeit",
    "review": "Review",
    "done": "Erledigt",
}

PRIORITY_ORDER = ["urgent", "high", "medium", "low"]
PRIORITY_LABELS = {
    "low": "Niedrig",
    "medium": "Mittel",
    "high": "Hoch",
    "urgent": "Dringend",
}

TICKET_STATUS_ORDER = ["open", "in_progress", "closed"]
TICKET_STATUS_LABELS = {
    "open": "Offen",
    "in_progress": "In Bearbeitung",
    "closed": "Geschlossen",
}
TICKET_TYPE_ORDER = ["bug", "feature"]
TICKET_TYPE_LABELS = {
    "bug": "Bug",
    "feature": "Feature",
}

RECENTLY_COMPLETED_DAYS = 30


def task_row(task: Task, now: datetime, window_days: int = UPCOMING_WINDOW_DAYS) -> Dict:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "status": task.status,
        "status_label": STATUS_LABELS.get(task.status, task.status),
        "priority": task.priority,
        "priority_label": PRIORITY_LABELS.get(task.priority, task.priority),
        "category": task.category,
        "labels": list(task.labels),
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "is_overdue": is_overdue(task.due_date, task.status, now),
        "is_upcoming": is_upcoming(task.due_date, task.status, now, window_days),
        "days_until_due": days_until_due(task.due_date, now),
        "assignees": [a.model_dump() for a in task.assignees],
        "created_at": task.created_at.isoformat(),
        "updated_at": task.updated_at.isoformat(),
    }


def average_completion_days(tasks: Sequence[Task]) -> Optional[float]:
    """Mean days from creation to the last update of completed tasks."""
    durations = [
        (as_utc(t.updated_at) - as_utc(t.created_at)).total_seconds() / 86400
        for t in tasks
        if not is_open(t.status)
    ]
    if not durations:
        return None
    return round_1(sum(durations) / len(durations))


def _by_days_until_due(rows: List[Dict]) -> List[Dict]:
    return sorted(rows, key=lambda r: r["days_until_due"] if r["days_until_due"] is not None else 0)


def build_task_report(
    tasks: Sequence[Task],
    now: datetime,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> Dict:
    rows = [task_row(task, now, window_days) for task in tasks]
    open_tasks = [t for t in tasks if is_open(t.status)]

    overdue = _by_days_until_due([r for r in rows if r["is_overdue"]])
    upcoming = _by_days_until_due([r for r in rows if r["is_upcoming"]])
    unassigned = [r for r in rows if not r["assignees"] and is_open(r["status"])]

    completed_since = as_utc(now) - timedelta(days=RECENTLY_COMPLETED_DAYS)
    recently_completed = [
        r for r, t in zip(rows, tasks)
        if not is_open(t.status) and as_utc(t.updated_at) >= completed_since
    ]

    categories = sorted_stats(rollup(open_tasks, lambda t: t.category))

    return {
        "tasks": rows,
        "stats": {
            "total": len(rows),
            "active": len(open_tasks),
            "done": len(rows) - len(open_tasks),
            "overdue": len(overdue),
            "unassigned": len(unassigned),
            "upcoming": len(upcoming),
            "with_due_date": sum(1 for t in tasks if t.due_date is not None),
            "recently_completed": len(recently_completed),
            "avg_completion_days": average_completion_days(tasks),
        },
        "status_distribution": fixed_distribution(tasks, lambda t: t.status, STATUS_ORDER, STATUS_LABELS),
        "priority_distribution": fixed_distribution(
            open_tasks, lambda t: t.priority, PRIORITY_ORDER, PRIORITY_LABELS
        ),
        "category_distribution": [{"category": s.key, "count": s.count} for s in categories],
        "workload": [w.to_dict() for w in workload_rollup(tasks, now, window_days)],
        "overdue_tasks": overdue,
        "upcoming_tasks": upcoming,
        "unassigned_tasks": unassigned,
        "recently_completed": recently_completed,
    }


def build_ticket_report(tickets: Sequence[Ticket]) -> Dict:
    by_priority = rollup(tickets, lambda t: t.priority, lambda t: t.status)
    return {
        "total": len(tickets),
        "open": sum(1 for t in tickets if is_open(t.status)),
        "status_distribution": fixed_distribution(
            tickets, lambda t: t.status, TICKET_STATUS_ORDER, TICKET_STATUS_LABELS
        ),
        "type_distribution": fixed_distribution(
            tickets, lambda t: t.ticket_type, TICKET_TYPE_ORDER, TICKET_TYPE_LABELS
        ),
        "status_by_priority": [
            {"priority": s.key, "count": s.count, "by_status": s.sub_counts}
            for s in sorted_stats(by_priority)
        ],
    }


class TaskReportService:
    """Task and ticket reports from the workflow endpoints"""

    def __init__(self, connector: DashboardDataConnector):
        self.connector = connector

    async def get_task_report(self, now: datetime, window_days: int = UPCOMING_WINDOW_DAYS) -> Dict:
        tasks = await self.connector.fetch_tasks()
        log.info(f"Building task report for {len(tasks)} tasks")
        return build_task_report(tasks, now, window_days)

    async def get_ticket_report(self) -> Dict:
        tickets = await self.connector.fetch_tickets()
        log.info(f"Building ticket report for {len(tickets)} tickets")
        return build_ticket_report(tickets)
