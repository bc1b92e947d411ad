"""
Workflow records: tasks, tickets, KVP URLs and content briefings
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from seo_reporting.models.base import Record


class UserRef(Record):
    id: str
    name: Optional[str] = None
    email: str = ""


class Task(Record):
    id: str
    title: str = ""
    description: Optional[str] = None
    status: str = "todo"
    # Statuses: backlog, todo, in_progress, review, done
    priority: str = "medium"
    # Priorities: low, medium, high, urgent
    category: Optional[str] = None
    labels: List[str] = []
    due_date: Optional[datetime] = None
    assignees: List[UserRef] = []
    created_at: datetime
    updated_at: datetime


class Ticket(Record):
    id: str
    title: str = ""
    ticket_type: str = Field("bug", alias="type")
    # Types: bug, feature
    status: str = "open"
    # Statuses: open, in_progress, closed
    priority: str = "medium"
    created_at: Optional[datetime] = None


class Subkeyword(Record):
    id: str
    keyword: str


class MaturityLink(Record):
    """Link between a KVP URL and an SEO maturity model item"""
    maturity_item_id: str
    title: str
    category: Optional[str] = None


class KvpUrl(Record):
    """Continuous-improvement (KVP) URL with its focus keyword"""
    id: str
    url: str
    focus_keyword: str = ""
    category: Optional[str] = None
    created_at: datetime
    subkeywords: List[Subkeyword] = []
    maturity_links: List[MaturityLink] = []
    assignees: List[UserRef] = []


class Briefing(Record):
    id: str
    title: str = ""
    status: str = "ordered"
    # Statuses: ordered, in_progress, completed
    briefing_type: str = "new_content"
    # Types: new_content, edit_content, lexicon
    category: Optional[str] = None
    deadline: Optional[datetime] = None
    requester: UserRef
    created_at: datetime
    updated_at: datetime
