"""
Backlink records from the backlink-data provider

Upstream sends these with snake_case keys.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Backlink(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    domain_from: str
    url_from: str
    url_to: str
    tld_from: Optional[str] = None
    rank: Optional[int] = None
    page_from_rank: Optional[int] = None
    domain_from_rank: Optional[int] = None
    domain_from_country: Optional[str] = None
    page_from_title: Optional[str] = None
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    item_type: Optional[str] = None
    dofollow: bool = True
    anchor: Optional[str] = None
    is_new: bool = False
    is_lost: bool = False
    backlink_spam_score: Optional[int] = None
