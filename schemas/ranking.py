from pydantic import BaseModel
from typing import Any, Dict, List


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


class RankingPage(BaseModel):
    """
    One page of ranked standings.

    scope describes what was ranked (tournament, category, type, ...);
    every ranked item carries at least "rank" plus the scope's score field.
    """
    scope: Dict[str, Any]
    ranked_items: List[Dict[str, Any]]
    pagination: Pagination
