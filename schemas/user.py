from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class CategoryPoints(BaseModel):
    category_id: int
    category_name: Optional[str] = None
    category_type: Optional[str] = None
    points: int
    tournaments_count: int
    last_updated: Optional[datetime] = None

    class Config:
        from_attributes = True


class User(BaseModel):
    id: int
    external_id: Optional[str] = None
    name: str
    total_points: int = 0
    is_active: bool = True
    category_points: List[CategoryPoints] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryBreakdown(BaseModel):
    category_id: int
    category_name: Optional[str] = None
    category_type: Optional[str] = None
    points: int
    tournaments_count: int
    rank: int
    last_updated: Optional[datetime] = None


class TournamentHistoryItem(BaseModel):
    category_id: int
    category_name: Optional[str] = None
    points_earned: int
    position: Optional[int] = None
    date: Optional[datetime] = None


class TournamentBreakdown(BaseModel):
    tournament_id: int
    tournament_name: Optional[str] = None
    categories: List[TournamentHistoryItem] = []
    total_points: int = 0


class UserPointsBreakdown(BaseModel):
    user: User
    category_breakdown: List[CategoryBreakdown] = []
    tournament_breakdown: List[TournamentBreakdown] = []
