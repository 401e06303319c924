from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from api.deps.db import get_db
from api.crud.user import search_users
from core.validators import validate_user_exists
from schemas.user import User, UserPointsBreakdown
from services.ranking_service import get_player_points_breakdown

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/search", response_model=List[User])
async def search_players(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Search players by name or member id"""
    return search_users(db, q, limit)


@router.get("/{user_id}", response_model=User)
async def get_player(
    user_id: int,
    db: Session = Depends(get_db)
):
    """Get player with category points"""
    return validate_user_exists(db, user_id)


@router.get("/{user_id}/breakdown", response_model=UserPointsBreakdown)
async def get_player_breakdown(
    user_id: int,
    db: Session = Depends(get_db)
):
    """Get player's points per category (with rank) and per tournament"""
    return get_player_points_breakdown(db, user_id)
