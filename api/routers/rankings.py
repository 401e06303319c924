from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from api.deps.db import get_db
from schemas.ranking import RankingPage
from services import ranking_service

router = APIRouter(prefix="/rankings", tags=["Rankings"])


@router.get("/overall", response_model=RankingPage)
async def overall_rankings(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Rank all active players by total points"""
    return ranking_service.get_overall_rankings(db, page, limit)


@router.get("/universal", response_model=RankingPage)
async def universal_rankings(
    tournament_id: Optional[int] = None,
    category_id: Optional[int] = None,
    type: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Rank by tournament, category or both"""
    return ranking_service.get_universal_rankings(db, tournament_id, category_id, page, limit, type)


@router.get("/category/{category_id}", response_model=RankingPage)
async def category_rankings(
    category_id: int,
    type: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Rank players by their points in one category"""
    return ranking_service.get_category_rankings(db, category_id, page, limit, type)


@router.get("/tournament/{tournament_id}", response_model=RankingPage)
async def tournament_rankings(
    tournament_id: int,
    type: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Rank players by the points they earned in one tournament"""
    return ranking_service.get_tournament_rankings(db, tournament_id, page, limit, type)


@router.get("/tournament/{tournament_id}/category/{category_id}", response_model=RankingPage)
async def tournament_category_rankings(
    tournament_id: int,
    category_id: int,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Rank the entries of one category within one tournament"""
    return ranking_service.get_tournament_category_rankings(db, tournament_id, category_id, page, limit)


@router.get("/type/{category_type}", response_model=RankingPage)
async def type_rankings(
    category_type: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Rank players by points summed over all singles or all doubles categories"""
    return ranking_service.get_type_rankings(db, category_type, page, limit)
