"""
Tie-aware standings over the points ledger and the raw tournament results.

Every scope builds its full item list, ranks it with apply_ranking() and only
then paginates, so ranks are stable across pages.
"""
import math
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from core.exceptions import MissingRankingScope
from core.logging import setup_logger
from core.validators import (
    validate_category_exists, validate_category_type, validate_pagination,
    validate_tournament_exists, validate_user_exists
)
from models.category import Category, CategoryType
from models.points import UserCategoryPoints
from models.tournament import Tournament
from models.user import User
from services.points import points_for_position

logger = setup_logger(__name__)


def apply_ranking(items: List[dict], score_key: str, name_key: str = "name") -> List[dict]:
    """
    Sort items by score descending and assign competition ranks.

    Equal scores share a rank; the next distinct score is ranked at its
    1-based position, so [100, 100, 50] ranks as [1, 1, 3]. Ties are listed
    by name for a deterministic order.
    """
    ordered = sorted(
        items,
        key=lambda item: (-(item.get(score_key) or 0), str(item.get(name_key) or "").lower())
    )
    previous_score = None
    rank = 0
    for position, item in enumerate(ordered, start=1):
        score = item.get(score_key) or 0
        if score != previous_score:
            rank = position
            previous_score = score
        item["rank"] = rank
    return ordered


def paginate(ranked: List[dict], page: int, limit: int) -> Tuple[List[dict], dict]:
    total = len(ranked)
    start = (page - 1) * limit
    items = ranked[start:start + limit]
    pagination = {
        "current_page": page,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "total_count": total,
        "has_next": start + len(items) < total,
        "has_prev": page > 1,
    }
    return items, pagination


def _page(scope: dict, items: List[dict], score_key: str, page: int, limit: Optional[int]) -> dict:
    page, limit = validate_pagination(page, limit)
    ranked = apply_ranking(items, score_key)
    page_items, pagination = paginate(ranked, page, limit)
    logger.debug(f"Ranked {len(ranked)} items for scope {scope['type']}, page {page}")
    return {"scope": scope, "ranked_items": page_items, "pagination": pagination}


def _player(user: User) -> dict:
    return {
        "user_id": user.id,
        "name": user.name,
        "external_id": user.external_id,
    }


def _category_scope(category: Category) -> dict:
    return {"id": category.id, "name": category.name, "type": category.type.value}


def _tournament_scope(tournament: Tournament) -> dict:
    return {
        "id": tournament.id,
        "name": tournament.name,
        "location": tournament.location,
        "start_date": tournament.start_date,
        "end_date": tournament.end_date,
    }


# Overall
def get_overall_rankings(db: Session, page: int = 1, limit: Optional[int] = None) -> dict:
    users = db.query(User).filter(User.is_active.is_(True)).all()
    items = [
        dict(_player(user), total_points=user.total_points or 0)
        for user in users
    ]
    return _page({"type": "overall"}, items, "total_points", page, limit)


# Category
def get_category_rankings(db: Session, category_id: int, page: int = 1, limit: Optional[int] = None,
                          category_type: Optional[str] = None) -> dict:
    category = validate_category_exists(db, category_id)
    scope = {"type": "category", "category": _category_scope(category)}

    if category_type and validate_category_type(category_type) != category.type:
        return _page(scope, [], "category_points", page, limit)

    buckets = db.query(UserCategoryPoints).options(
        selectinload(UserCategoryPoints.user)
    ).join(User).filter(
        UserCategoryPoints.category_id == category_id,
        User.is_active.is_(True)
    ).all()

    items = [
        dict(
            _player(bucket.user),
            category_points=bucket.points or 0,
            tournaments_count=bucket.tournaments_count or 0,
            total_points=bucket.user.total_points or 0,
        )
        for bucket in buckets
    ]
    return _page(scope, items, "category_points", page, limit)


def _tournament_entries(tournament: Tournament, category_id: Optional[int] = None,
                        category_type: Optional[CategoryType] = None) -> List[dict]:
    """Flatten results into one entry per player; doubles rows yield two"""
    entries = []
    for result in tournament.results:
        if category_id is not None and result.category_id != category_id:
            continue
        if category_type is not None and result.category_type != category_type.value:
            continue

        is_doubles = result.category_type == CategoryType.DOUBLES.value
        sides = [(result.player1, result.external_id1, result.position, result.player2)]
        if is_doubles:
            sides.append((result.player2, result.external_id2, result.position2, result.player1))

        for user, external_id, position, partner in sides:
            if user is None:
                continue
            entry = {
                "user_id": user.id,
                "name": user.name,
                "external_id": external_id,
                "category_id": result.category_id,
                "category_name": result.category_name,
                "category_type": result.category_type,
                "position": position,
                "points": points_for_position(position),
            }
            if is_doubles:
                entry["partner"] = {"user_id": partner.id, "name": partner.name} if partner else None
            entries.append(entry)
    return entries


# Tournament
def get_tournament_rankings(db: Session, tournament_id: int, page: int = 1, limit: Optional[int] = None,
                            category_type: Optional[str] = None) -> dict:
    tournament = validate_tournament_exists(db, tournament_id)
    type_filter = validate_category_type(category_type) if category_type else None

    by_user: Dict[int, dict] = OrderedDict()
    for entry in _tournament_entries(tournament, category_type=type_filter):
        item = by_user.get(entry["user_id"])
        if item is None:
            item = {
                "user_id": entry["user_id"],
                "name": entry["name"],
                "external_id": entry["external_id"],
                "tournament_points": 0,
                "categories": [],
            }
            by_user[entry["user_id"]] = item
        item["tournament_points"] += entry["points"]
        item["categories"].append({
            "category_id": entry["category_id"],
            "category_name": entry["category_name"],
            "category_type": entry["category_type"],
            "position": entry["position"],
            "points": entry["points"],
        })

    scope = {"type": "tournament", "tournament": _tournament_scope(tournament)}
    if type_filter:
        scope["category_type"] = type_filter.value
    return _page(scope, list(by_user.values()), "tournament_points", page, limit)


# Tournament + category
def get_tournament_category_rankings(db: Session, tournament_id: int, category_id: int, page: int = 1,
                                     limit: Optional[int] = None) -> dict:
    tournament = validate_tournament_exists(db, tournament_id)
    category = validate_category_exists(db, category_id)

    entries = _tournament_entries(tournament, category_id=category.id)
    scope = {
        "type": "tournament_category",
        "tournament": _tournament_scope(tournament),
        "category": _category_scope(category),
    }
    return _page(scope, entries, "points", page, limit)


# Type
def get_type_rankings(db: Session, category_type: str, page: int = 1, limit: Optional[int] = None) -> dict:
    type_filter = validate_category_type(category_type)

    rows = db.query(UserCategoryPoints, User).join(
        User, UserCategoryPoints.user_id == User.id
    ).join(
        Category, UserCategoryPoints.category_id == Category.id
    ).filter(
        Category.type == type_filter,
        User.is_active.is_(True)
    ).order_by(User.id, Category.name).all()

    by_user: Dict[int, dict] = OrderedDict()
    for bucket, user in rows:
        item = by_user.get(user.id)
        if item is None:
            item = dict(_player(user), type_points=0, categories=[])
            by_user[user.id] = item
        item["type_points"] += bucket.points or 0
        item["categories"].append({
            "category_id": bucket.category_id,
            "category_name": bucket.category_name,
            "points": bucket.points or 0,
            "tournaments_count": bucket.tournaments_count or 0,
        })

    return _page({"type": "category_type", "category_type": type_filter.value},
                 list(by_user.values()), "type_points", page, limit)


def get_universal_rankings(db: Session, tournament_id: Optional[int] = None, category_id: Optional[int] = None,
                           page: int = 1, limit: Optional[int] = None, category_type: Optional[str] = None) -> dict:
    """Route to the scope matching the given tournament and/or category"""
    if tournament_id and category_id:
        return get_tournament_category_rankings(db, tournament_id, category_id, page, limit)
    if tournament_id:
        return get_tournament_rankings(db, tournament_id, page, limit, category_type)
    if category_id:
        return get_category_rankings(db, category_id, page, limit, category_type)
    raise MissingRankingScope()


def get_player_points_breakdown(db: Session, user_id: int) -> dict:
    """Per-category buckets with the player's rank in each, plus history grouped by tournament"""
    user = validate_user_exists(db, user_id)

    category_breakdown = []
    for bucket in user.category_points:
        ahead = db.query(func.count(UserCategoryPoints.id)).join(User).filter(
            UserCategoryPoints.category_id == bucket.category_id,
            UserCategoryPoints.points > bucket.points,
            User.is_active.is_(True)
        ).scalar()
        category_breakdown.append({
            "category_id": bucket.category_id,
            "category_name": bucket.category_name,
            "category_type": bucket.category_type,
            "points": bucket.points,
            "tournaments_count": bucket.tournaments_count,
            "rank": ahead + 1,
            "last_updated": bucket.last_updated,
        })
    category_breakdown.sort(key=lambda c: -c["points"])

    tournaments: Dict[int, dict] = OrderedDict()
    for entry in user.points_history:
        group = tournaments.get(entry.tournament_id)
        if group is None:
            group = {
                "tournament_id": entry.tournament_id,
                "tournament_name": entry.tournament_name,
                "categories": [],
                "total_points": 0,
            }
            tournaments[entry.tournament_id] = group
        group["categories"].append({
            "category_id": entry.category_id,
            "category_name": entry.category_name,
            "points_earned": entry.points_earned,
            "position": entry.position,
            "date": entry.date,
        })
        group["total_points"] += entry.points_earned

    return {
        "user": user,
        "category_breakdown": category_breakdown,
        "tournament_breakdown": list(tournaments.values()),
    }

