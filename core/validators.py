from typing import Optional, Tuple

from sqlalchemy.orm import Session
from models.tournament import Tournament
from models.category import Category, CategoryType
from models.user import User
from core.config import settings
from core.exceptions import (
    TournamentNotFound, CategoryNotFound, UserNotFound, InvalidCategoryType
)
from api.crud.tournament_crud import get_tournament
from api.crud.category_crud import get_category
from api.crud.user import get_user_by_id


def validate_tournament_exists(db: Session, tournament_id: int) -> Tournament:
    """Validate tournament exists and return it with its results loaded"""
    tournament = get_tournament(db, tournament_id)
    if not tournament:
        raise TournamentNotFound()
    return tournament


def validate_category_exists(db: Session, category_id: int) -> Category:
    """Validate category exists and return it"""
    category = get_category(db, category_id)
    if not category:
        raise CategoryNotFound()
    return category


def validate_user_exists(db: Session, user_id: int) -> User:
    """Validate user exists and return it"""
    user = get_user_by_id(db, user_id)
    if not user:
        raise UserNotFound()
    return user


def validate_category_type(value: str) -> CategoryType:
    """Validate value names a category type (singles/doubles)"""
    try:
        return CategoryType(str(value).strip().lower())
    except ValueError:
        raise InvalidCategoryType(value)


def validate_pagination(page: int, limit: Optional[int] = None) -> Tuple[int, int]:
    """Validate page/limit, falling back to the configured default limit"""
    if limit is None:
        limit = settings.ranking_default_limit

    if page < 1:
        raise ValueError("Page must be at least 1")

    if limit < 1:
        raise ValueError("Limit must be at least 1")

    if limit > settings.ranking_max_limit:
        raise ValueError(f"Limit cannot be more than {settings.ranking_max_limit}")

    return page, limit
