from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload
from models.user import User


def get_user_by_id(db: Session, user_id: int):
    return db.query(User).options(
        selectinload(User.category_points),
        selectinload(User.points_history),
    ).filter(User.id == user_id).first()


def search_users(db: Session, q: str, limit: int = 20):
    """Case-insensitive substring search over player name and external id"""
    pattern = f"%{q}%"
    return db.query(User).options(
        selectinload(User.category_points)
    ).filter(
        or_(User.name.ilike(pattern), User.external_id.ilike(pattern))
    ).order_by(User.total_points.desc(), User.name.asc()).limit(limit).all()
