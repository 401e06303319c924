from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from db import Base
from datetime import datetime, timezone


def _utcnow():
    return datetime.now(timezone.utc)


class UserCategoryPoints(Base):
    """Per-player, per-category points bucket. One row per (user, category)."""
    __tablename__ = "user_category_points"
    __table_args__ = (
        UniqueConstraint("user_id", "category_id", name="uq_user_category_points"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    category_name = Column(String, nullable=True)
    category_type = Column(String, nullable=True)
    points = Column(Integer, default=0, nullable=False)
    tournaments_count = Column(Integer, default=0, nullable=False)
    last_updated = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user = relationship("User", back_populates="category_points")
    category = relationship("Category", lazy='joined')


class PointsHistory(Base):
    """Append-only record of one (player, tournament, category) attribution."""
    __tablename__ = "points_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # No cascade: a tournament can only go away after its history is reverted
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False, index=True)
    tournament_name = Column(String, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    category_name = Column(String, nullable=True)
    category_type = Column(String, nullable=True)
    points_earned = Column(Integer, nullable=False)
    position = Column(Integer, nullable=True)
    date = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user = relationship("User", back_populates="points_history")
    tournament = relationship("Tournament", lazy='select')
    category = relationship("Category", lazy='select')
