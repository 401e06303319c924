from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base


class User(Base):
    """A ranked player. Point totals are maintained by services.points_ledger."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Member ID from the results workbook (or a generated GEN... id)
    external_id = Column(String, unique=True, index=True, nullable=True)
    name = Column(String, nullable=False)
    total_points = Column(Integer, default=0, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Points ledger
    category_points = relationship(
        "UserCategoryPoints",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy='select'
    )
    points_history = relationship(
        "PointsHistory",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="PointsHistory.id",
        lazy='select'
    )

    @property
    def has_generated_id(self) -> bool:
        from core.config import settings
        return bool(self.external_id) and self.external_id.startswith(settings.member_id_prefix)

    def bucket_for(self, category_id: int):
        """Return the category points bucket for category_id, or None"""
        if category_id is None:
            return None
        for bucket in self.category_points:
            if bucket.category_id == category_id or (bucket.category is not None and bucket.category.id == category_id):
                return bucket
        return None
