from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base
import enum


class TournamentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


tournament_categories = Table(
    "tournament_categories",
    Base.metadata,
    Column("tournament_id", Integer, ForeignKey("tournaments.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id"), primary_key=True),
)


class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    location = Column(String, nullable=True, default="")
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String, default=TournamentStatus.COMPLETED.value, nullable=False)

    # Duplicate-upload detection
    original_file_name = Column(String, unique=True, index=True, nullable=True)
    content_digest = Column(String(64), unique=True, index=True, nullable=True)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    categories = relationship("Category", secondary=tournament_categories, lazy='select')
    results = relationship(
        "TournamentResult",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by="TournamentResult.id",
        lazy='select'
    )


class TournamentResult(Base):
    """One accepted spreadsheet row. Immutable once committed."""
    __tablename__ = "tournament_results"

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    category_name = Column(String, nullable=True)
    category_type = Column(String, nullable=False)

    position = Column(Integer, nullable=False, default=0)
    position2 = Column(Integer, nullable=True)

    player1_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    player2_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    external_id1 = Column(String, nullable=True)
    external_id2 = Column(String, nullable=True)
    player1_name = Column(String, nullable=True)
    player2_name = Column(String, nullable=True)

    tournament = relationship("Tournament", back_populates="results")
    category = relationship("Category", lazy='select')
    player1 = relationship("User", foreign_keys=[player1_id], lazy='select')
    player2 = relationship("User", foreign_keys=[player2_id], lazy='select')
