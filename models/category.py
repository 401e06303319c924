from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.types import Enum as SQLEnum
from db import Base
import enum


class CategoryType(str, enum.Enum):
    SINGLES = "singles"
    DOUBLES = "doubles"


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    # Sheet name from the uploaded workbook, e.g. "MS" or "Mixed Doubles"
    name = Column(String, unique=True, index=True, nullable=False)
    type = Column(
        SQLEnum(CategoryType, values_callable=lambda obj: [e.value for e in obj]),
        default=CategoryType.SINGLES,
        nullable=False
    )
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def is_doubles(self) -> bool:
        return self.type == CategoryType.DOUBLES
