from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from schemas.tournament import CategoryType


class Category(BaseModel):
    id: int
    name: str
    type: CategoryType
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
