from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from api.deps.db import get_db
from api.crud.category_crud import get_categories
from core.validators import validate_category_exists, validate_category_type
from schemas.category import Category

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=List[Category])
async def list_categories(
    type: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Get all categories, optionally only singles or doubles"""
    category_type = validate_category_type(type) if type else None
    return get_categories(db, category_type)


@router.get("/{category_id}", response_model=Category)
async def get_category(
    category_id: int,
    db: Session = Depends(get_db)
):
    """Get category by ID"""
    return validate_category_exists(db, category_id)
