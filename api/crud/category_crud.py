from sqlalchemy.orm import Session
from models.category import Category


def get_category(db: Session, category_id: int):
    return db.query(Category).filter(Category.id == category_id).first()


def get_categories(db: Session, category_type: str = None):
    query = db.query(Category)
    if category_type:
        query = query.filter(Category.type == category_type)
    return query.order_by(Category.name.asc()).all()
