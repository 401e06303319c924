from collections import OrderedDict
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import case, or_
from typing import Optional
from models.tournament import Tournament, TournamentResult
from models.category import CategoryType
from services.points import points_for_position, position_label


def find_duplicate_upload(db: Session, file_name: Optional[str], digest: Optional[str]):
    """Return (existing_by_name, existing_by_digest) for an upload"""
    existing_by_name = None
    existing_by_digest = None
    if file_name:
        existing_by_name = db.query(Tournament).filter(Tournament.original_file_name == file_name).first()
    if digest:
        existing_by_digest = db.query(Tournament).filter(Tournament.content_digest == digest).first()
    return existing_by_name, existing_by_digest


def check_file_uniqueness(db: Session, file_name: str, digest: str) -> dict:
    existing_by_name, existing_by_digest = find_duplicate_upload(db, file_name, digest)
    existing = existing_by_name or existing_by_digest
    return {
        "file_name": file_name,
        "is_file_name_unique": existing_by_name is None,
        "is_file_content_unique": existing_by_digest is None,
        "existing_tournament": {
            "id": existing.id,
            "name": existing.name,
            "upload_date": existing.created_at,
        } if existing else None,
    }


def get_tournament(db: Session, tournament_id: int):
    return db.query(Tournament).options(
        selectinload(Tournament.categories),
        selectinload(Tournament.results).selectinload(TournamentResult.player1),
        selectinload(Tournament.results).selectinload(TournamentResult.player2),
    ).filter(Tournament.id == tournament_id).first()


def get_tournaments(db: Session, skip: int = 0, limit: int = 100, search: Optional[str] = None):
    query = db.query(Tournament).options(selectinload(Tournament.categories))

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Tournament.name.ilike(pattern), Tournament.location.ilike(pattern)))

    # Newest first, tournaments without a start date last
    tournaments = query.order_by(
        case(
            (Tournament.start_date.is_(None), 1),
            else_=0
        ),
        Tournament.start_date.desc(),
        Tournament.id.desc()
    ).offset(skip).limit(limit).all()

    for tournament in tournaments:
        tournament.categories_count = len(tournament.categories)

    return tournaments


def _result_player(user, category_id: int):
    if user is None:
        return None
    bucket = user.bucket_for(category_id)
    return {
        "id": user.id,
        "name": user.name,
        "external_id": user.external_id,
        "total_points": user.total_points or 0,
        "category_points": bucket.points if bucket else 0,
    }


def build_tournament_details(tournament: Tournament) -> dict:
    """Group a tournament's results by category, with display labels and statistics"""
    categories = OrderedDict()
    for category in tournament.categories:
        categories[category.id] = {
            "id": category.id,
            "name": category.name,
            "type": category.type,
            "players": [],
        }

    unique_users = set()
    for result in tournament.results:
        category = categories.get(result.category_id)
        if category is None:
            continue

        is_doubles = result.category_type == CategoryType.DOUBLES.value
        category["players"].append({
            "id": result.id,
            "external_id1": result.external_id1,
            "external_id2": result.external_id2,
            "player1": result.player1_name,
            "player2": result.player2_name,
            "position": result.position,
            "position2": result.position2,
            "display_position": position_label(result.position),
            "display_position2": position_label(result.position2) if is_doubles else "",
            "points": points_for_position(result.position),
            "points2": points_for_position(result.position2) if is_doubles else None,
            "user1": _result_player(result.player1, result.category_id),
            "user2": _result_player(result.player2, result.category_id) if is_doubles else None,
        })

        if result.player1_id:
            unique_users.add(result.player1_id)
        if result.player2_id:
            unique_users.add(result.player2_id)

    grouped = list(categories.values())
    for category in grouped:
        category["players"].sort(key=lambda p: p["position"])

    singles = [c for c in grouped if c["type"] == CategoryType.SINGLES]
    doubles = [c for c in grouped if c["type"] == CategoryType.DOUBLES]
    singles_entries = sum(len(c["players"]) for c in singles)
    doubles_entries = sum(len(c["players"]) for c in doubles)

    return {
        "id": tournament.id,
        "name": tournament.name,
        "location": tournament.location,
        "start_date": tournament.start_date,
        "end_date": tournament.end_date,
        "status": tournament.status,
        "original_file_name": tournament.original_file_name,
        "categories": grouped,
        "statistics": {
            "total_categories": len(grouped),
            "singles_categories": len(singles),
            "doubles_categories": len(doubles),
            "total_player_entries": singles_entries + doubles_entries,
            "total_individual_players": singles_entries + doubles_entries * 2,
            "unique_users": len(unique_users),
        },
        "created_at": tournament.created_at,
        "updated_at": tournament.updated_at,
    }
