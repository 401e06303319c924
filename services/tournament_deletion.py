"""
Compensating deletion of an imported tournament.

Every player's ledger is reverted from the tournament's history rows, then
the tournament and its results are removed, all in one transaction.
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from core.exceptions import LedgerDriftError, LedgerReversalFailed, TournamentNotFound
from core.logging import setup_logger
from models.points import PointsHistory
from models.tournament import Tournament
from models.user import User
from services import points_ledger

logger = setup_logger(__name__)


def _affected_players(db: Session, tournament_id: int):
    user_ids = [
        row.user_id for row in
        db.query(PointsHistory.user_id)
        .filter(PointsHistory.tournament_id == tournament_id)
        .distinct()
        .all()
    ]
    if not user_ids:
        return []
    return db.query(User).options(
        selectinload(User.category_points),
        selectinload(User.points_history),
    ).filter(User.id.in_(user_ids)).order_by(User.id).populate_existing().with_for_update().all()


def delete_tournament_with_reversal(db: Session, tournament_id: int, strict: bool = None) -> dict:
    """Revert every player's points for tournament_id, then delete it"""
    tournament = db.query(Tournament).filter(Tournament.id == tournament_id).first()
    if not tournament:
        raise TournamentNotFound()

    name = tournament.name
    try:
        players = _affected_players(db, tournament_id)
        reverted = 0
        for player in players:
            reverted += len(points_ledger.revert(db, player, tournament_id, strict=strict))

        db.delete(tournament)
        db.commit()
    except LedgerDriftError as e:
        db.rollback()
        logger.error(f"Deletion of tournament {tournament_id} aborted: {e}")
        raise LedgerReversalFailed(str(e))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Deletion of tournament {tournament_id} failed: {e}")
        raise LedgerReversalFailed(str(e))

    logger.info(
        f"Deleted tournament {tournament_id} '{name}': reverted {reverted} history entries "
        f"for {len(players)} players"
    )
    return {
        "tournament_id": tournament_id,
        "name": name,
        "players_reverted": len(players),
        "history_entries_removed": reverted,
        "message": "Tournament deleted and points reverted successfully",
    }
