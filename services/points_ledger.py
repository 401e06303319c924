"""
Durable per-player points ledger.

Totals and category buckets are maintained incrementally. The history rows
are the source of truth for reversal: revert() undoes exactly what
apply_delta() recorded for a tournament.
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import LedgerDriftError
from core.logging import setup_logger
from models.category import Category
from models.points import PointsHistory, UserCategoryPoints
from models.tournament import Tournament
from models.user import User

logger = setup_logger(__name__)


def _type_value(category: Category) -> str:
    return category.type.value if hasattr(category.type, 'value') else str(category.type)


def apply_delta(
    db: Session,
    player: User,
    category: Category,
    points_delta: int,
    position: int,
    tournament: Tournament,
) -> PointsHistory:
    """
    Credit points_delta to player in category for tournament.

    Increments the total and the (player, category) bucket, creating the
    bucket on first use, and appends one history entry. Must run inside the
    import transaction; nothing is committed here.
    """
    now = datetime.now(timezone.utc)
    category_type = _type_value(category)

    player.total_points = (player.total_points or 0) + points_delta

    bucket = player.bucket_for(category.id)
    if bucket is None:
        bucket = UserCategoryPoints(
            category=category,
            category_name=category.name,
            category_type=category_type,
            points=0,
            tournaments_count=0,
        )
        player.category_points.append(bucket)
        db.add(bucket)
    bucket.points = (bucket.points or 0) + points_delta
    bucket.tournaments_count = (bucket.tournaments_count or 0) + 1
    bucket.category_type = category_type
    bucket.last_updated = now

    entry = PointsHistory(
        tournament=tournament,
        tournament_name=tournament.name,
        category=category,
        category_name=category.name,
        category_type=category_type,
        points_earned=points_delta,
        position=position,
        date=now,
    )
    player.points_history.append(entry)
    db.add(entry)
    return entry


def _subtract(current: int, amount: int, what: str, player: User, strict: bool) -> int:
    remaining = (current or 0) - amount
    if remaining >= 0:
        return remaining
    if strict:
        raise LedgerDriftError(
            f"Reverting {amount} points would drive {what} of player {player.id} below zero (has {current})"
        )
    logger.warning(
        f"Ledger drift for player {player.id}: {what} is {current}, reverting {amount}; clamping at 0"
    )
    return 0


def revert(db: Session, player: User, tournament_id: int, strict: Optional[bool] = None) -> List[PointsHistory]:
    """
    Undo every history entry player holds for tournament_id.

    Subtracts each entry from its category bucket and from the total,
    decrements the bucket's tournament count (removing the bucket once it
    reaches zero, together with any points it still holds) and deletes the
    entries. Values are clamped at zero unless
    strict, in which case LedgerDriftError is raised instead.
    """
    if strict is None:
        strict = settings.ledger_strict_reversal

    entries = [h for h in player.points_history if h.tournament_id == tournament_id]

    for entry in entries:
        bucket = player.bucket_for(entry.category_id)
        if bucket is None:
            if strict:
                raise LedgerDriftError(
                    f"Player {player.id} has history in category {entry.category_id} but no points bucket"
                )
            logger.warning(
                f"Ledger drift for player {player.id}: no bucket for category {entry.category_id}"
            )
        else:
            bucket.points = _subtract(bucket.points, entry.points_earned, f"category {entry.category_id}", player, strict)
            bucket.tournaments_count = max(0, (bucket.tournaments_count or 0) - 1)
            bucket.last_updated = datetime.now(timezone.utc)
            if bucket.tournaments_count == 0:
                if bucket.points and strict:
                    raise LedgerDriftError(
                        f"Bucket of player {player.id} in category {entry.category_id} "
                        f"still holds {bucket.points} points after its last tournament was reverted"
                    )
                if bucket.points:
                    # The total carried these points too; drop them with the bucket
                    logger.warning(
                        f"Removing bucket of player {player.id} in category {entry.category_id} "
                        f"with {bucket.points} unexplained points; deducting them from the total"
                    )
                    player.total_points = max(0, (player.total_points or 0) - bucket.points)
                player.category_points.remove(bucket)

        player.total_points = _subtract(player.total_points, entry.points_earned, "total points", player, strict)
        player.points_history.remove(entry)

    return entries
