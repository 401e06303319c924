from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from models.user import User


class IdentityCache:
    """
    Import-scoped map of external id -> player.

    Pre-loaded once per import. Players that do not exist yet are staged:
    registered here so later rows reuse them, and queued for insertion. Nothing
    staged is durable until the importer commits.
    """

    def __init__(self, players: Optional[List[User]] = None):
        self._by_external_id: Dict[str, User] = {}
        self.pending: List[User] = []
        for player in players or []:
            if player.external_id:
                self._by_external_id[player.external_id] = player

    @classmethod
    def preload(cls, db: Session) -> "IdentityCache":
        players = db.query(User).options(
            selectinload(User.category_points)
        ).filter(User.external_id.isnot(None)).all()
        return cls(players)

    def __contains__(self, external_id: str) -> bool:
        return external_id in self._by_external_id

    def __len__(self) -> int:
        return len(self._by_external_id)

    def get(self, external_id: str) -> Optional[User]:
        return self._by_external_id.get(external_id)

    def resolve_or_stage(self, external_id: str, name: str) -> Tuple[User, bool]:
        """Return (player, created) for external_id, staging a new player if needed"""
        player = self._by_external_id.get(external_id)
        if player is not None:
            return player, False

        player = User(
            external_id=external_id,
            name=name,
            total_points=0,
            is_active=True,
        )
        self._by_external_id[external_id] = player
        self.pending.append(player)
        return player, True
