import threading
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from models.category import Category, CategoryType
from models.tournament import TournamentResult
from services.identity_cache import IdentityCache
from services.member_ids import MemberIdGenerator
from services.points import PointsAccumulator
from services.row_normalizer import PlayerResultDraft


class ImportSession:
    """
    Import-scoped state shared by every row of one workbook.

    Holds the identity cache, the member id generation ledger, the points
    accumulator and the staged categories/results. Row workers never touch
    it directly: drafts are merged one at a time through merge().
    """

    def __init__(
        self,
        identity: IdentityCache,
        categories: Dict[str, Category],
        member_ids: Optional[MemberIdGenerator] = None,
    ):
        self._lock = threading.Lock()
        self.identity = identity
        self.categories = categories
        self.member_ids = member_ids or MemberIdGenerator(is_known_id=identity.__contains__)
        self.points = PointsAccumulator()
        self.new_categories: List[Category] = []
        self.used_categories: List[Category] = []
        self.results: List[TournamentResult] = []
        self.created_players: List[dict] = []

    @classmethod
    def preload(cls, db: Session, member_ids: Optional[MemberIdGenerator] = None) -> "ImportSession":
        """Load every existing player and category once for the whole import"""
        identity = IdentityCache.preload(db)
        categories = {c.name: c for c in db.query(Category).all()}
        if member_ids is None:
            member_ids = MemberIdGenerator(is_known_id=identity.__contains__)
        return cls(identity, categories, member_ids)

    def resolve_category(self, sheet_name: str, category_type: CategoryType, tournament_name: str) -> Category:
        """
        Get or create the category for a sheet; re-detected types win.

        A new category is only staged for insertion once a row is merged into it.
        """
        with self._lock:
            category = self.categories.get(sheet_name)
            if category is None:
                category = Category(
                    name=sheet_name,
                    type=category_type,
                    description=f"{sheet_name} {category_type.value} category for {tournament_name} tournament",
                )
                self.categories[sheet_name] = category
            elif category.type != category_type:
                category.type = category_type

            return category

    def merge(self, draft: PlayerResultDraft, category: Category) -> TournamentResult:
        """
        Reconcile one normalized row against the shared state.

        Raises GenerationExhausted if a member id is needed and cannot be
        generated; in that case nothing is staged for the row.
        """
        is_doubles = category.type == CategoryType.DOUBLES

        with self._lock:
            external_id1 = draft.external_id1 or self.member_ids.get_or_generate(draft.player1)
            external_id2 = None
            if is_doubles:
                external_id2 = draft.external_id2 or self.member_ids.get_or_generate(draft.player2)

            player1 = self._resolve_player(external_id1, draft.player1, category)
            self.points.attribute(player1, category, draft.position)

            player2 = None
            if is_doubles:
                player2 = self._resolve_player(external_id2, draft.player2, category)
                self.points.attribute(player2, category, draft.position2)

            if category not in self.used_categories:
                self.used_categories.append(category)
                if category.id is None:
                    self.new_categories.append(category)

            result = TournamentResult(
                category=category,
                category_name=category.name,
                category_type=category.type.value,
                position=draft.position,
                position2=draft.position2 if is_doubles else None,
                player1=player1,
                player2=player2,
                external_id1=external_id1,
                external_id2=external_id2,
                player1_name=draft.player1,
                player2_name=draft.player2 if is_doubles else None,
            )
            self.results.append(result)
            return result

    def _resolve_player(self, external_id: str, name: str, category: Category):
        player, created = self.identity.resolve_or_stage(external_id, name)
        if created:
            self.created_players.append({
                "player": player,
                "external_id": external_id,
                "name": name,
                "category": category.name,
                "generated_id": self.member_ids.is_generated(external_id),
            })
        return player
