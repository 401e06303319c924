"""
All-or-nothing import of a results workbook.

Validate -> Preload -> ProcessSheets -> Stage -> Commit | Abort

Row failures are collected and reported; they never abort the import. Any
failure after preloading rolls back every staged write.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from api.crud.tournament_crud import find_duplicate_upload
from core.config import settings
from core.exceptions import (
    DuplicateFileContent, DuplicateFileName, EmptyWorkbook, GenerationExhausted,
    MissingTournamentName, NoValidResults, PointsException, StorageFailure,
    classify_storage_error
)
from core.logging import setup_logger
from models.tournament import Tournament, TournamentStatus
from models.user import User
from schemas.tournament import SheetStatus, TournamentImportMeta
from services import points_ledger
from services.import_session import ImportSession
from services.member_ids import MemberIdGenerator
from services.row_normalizer import (
    PlayerResultDraft, RowError, RowRejected, classify_category, normalize_row
)
from services.spreadsheet import Sheet, Workbook

logger = setup_logger(__name__)


class TournamentImporter:
    """Imports one workbook as one tournament inside a single transaction"""

    def __init__(self, db: Session, max_workers: Optional[int] = None,
                 member_ids: Optional[MemberIdGenerator] = None):
        self.db = db
        self.max_workers = max_workers or settings.import_max_workers
        self._member_ids = member_ids
        self.session: Optional[ImportSession] = None
        self.errors: List[RowError] = []
        self.category_stats: List[dict] = []

    def run(self, meta: TournamentImportMeta, workbook: Workbook,
            file_name: Optional[str] = None, digest: Optional[str] = None) -> dict:
        self.validate(meta, workbook, file_name, digest)
        logger.info(
            f"Importing tournament '{meta.name}' from {file_name or '<memory>'}: "
            f"{len(workbook.sheets)} sheet(s)"
        )

        try:
            self.preload()
            accepted = self.process_sheets(workbook, meta.name)
            if accepted == 0:
                raise NoValidResults(
                    [e.to_dict() for e in self.errors],
                    self.category_stats
                )
            tournament = self.stage(meta, file_name, digest)
            self.commit()
        except PointsException:
            self.abort()
            raise
        except SQLAlchemyError as e:
            self.abort()
            kind = classify_storage_error(e)
            logger.error(f"Import of '{meta.name}' aborted ({kind}): {e}")
            raise StorageFailure(kind, str(e))

        result = self._result(tournament, file_name)
        logger.info(
            f"Imported tournament {tournament.id} '{tournament.name}': "
            f"{result['tournament']['players_count']} entries, "
            f"{len(self.session.new_categories)} new categories, "
            f"{len(self.session.identity.pending)} new players, "
            f"{len(self.errors)} rejected rows"
        )
        return result

    # Validate
    def validate(self, meta: TournamentImportMeta, workbook: Workbook,
                 file_name: Optional[str], digest: Optional[str]):
        if not meta.name:
            raise MissingTournamentName()
        if not workbook.sheets:
            raise EmptyWorkbook()

        existing_by_name, existing_by_digest = find_duplicate_upload(self.db, file_name, digest)
        if existing_by_name:
            logger.warning(f"Rejected upload: file name '{file_name}' already used by tournament {existing_by_name.id}")
            raise DuplicateFileName(file_name)
        if existing_by_digest:
            logger.warning(f"Rejected upload: content digest already used by tournament {existing_by_digest.id}")
            raise DuplicateFileContent()

    # Preload
    def preload(self):
        self.session = ImportSession.preload(self.db, self._member_ids)
        logger.debug(
            f"Preloaded {len(self.session.identity)} players and {len(self.session.categories)} categories"
        )

    # ProcessSheets
    def process_sheets(self, workbook: Workbook, tournament_name: str) -> int:
        accepted = 0
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            for sheet in workbook.sheets:
                accepted += self._process_sheet(pool, sheet, tournament_name)
        return accepted

    def _process_sheet(self, pool: ThreadPoolExecutor, sheet: Sheet, tournament_name: str) -> int:
        if not sheet.rows:
            self.category_stats.append({
                "name": sheet.name,
                "players_processed": 0,
                "errors": 0,
                "status": SheetStatus.EMPTY.value,
            })
            return 0

        category_type = classify_category(sheet.name)
        category = self.session.resolve_category(sheet.name, category_type, tournament_name)

        # Normalization is pure and runs on the pool; merging is sequential
        outcomes = list(pool.map(
            lambda item: _normalize(item[1], item[0], sheet.name, category_type),
            enumerate(sheet.rows)
        ))

        processed = 0
        rejected = 0
        for draft, error in outcomes:
            if error is None:
                try:
                    self.session.merge(draft, category)
                    processed += 1
                    continue
                except GenerationExhausted as e:
                    error = RowError(
                        category=sheet.name,
                        row_index=draft.row_index,
                        reason=str(e),
                        data={"player1": draft.player1, "player2": draft.player2},
                    )
            rejected += 1
            self.errors.append(error)
            logger.warning(f"Rejected row {error.row_index} in '{error.category}': {error.reason}")

        self.category_stats.append({
            "name": sheet.name,
            "type": category.type.value,
            "players_processed": processed,
            "errors": rejected,
            "status": SheetStatus.PROCESSED.value if processed > 0 else SheetStatus.SKIPPED.value,
        })
        logger.info(f"Sheet '{sheet.name}' ({category.type.value}): {processed} processed, {rejected} rejected")
        return processed

    # Stage
    def stage(self, meta: TournamentImportMeta, file_name: Optional[str], digest: Optional[str]) -> Tournament:
        session = self.session
        now = datetime.now(timezone.utc)

        if session.new_categories:
            self.db.add_all(session.new_categories)
        if session.identity.pending:
            self.db.add_all(session.identity.pending)
        # Ids for new categories and players are needed by the ledger buckets
        self.db.flush()

        tournament = Tournament(
            name=meta.name,
            location=meta.location or "",
            start_date=meta.start_date or now,
            end_date=meta.end_date or now,
            status=TournamentStatus.COMPLETED.value,
            original_file_name=file_name,
            content_digest=digest,
            categories=list(session.used_categories),
            results=list(session.results),
        )
        self.db.add(tournament)
        self.db.flush()

        _lock_players(self.db, [d.player for d in session.points])
        for delta in session.points:
            points_ledger.apply_delta(
                self.db,
                delta.player,
                delta.category,
                delta.points,
                delta.best_position,
                tournament,
            )
        return tournament

    # Commit | Abort
    def commit(self):
        self.db.commit()

    def abort(self):
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Rollback failed: {e}")

    def _result(self, tournament: Tournament, file_name: Optional[str]) -> dict:
        session = self.session
        return {
            "tournament": {
                "id": tournament.id,
                "name": tournament.name,
                "location": tournament.location,
                "start_date": tournament.start_date,
                "end_date": tournament.end_date,
                "players_count": len(session.results),
                "categories_processed": len([c for c in self.category_stats if c["players_processed"] > 0]),
                "original_file_name": file_name,
            },
            "categories": self.category_stats,
            "created_categories": [
                {"id": c.id, "name": c.name, "type": c.type.value}
                for c in session.new_categories
            ] or None,
            "created_players": [
                {
                    "id": p["player"].id,
                    "external_id": p["external_id"],
                    "name": p["name"],
                    "category": p["category"],
                    "generated_id": p["generated_id"],
                }
                for p in session.created_players
            ] or None,
            "errors": [e.to_dict() for e in self.errors] or None,
        }


def _normalize(row: dict, index: int, sheet_name: str, category_type) -> Tuple[Optional[PlayerResultDraft], Optional[RowError]]:
    try:
        return normalize_row(row, index, sheet_name, category_type), None
    except RowRejected as e:
        return None, e.error


def _lock_players(db: Session, players: List[User]):
    """
    Row-lock already persisted players whose ledger this import updates.

    The players were loaded at preload time, so their totals and buckets are
    re-read under the lock; deltas must apply to what is committed now.
    """
    ids = sorted({p.id for p in players if p.id is not None})
    if not ids:
        return
    db.query(User).options(
        selectinload(User.category_points)
    ).filter(User.id.in_(ids)).order_by(User.id).populate_existing().with_for_update().all()


def import_tournament(db: Session, meta: TournamentImportMeta, workbook: Workbook,
                      file_name: Optional[str] = None, digest: Optional[str] = None,
                      member_ids: Optional[MemberIdGenerator] = None) -> dict:
    """Import workbook as a new tournament and return the import summary"""
    return TournamentImporter(db, member_ids=member_ids).run(meta, workbook, file_name, digest)
