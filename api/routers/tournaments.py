from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional
from api.deps.db import get_db
from core.validators import validate_tournament_exists
from core.exceptions import InvalidSpreadsheet
from core.logging import setup_logger
from api.crud.tournament_crud import build_tournament_details, check_file_uniqueness, get_tournaments
from services.spreadsheet import content_digest, read_workbook
from services.tournament_importer import import_tournament
from services.tournament_deletion import delete_tournament_with_reversal
from schemas.tournament import (
    FileUniqueness, Tournament, TournamentDeleted, TournamentDetails,
    TournamentImportMeta, TournamentImportResult
)

router = APIRouter(prefix="/tournaments", tags=["Tournaments"])

logger = setup_logger(__name__)

ALLOWED_EXTENSIONS = (".xlsx", ".xlsm")


async def _read_upload(file: UploadFile) -> bytes:
    if not file.filename or not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise InvalidSpreadsheet("Only Excel files (.xlsx) are accepted")
    content = await file.read()
    if not content:
        raise InvalidSpreadsheet("Uploaded file is empty")
    return content


@router.post("/upload", response_model=TournamentImportResult, status_code=status.HTTP_201_CREATED)
async def upload_tournament(
    file: UploadFile = File(...),
    name: Optional[str] = Form(None),
    location: Optional[str] = Form(""),
    start_date: Optional[str] = Form(None),
    end_date: Optional[str] = Form(None),
    db: Session = Depends(get_db)
):
    """Import a results workbook as a new tournament and attribute points"""
    content = await _read_upload(file)
    meta = TournamentImportMeta(name=name, location=location, start_date=start_date, end_date=end_date)
    workbook = read_workbook(content)
    logger.info(f"Received upload {file.filename} ({len(content)} bytes)")
    return import_tournament(db, meta, workbook, file.filename, content_digest(content))


@router.post("/check-file", response_model=FileUniqueness)
async def check_file(
    file: UploadFile = File(...),
    db: Session = Depends(get_db)
):
    """Report whether the file name and content are still unused"""
    content = await _read_upload(file)
    return check_file_uniqueness(db, file.filename, content_digest(content))


@router.get("/", response_model=List[Tournament])
async def list_tournaments(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Get list of tournaments, newest first"""
    return get_tournaments(db, skip=skip, limit=limit, search=search)


@router.get("/{tournament_id}", response_model=TournamentDetails)
async def get_tournament_details(
    tournament_id: int,
    db: Session = Depends(get_db)
):
    """Get tournament with results grouped by category"""
    tournament = validate_tournament_exists(db, tournament_id)
    return build_tournament_details(tournament)


@router.delete("/{tournament_id}", response_model=TournamentDeleted)
async def delete_tournament(
    tournament_id: int,
    db: Session = Depends(get_db)
):
    """Delete tournament and revert every point it awarded"""
    return delete_tournament_with_reversal(db, tournament_id)
