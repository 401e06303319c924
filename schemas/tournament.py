from pydantic import BaseModel, validator, Field
from typing import Optional, List, Any, Dict
from datetime import datetime
from enum import Enum


class CategoryType(str, Enum):
    SINGLES = "singles"
    DOUBLES = "doubles"


class SheetStatus(str, Enum):
    PROCESSED = "processed"
    SKIPPED = "skipped"
    EMPTY = "empty"


# Import input
class TournamentImportMeta(BaseModel):
    """Caller-supplied tournament metadata accompanying an uploaded workbook"""
    name: Optional[str] = Field(None, max_length=200, description="Tournament name")
    location: Optional[str] = Field("", max_length=200)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @validator('name', 'location', pre=True)
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @validator('start_date', 'end_date', pre=True)
    def parse_empty_date(cls, v):
        if v == "":
            return None
        return v

    @validator('end_date')
    def validate_end_date(cls, v, values):
        start = values.get('start_date')
        if v and start and v < start:
            raise ValueError('End date must not be before start date')
        return v


# Import result
class RowError(BaseModel):
    category: str
    row_index: int
    reason: str
    data: Optional[Dict[str, Any]] = None


class CategoryStat(BaseModel):
    name: str
    type: Optional[CategoryType] = None
    players_processed: int = 0
    errors: int = 0
    status: SheetStatus


class CreatedCategory(BaseModel):
    id: int
    name: str
    type: CategoryType


class CreatedPlayer(BaseModel):
    id: int
    external_id: str
    name: str
    category: str
    generated_id: bool = False


class ImportedTournamentSummary(BaseModel):
    id: int
    name: str
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    players_count: int
    categories_processed: int
    original_file_name: Optional[str] = None


class TournamentImportResult(BaseModel):
    tournament: ImportedTournamentSummary
    categories: List[CategoryStat]
    created_categories: Optional[List[CreatedCategory]] = None
    created_players: Optional[List[CreatedPlayer]] = None
    errors: Optional[List[RowError]] = None


class FileUniqueness(BaseModel):
    file_name: str
    is_file_name_unique: bool
    is_file_content_unique: bool
    existing_tournament: Optional[Dict[str, Any]] = None


class TournamentDeleted(BaseModel):
    tournament_id: int
    name: str
    players_reverted: int
    history_entries_removed: int
    message: str = "Tournament deleted and points reverted successfully"


# Read models
class CategorySummary(BaseModel):
    id: int
    name: str
    type: CategoryType

    class Config:
        from_attributes = True


class Tournament(BaseModel):
    """Tournament list item - results are not included"""
    id: int
    name: str
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: str
    original_file_name: Optional[str] = None
    categories_count: int = 0
    categories: List[CategorySummary] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResultPlayer(BaseModel):
    id: int
    name: str
    external_id: Optional[str] = None
    total_points: int = 0
    category_points: int = 0


class ResultEntry(BaseModel):
    id: int
    external_id1: Optional[str] = None
    external_id2: Optional[str] = None
    player1: Optional[str] = None
    player2: Optional[str] = None
    position: int
    position2: Optional[int] = None
    display_position: str
    display_position2: str = ""
    points: int
    points2: Optional[int] = None
    user1: Optional[ResultPlayer] = None
    user2: Optional[ResultPlayer] = None


class TournamentCategoryResults(BaseModel):
    id: int
    name: str
    type: CategoryType
    players: List[ResultEntry] = []


class TournamentStatistics(BaseModel):
    total_categories: int
    singles_categories: int
    doubles_categories: int
    total_player_entries: int
    total_individual_players: int
    unique_users: int


class TournamentDetails(BaseModel):
    id: int
    name: str
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: str
    original_file_name: Optional[str] = None
    categories: List[TournamentCategoryResults] = []
    statistics: TournamentStatistics
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
