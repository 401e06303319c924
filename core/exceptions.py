from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import exc as sa_exc


class PointsException(HTTPException):
    def __init__(self, detail: Any, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=detail)


class TournamentNotFound(PointsException):
    def __init__(self):
        super().__init__("Tournament not found", status.HTTP_404_NOT_FOUND)


class CategoryNotFound(PointsException):
    def __init__(self):
        super().__init__("Category not found", status.HTTP_404_NOT_FOUND)


class UserNotFound(PointsException):
    def __init__(self):
        super().__init__("User not found", status.HTTP_404_NOT_FOUND)


class MissingTournamentName(PointsException):
    def __init__(self):
        super().__init__("Tournament name is required")


class EmptyWorkbook(PointsException):
    def __init__(self):
        super().__init__("The uploaded Excel file contains no sheets")


class InvalidSpreadsheet(PointsException):
    def __init__(self, reason: str = "File is not a readable .xlsx workbook"):
        super().__init__(reason)


class DuplicateFileName(PointsException):
    def __init__(self, file_name: str):
        super().__init__(
            f'A tournament with the file name "{file_name}" has already been uploaded.',
            status.HTTP_409_CONFLICT
        )


class DuplicateFileContent(PointsException):
    def __init__(self):
        super().__init__("This exact file has already been uploaded previously.", status.HTTP_409_CONFLICT)


class NoValidResults(PointsException):
    def __init__(self, errors: List[Dict[str, Any]], categories: List[Dict[str, Any]]):
        super().__init__({
            "message": "No valid players found in any category",
            "errors": errors,
            "categories": categories,
        })


class InvalidCategoryType(PointsException):
    def __init__(self, value: str):
        super().__init__(f'Type must be either "singles" or "doubles" (got "{value}")')


class MissingRankingScope(PointsException):
    def __init__(self):
        super().__init__("Please provide either category_id, tournament_id, or both")


class StorageFailure(PointsException):
    """Whole-transaction failure in the storage layer."""

    MESSAGES = {
        "connectivity": "Database connection issue. Please try again.",
        "timeout": "Operation timed out. Please try with a smaller file.",
        "constraint_violation": "This file has already been uploaded.",
        "unknown": "Server error",
    }

    def __init__(self, kind: str = "unknown", reason: Optional[str] = None):
        self.kind = kind
        code = status.HTTP_503_SERVICE_UNAVAILABLE if kind in ("connectivity", "timeout") \
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        super().__init__({"message": self.MESSAGES.get(kind, self.MESSAGES["unknown"]), "kind": kind, "reason": reason}, code)


class LedgerReversalFailed(PointsException):
    def __init__(self, reason: str):
        super().__init__(
            {"message": "Tournament deletion aborted; points were not reverted", "reason": reason},
            status.HTTP_500_INTERNAL_SERVER_ERROR
        )


class GenerationExhausted(Exception):
    """No collision-free member id could be generated for a player."""

    def __init__(self, player_name: str, attempts: int):
        self.player_name = player_name
        self.attempts = attempts
        super().__init__(f"Failed to generate unique member ID for player: {player_name}")


class LedgerDriftError(Exception):
    """A reversal would drive a points bucket or total below zero."""


def classify_storage_error(error: Exception) -> str:
    """Map a SQLAlchemy exception onto the failure kinds reported to callers"""
    if isinstance(error, sa_exc.TimeoutError):
        return "timeout"
    if isinstance(error, sa_exc.IntegrityError):
        return "constraint_violation"
    if isinstance(error, (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.DisconnectionError)):
        message = str(error).lower()
        if "timeout" in message or "timed out" in message:
            return "timeout"
        return "connectivity"
    return "unknown"
