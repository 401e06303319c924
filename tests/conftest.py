"""
Shared fixtures: an in-memory SQLite database per test and workbook builders
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from io import BytesIO

import openpyxl
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import Base
from models.user import User  # noqa: F401
from models.category import Category  # noqa: F401
from models.points import UserCategoryPoints, PointsHistory  # noqa: F401
from models.tournament import Tournament, TournamentResult  # noqa: F401
from schemas.tournament import TournamentImportMeta
from services.spreadsheet import Sheet, Workbook


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_workbook():
    """Build a Workbook from sheet name -> list of row dicts"""
    def _make(sheets: dict) -> Workbook:
        return Workbook(sheets=[Sheet(name=name, rows=list(rows)) for name, rows in sheets.items()])
    return _make


@pytest.fixture
def make_xlsx():
    """Build .xlsx bytes from sheet name -> (header, list of row tuples)"""
    def _make(sheets: dict) -> bytes:
        wb = openpyxl.Workbook()
        wb.remove(wb.active)
        for name, (header, rows) in sheets.items():
            ws = wb.create_sheet(title=name)
            if header:
                ws.append(list(header))
            for row in rows:
                ws.append(list(row))
        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
    return _make


@pytest.fixture
def meta():
    def _meta(name="Spring Open", **kwargs) -> TournamentImportMeta:
        return TournamentImportMeta(name=name, **kwargs)
    return _meta


@pytest.fixture
def two_sheet_workbook(make_workbook):
    """Alice wins MS; Bob and Carol finish runner-up in MD"""
    return make_workbook({
        "MS": [{"Position": 1, "Player1": "Alice"}],
        "MD": [{"Position": 2, "Player1": "Bob", "Player2": "Carol"}],
    })
