"""
Integration tests for deleting a tournament and reverting its points
"""
import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import LedgerReversalFailed, TournamentNotFound
from models.points import PointsHistory, UserCategoryPoints
from models.tournament import Tournament, TournamentResult
from models.user import User
from services import points_ledger
from services.tournament_deletion import delete_tournament_with_reversal
from services.tournament_importer import import_tournament


def _ledger_snapshot(db):
    snapshot = {}
    for user in db.query(User).order_by(User.external_id).all():
        snapshot[user.external_id] = (
            user.total_points,
            sorted((b.category_name, b.points, b.tournaments_count) for b in user.category_points),
            len(user.points_history),
        )
    return snapshot


@pytest.fixture
def first_workbook(make_workbook):
    return make_workbook({
        "MS": [
            {"Member ID1": "1", "Player1": "Alice", "Position": 1},
            {"Member ID1": "2", "Player1": "Dan", "Position": 2},
        ],
        "MD": [{"Member ID1": "3", "Player1": "Bob", "Member ID2": "4", "Player2": "Carol", "Position": 2}],
    })


@pytest.fixture
def second_workbook(make_workbook):
    return make_workbook({
        "MS": [
            {"Member ID1": "2", "Player1": "Dan", "Position": 1},
            {"Member ID1": "1", "Player1": "Alice", "Position": 3},
        ],
    })


def test_delete_reverts_points(db, meta, two_sheet_workbook):
    """Test all points from the only tournament go back to zero"""
    result = import_tournament(db, meta(), two_sheet_workbook, "spring.xlsx", "d")
    tournament_id = result["tournament"]["id"]

    ack = delete_tournament_with_reversal(db, tournament_id)

    assert ack["tournament_id"] == tournament_id
    assert ack["players_reverted"] == 3
    assert ack["history_entries_removed"] == 3
    assert db.query(Tournament).count() == 0
    assert db.query(TournamentResult).count() == 0
    assert db.query(PointsHistory).count() == 0
    assert db.query(UserCategoryPoints).count() == 0
    # Players are kept
    assert db.query(User).count() == 3
    assert all(u.total_points == 0 for u in db.query(User).all())


def test_import_delete_round_trip(db, meta, first_workbook, second_workbook):
    """Test deleting an import leaves the ledger as if it never happened"""
    import_tournament(db, meta("Second"), second_workbook, "second.xlsx", "d2")
    before = _ledger_snapshot(db)

    result = import_tournament(db, meta("First"), first_workbook, "first.xlsx", "d1")
    assert _ledger_snapshot(db) != before

    delete_tournament_with_reversal(db, result["tournament"]["id"])

    after = _ledger_snapshot(db)
    for external_id, state in before.items():
        assert after[external_id] == state
    # Players created by the deleted import remain with an empty ledger
    assert after["3"] == (0, [], 0)
    assert after["4"] == (0, [], 0)


def test_delete_keeps_shared_bucket(db, meta, first_workbook, second_workbook):
    """Test a bucket used by another tournament only loses this tournament's points"""
    first = import_tournament(db, meta("First"), first_workbook, "first.xlsx", "d1")
    import_tournament(db, meta("Second"), second_workbook, "second.xlsx", "d2")

    delete_tournament_with_reversal(db, first["tournament"]["id"])

    alice = db.query(User).filter(User.external_id == "1").one()
    assert alice.total_points == 50
    assert len(alice.category_points) == 1
    assert alice.category_points[0].points == 50
    assert alice.category_points[0].tournaments_count == 1


def test_delete_unknown_tournament(db):
    with pytest.raises(TournamentNotFound):
        delete_tournament_with_reversal(db, 999)


def test_drifted_ledger_is_clamped(db, meta, two_sheet_workbook):
    """Test a total that no longer covers the history is floored at zero"""
    result = import_tournament(db, meta(), two_sheet_workbook, "spring.xlsx", "d")
    alice = db.query(User).filter(User.name == "Alice").one()
    alice.total_points = 10
    db.commit()

    delete_tournament_with_reversal(db, result["tournament"]["id"], strict=False)

    alice = db.query(User).filter(User.name == "Alice").one()
    assert alice.total_points == 0
    assert db.query(Tournament).count() == 0


def test_drifted_ledger_aborts_in_strict_mode(db, meta, two_sheet_workbook):
    """Test strict reversal refuses to delete and leaves everything in place"""
    result = import_tournament(db, meta(), two_sheet_workbook, "spring.xlsx", "d")
    alice = db.query(User).filter(User.name == "Alice").one()
    alice.total_points = 10
    db.commit()

    with pytest.raises(LedgerReversalFailed) as exc_info:
        delete_tournament_with_reversal(db, result["tournament"]["id"], strict=True)

    assert exc_info.value.status_code == 500
    assert db.query(Tournament).count() == 1
    assert db.query(PointsHistory).count() == 3
    assert db.query(User).filter(User.name == "Bob").one().total_points == 75
    assert db.query(User).filter(User.name == "Alice").one().total_points == 10


def test_storage_failure_midway_leaves_tournament_and_ledger(db, meta, first_workbook, monkeypatch):
    """Test a storage error after some players were reverted undoes the partial reversal"""
    result = import_tournament(db, meta("First"), first_workbook, "first.xlsx", "d1")
    before = _ledger_snapshot(db)

    calls = []
    real_revert = points_ledger.revert

    def revert_then_fail(*args, **kwargs):
        calls.append(args)
        if len(calls) > 1:
            raise OperationalError("UPDATE users", {}, Exception("server closed the connection unexpectedly"))
        return real_revert(*args, **kwargs)

    monkeypatch.setattr(points_ledger, "revert", revert_then_fail)

    with pytest.raises(LedgerReversalFailed):
        delete_tournament_with_reversal(db, result["tournament"]["id"])

    assert len(calls) == 2
    assert db.query(Tournament).count() == 1
    assert db.query(TournamentResult).count() == 3
    assert db.query(PointsHistory).count() == 4
    assert _ledger_snapshot(db) == before


def test_dropped_bucket_takes_its_leftover_points_from_total(db, meta, two_sheet_workbook):
    """Test a bucket removed with unexplained points does not leave them in the total"""
    result = import_tournament(db, meta(), two_sheet_workbook, "spring.xlsx", "d")
    alice = db.query(User).filter(User.name == "Alice").one()
    alice.category_points[0].points = 130
    alice.total_points = 130
    db.commit()

    delete_tournament_with_reversal(db, result["tournament"]["id"], strict=False)

    alice = db.query(User).filter(User.name == "Alice").one()
    assert alice.category_points == []
    assert alice.total_points == 0
