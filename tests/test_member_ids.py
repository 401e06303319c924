"""
Unit tests for member id generation
"""
import pytest

from core.exceptions import GenerationExhausted
from services.identity_cache import IdentityCache
from services.member_ids import MemberIdGenerator
from models.user import User


class ScriptedRandom:
    """Returns the scripted numbers in order, repeating the last one"""

    def __init__(self, numbers):
        self.numbers = list(numbers)

    def randint(self, low, high):
        value = self.numbers.pop(0) if len(self.numbers) > 1 else self.numbers[0]
        assert low <= value <= high
        return value


def test_generated_id_format():
    """Test ids are the prefix followed by 11 digits"""
    generator = MemberIdGenerator(is_known_id=lambda _: False, prefix="GEN")
    member_id = generator.get_or_generate("Alice")

    assert member_id.startswith("GEN")
    digits = member_id[len("GEN"):]
    assert len(digits) == 11
    assert digits.isdigit()


def test_same_name_gets_same_id():
    """Test a name is only ever assigned one id per import, ignoring case"""
    generator = MemberIdGenerator(is_known_id=lambda _: False)

    first = generator.get_or_generate("Alice")
    assert generator.get_or_generate("alice ") == first
    assert generator.get_or_generate("ALICE") == first
    assert len(generator.issued) == 1


def test_collisions_with_known_ids_are_retried():
    """Test a draw colliding with an existing player's id is skipped"""
    known = {"GEN10000000001"}
    rng = ScriptedRandom([10000000001, 10000000001, 10000000002])
    generator = MemberIdGenerator(is_known_id=known.__contains__, prefix="GEN", max_attempts=5, rng=rng)

    assert generator.get_or_generate("Alice") == "GEN10000000002"


def test_forced_collisions_still_give_distinct_ids():
    """Test two names never share an id even when the random source repeats"""
    rng = ScriptedRandom([10000000005, 10000000005, 10000000005, 10000000006])
    generator = MemberIdGenerator(is_known_id=lambda _: False, prefix="GEN", max_attempts=5, rng=rng)

    alice = generator.get_or_generate("Alice")
    bob = generator.get_or_generate("Bob")

    assert alice == "GEN10000000005"
    assert bob == "GEN10000000006"
    assert generator.is_generated(alice)
    assert generator.is_generated(bob)
    assert not generator.is_generated("12345")


def test_generation_exhausted():
    """Test the attempt bound is honoured"""
    rng = ScriptedRandom([10000000001])
    known = {"GEN10000000001"}
    generator = MemberIdGenerator(is_known_id=known.__contains__, prefix="GEN", max_attempts=3, rng=rng)

    with pytest.raises(GenerationExhausted) as exc_info:
        generator.get_or_generate("Alice")

    assert exc_info.value.attempts == 3
    assert str(exc_info.value) == "Failed to generate unique member ID for player: Alice"
    assert generator.issued == {}


def test_generator_checks_identity_cache():
    """Test ids of preloaded players are never reissued"""
    cache = IdentityCache([User(id=1, external_id="GEN10000000001", name="Existing")])
    rng = ScriptedRandom([10000000001, 10000000002])
    generator = MemberIdGenerator(is_known_id=cache.__contains__, prefix="GEN", rng=rng)

    assert generator.get_or_generate("Newcomer") == "GEN10000000002"


def test_identity_cache_reuses_staged_players():
    """Test a staged player is returned for later rows with the same id"""
    cache = IdentityCache()

    player, created = cache.resolve_or_stage("555", "Dana")
    again, created_again = cache.resolve_or_stage("555", "Dana D.")

    assert created is True
    assert created_again is False
    assert again is player
    assert player.total_points == 0
    assert cache.pending == [player]
    assert "555" in cache
    assert len(cache) == 1


def test_identity_cache_preload(db):
    """Test preload indexes stored players by external id"""
    db.add_all([
        User(external_id="111", name="Alice", total_points=0),
        User(external_id=None, name="No Id", total_points=0),
    ])
    db.commit()

    cache = IdentityCache.preload(db)

    assert len(cache) == 1
    assert cache.get("111").name == "Alice"
    player, created = cache.resolve_or_stage("111", "Alice")
    assert created is False
    assert cache.pending == []
