import random
from typing import Callable, Dict, Optional, Set

from core.config import settings
from core.exceptions import GenerationExhausted

MEMBER_ID_DIGITS = 11
_LOWEST = 10 ** (MEMBER_ID_DIGITS - 1)
_HIGHEST = 10 ** MEMBER_ID_DIGITS - 1


class MemberIdGenerator:
    """
    Synthesizes external ids for rows that lack one.

    Owns the generation ledger for a single import: the same player name
    (case-insensitive) gets the same id for the whole import, and no id is
    ever handed to two different names.
    """

    def __init__(
        self,
        is_known_id: Callable[[str], bool],
        prefix: Optional[str] = None,
        max_attempts: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self._is_known_id = is_known_id
        self.prefix = prefix if prefix is not None else settings.member_id_prefix
        self.max_attempts = max_attempts if max_attempts is not None else settings.member_id_max_attempts
        self._rng = rng or random.SystemRandom()
        self._by_name: Dict[str, str] = {}
        self._issued: Set[str] = set()

    def _draw(self) -> str:
        return f"{self.prefix}{self._rng.randint(_LOWEST, _HIGHEST)}"

    def get_or_generate(self, player_name: str) -> str:
        key = player_name.strip().lower()
        if key in self._by_name:
            return self._by_name[key]

        for _ in range(self.max_attempts):
            candidate = self._draw()
            if self._is_known_id(candidate) or candidate in self._issued:
                continue
            self._by_name[key] = candidate
            self._issued.add(candidate)
            return candidate

        raise GenerationExhausted(player_name, self.max_attempts)

    @property
    def issued(self) -> Dict[str, str]:
        return dict(self._by_name)

    def is_generated(self, external_id: str) -> bool:
        """True if external_id was issued by this generator"""
        return external_id in self._issued
