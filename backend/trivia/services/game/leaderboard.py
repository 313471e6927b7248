import logging
from typing import List, Optional, Tuple

from redis import Redis

from . import keys
from .scoring import ScoreLedger, currency_format

LEADERBOARD_TTL_SEC = 60 * 5
LOSERBOARD_TTL_SEC = 15
DEFAULT_LIMIT = 10
NO_SCORES = 'There are no scores yet!'


class Leaderboard:
    """Ranked score listings, rendered to text and cached in redis.

    The top scores are cached for five minutes and the bottom scores for
    fifteen seconds. Within that window callers get the cached text back even
    when scores have since moved.
    """

    def __init__(self, store: Redis, ledger: ScoreLedger, directory, logger: Optional[logging.Logger] = None):
        self.store = store
        self.ledger = ledger
        self.directory = directory
        self.logger = logger or logging.getLogger(__name__)

    def ranked(self, limit: int = DEFAULT_LIMIT, descending: bool = True) -> List[Tuple[str, int]]:
        scores = self.ledger.all_scores()
        self.logger.info(f"[leaderboard] scanned={len(scores)} order={'desc' if descending else 'asc'}")
        # user id breaks ties so equal scores always list in the same order
        scores.sort(key=lambda entry: ((-entry[1] if descending else entry[1]), entry[0]))
        return scores[:limit]

    def render_lines(self, limit: int = DEFAULT_LIMIT, descending: bool = True) -> List[str]:
        lines = []
        for rank, (user_id, score) in enumerate(self.ranked(limit, descending), start=1):
            name = self.directory.display_name(user_id, use_real_name=True)
            lines.append(f"{rank}. {name}: {currency_format(score)}")
        return lines

    def _cached(self, key: str, ttl: int, header: str, limit: int, descending: bool) -> str:
        cached = self.store.get(key)
        if cached is not None:
            return cached
        lines = self.render_lines(limit, descending)
        response = f"{header}\n\n" + '\n'.join(lines) if lines else NO_SCORES
        self.store.setex(key, ttl, response)
        return response

    def top(self, limit: int = DEFAULT_LIMIT) -> str:
        return self._cached(keys.LEADERBOARD_KEY, LEADERBOARD_TTL_SEC,
                            "Let's take a look at the top scores:", limit, True)

    def bottom(self, limit: int = DEFAULT_LIMIT) -> str:
        return self._cached(keys.LOSERBOARD_KEY, LOSERBOARD_TTL_SEC,
                            "Let's take a look at the bottom scores:", limit, False)

    def final(self, limit: int = DEFAULT_LIMIT) -> str:
        """Uncached standings, shown right before a reset wipes them."""
        lines = self.render_lines(limit, True)
        if not lines:
            return NO_SCORES
        return 'The final scores for this round are:\n\n' + '\n'.join(lines)

