from redis import Redis

from . import keys

HINT_PENALTY = 100
MIN_POINTS = 100


def adjusted_points(base_value: int, hint_count: int) -> int:
    """Each hint taken costs $100; a correct answer is always worth at least $100."""
    return max(int(base_value) - int(hint_count) * HINT_PENALTY, MIN_POINTS)


def currency_format(number: int, currency: str = '$') -> str:
    """-10000 -> '-$10,000'."""
    number = int(number)
    prefix = currency if number >= 0 else f"-{currency}"
    return f"{prefix}{abs(number):,}"


class ScoreLedger:
    """Cumulative per-user scores, one integer key per user."""

    def __init__(self, store: Redis):
        self.store = store

    def add_score(self, user_id: str, delta: int) -> int:
        # INCRBY treats a missing key as zero, so lazy creation and the
        # addition happen in one atomic step.
        return int(self.store.incrby(keys.user_score_key(user_id), int(delta)))

    def get_score(self, user_id: str) -> int:
        key = keys.user_score_key(user_id)
        self.store.set(key, 0, nx=True)
        return int(self.store.get(key) or 0)

    def all_scores(self):
        """(user_id, score) for every scored user, each user once."""
        score_keys = sorted(set(self.store.scan_iter(match=keys.USER_SCORE_PATTERN)))
        if not score_keys:
            return []
        values = self.store.mget(score_keys)
        return [
            (keys.user_id_from_score_key(key), int(value))
            for key, value in zip(score_keys, values)
            if value is not None
        ]

    def reset_all(self, pipe=None) -> None:
        target = pipe if pipe is not None else self.store
        score_keys = list(self.store.scan_iter(match=keys.USER_SCORE_PATTERN))
        if score_keys:
            target.delete(*score_keys)
