"""Per-channel round lifecycle.

A channel is either idle or has exactly one active round. Two short-lived
"shush" flags sit on top of that: one armed when a question is announced
(absorbs duplicate start requests), one armed when a round is resolved
(absorbs late answers racing the winner). All of it lives in redis; every
multi-key transition goes through a single MULTI/EXEC.
"""

import json
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from redis import Redis

from . import keys
from .evaluator import is_correct
from .scoring import ScoreLedger, adjusted_points, currency_format
from .settings import GameSettings
from .text import sanitize_answer

QUESTION_SHUSH_SEC = 10
ANSWER_SHUSH_SEC = 5
DEFAULT_VALUE = 200
NO_ACTIVE_QUESTION = 'There is no active question. Type "!t" to get a question.'
NOTHING_TO_SKIP = "There was no active question. Here's a new one:\n"


class RoundPhase(str, Enum):
    IDLE = 'idle'
    ACTIVE = 'active'


class RoundEvent(str, Enum):
    START = 'start'
    HINT = 'hint'
    RESOLVE = 'resolve'
    RESET = 'reset'


TRANSITIONS = {
    (RoundPhase.IDLE, RoundEvent.START): RoundPhase.ACTIVE,
    (RoundPhase.ACTIVE, RoundEvent.HINT): RoundPhase.ACTIVE,
    (RoundPhase.ACTIVE, RoundEvent.RESOLVE): RoundPhase.IDLE,
    (RoundPhase.IDLE, RoundEvent.RESET): RoundPhase.IDLE,
    (RoundPhase.ACTIVE, RoundEvent.RESET): RoundPhase.IDLE,
}


class InvalidTransition(Exception):
    def __init__(self, phase: RoundPhase, event: RoundEvent):
        super().__init__(f"cannot {event.value} a round while {phase.value}")
        self.phase = phase
        self.event = event


def accepts(phase: RoundPhase, event: RoundEvent) -> bool:
    return (phase, event) in TRANSITIONS


def transition(phase: RoundPhase, event: RoundEvent) -> RoundPhase:
    try:
        return TRANSITIONS[(phase, event)]
    except KeyError:
        raise InvalidTransition(phase, event) from None


@dataclass(frozen=True)
class Round:
    id: Any
    category: str
    question: str
    answer: str
    value: int
    expiration: float

    @classmethod
    def from_question(cls, raw: Dict[str, Any], now: float, seconds_to_answer: int) -> 'Round':
        """Build a round from a question source record, defaulting the value and cleaning the answer."""
        category = raw.get('category') or {}
        value = raw.get('value')
        return cls(
            id=raw.get('id'),
            category=category.get('title', '') if isinstance(category, dict) else str(category),
            question=(raw.get('question') or '').strip(),
            answer=sanitize_answer(raw.get('answer') or ''),
            value=int(value) if value is not None else DEFAULT_VALUE,
            expiration=float(now) + float(seconds_to_answer),
        )

    @classmethod
    def from_json(cls, payload: str) -> 'Round':
        data = json.loads(payload)
        return cls(
            id=data['id'],
            category=data['category'],
            question=data['question'],
            answer=data['answer'],
            value=int(data['value']),
            expiration=float(data['expiration']),
        )

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    def display(self) -> str:
        return f"The category is `{self.category}` for {currency_format(self.value)}: `{self.question}`"

    def hint(self, hint_count: int) -> str:
        revealed = self.answer[:hint_count].ljust(len(self.answer), '.')
        return f"{revealed} (hints used: {hint_count})"

    def is_expired(self, timestamp: float) -> bool:
        return float(timestamp) > self.expiration


@dataclass(frozen=True)
class ChannelState:
    channel_id: str
    round: Optional[Round]
    hint_count: int
    question_shushed: bool
    answer_shushed: bool

    @property
    def phase(self) -> RoundPhase:
        return RoundPhase.ACTIVE if self.round is not None else RoundPhase.IDLE


class RoundManager:
    """Start, hint, answer, skip and resolve rounds for any channel."""

    def __init__(self, store: Redis, questions, ledger: ScoreLedger, directory,
                 settings: GameSettings, logger: Optional[logging.Logger] = None):
        self.store = store
        self.questions = questions
        self.ledger = ledger
        self.directory = directory
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)

    def load_state(self, channel_id: str) -> ChannelState:
        pipe = self.store.pipeline(transaction=True)
        pipe.get(keys.round_key(channel_id))
        pipe.get(keys.hint_count_key(channel_id))
        pipe.exists(keys.question_shush_key(channel_id))
        pipe.exists(keys.answer_shush_key(channel_id))
        payload, hint_count, question_shushed, answer_shushed = pipe.execute()
        return ChannelState(
            channel_id=channel_id,
            round=Round.from_json(payload) if payload else None,
            hint_count=int(hint_count or 0),
            question_shushed=bool(question_shushed),
            answer_shushed=bool(answer_shushed),
        )

    def start_or_repeat(self, channel_id: str, now: float) -> str:
        state = self.load_state(channel_id)
        if state.question_shushed:
            self.logger.info(f"[round-shushed] channel={channel_id}")
            return ''
        prefix = ''
        phase = state.phase
        if state.round is not None and state.round.is_expired(now):
            # An expired round nobody answered is closed before a new one starts
            if self.claim_round(channel_id, state.round) is not None:
                self.logger.info(f"[round-expired] channel={channel_id} id={state.round.id}")
                prefix = f"Time's up! The correct answer was `{state.round.answer}`.\n"
            phase = RoundPhase.IDLE
        if not accepts(phase, RoundEvent.START):
            self.logger.info(f"[round-repeat] channel={channel_id} id={state.round.id}")
            return state.round.display()

        raw = self.questions.fetch_random_question()
        new_round = Round.from_question(raw, now, self.settings.seconds_to_answer)
        if not self._create(channel_id, new_round):
            self.logger.info(f"[round-race-lost] channel={channel_id} discarded id={new_round.id}")
            return prefix
        phase = transition(phase, RoundEvent.START)
        self.logger.info(
            f"[round-start] channel={channel_id} phase={phase.value} id={new_round.id} "
            f"category={new_round.category!r} value={new_round.value} expiration={new_round.expiration}"
        )
        return prefix + new_round.display()

    def _create(self, channel_id: str, new_round: Round) -> bool:
        """Persist the round and arm the announcement shush, only if no round exists yet."""
        round_key = keys.round_key(channel_id)

        def _write(pipe) -> bool:
            if pipe.exists(round_key):
                return False
            pipe.multi()
            pipe.set(round_key, new_round.to_json())
            pipe.delete(keys.hint_count_key(channel_id))
            pipe.setex(keys.question_shush_key(channel_id), QUESTION_SHUSH_SEC, 'true')
            return True

        return self.store.transaction(_write, round_key, value_from_callable=True)

    def request_hint(self, channel_id: str, now: Optional[float] = None) -> str:
        state = self.load_state(channel_id)
        if not accepts(state.phase, RoundEvent.HINT):
            return '' if state.answer_shushed else NO_ACTIVE_QUESTION
        current = state.round
        if now is not None and current.is_expired(now):
            if self.claim_round(channel_id, current) is None:
                return ''
            self.logger.info(f"[round-expired] channel={channel_id} id={current.id}")
            return f"Time's up! The correct answer was `{current.answer}`."

        round_key = keys.round_key(channel_id)
        hint_key = keys.hint_count_key(channel_id)

        def _bump(pipe) -> None:
            payload = pipe.get(round_key)
            if payload is None or Round.from_json(payload) != current:
                return
            pipe.multi()
            pipe.incr(hint_key)

        # Empty result: the round was resolved or replaced after it was read
        results = self.store.transaction(_bump, round_key)
        if not results:
            return ''
        hint_count = int(results[0])
        self.logger.info(f"[hint] channel={channel_id} id={current.id} hint_count={hint_count}")
        return current.hint(hint_count)

    def skip(self, channel_id: str) -> str:
        """Reveal the answer and close the round. Callers chain a fresh start afterwards.

        Returns an empty string when another request closed the round first.
        """
        state = self.load_state(channel_id)
        if state.round is None:
            return NOTHING_TO_SKIP
        if self.claim_round(channel_id, state.round) is None:
            self.logger.info(f"[skip-late] channel={channel_id} id={state.round.id}")
            return ''
        return f"The answer is `{state.round.answer}`.\n"

    def resolve_round(self, channel_id: str) -> None:
        self._resolve(channel_id, expected=None)

    def claim_round(self, channel_id: str, expected: Round) -> Optional[int]:
        """Resolve the round only if it is still ``expected``.

        Returns the hint count the round ended with, or None when another
        request resolved or replaced it first.
        """
        return self._resolve(channel_id, expected=expected)

    def _resolve(self, channel_id: str, expected: Optional[Round]) -> Optional[int]:
        round_key = keys.round_key(channel_id)
        hint_key = keys.hint_count_key(channel_id)

        def _write(pipe) -> Optional[int]:
            payload = pipe.get(round_key)
            if expected is not None and (payload is None or Round.from_json(payload) != expected):
                return None
            hint_count = int(pipe.get(hint_key) or 0)
            pipe.multi()
            pipe.delete(round_key, hint_key, keys.question_shush_key(channel_id))
            pipe.setex(keys.answer_shush_key(channel_id), ANSWER_SHUSH_SEC, 'true')
            return hint_count

        hint_count = self.store.transaction(_write, round_key, hint_key, value_from_callable=True)
        if hint_count is not None:
            phase = transition(RoundPhase.ACTIVE, RoundEvent.RESOLVE)
            self.logger.info(f"[round-resolve] channel={channel_id} phase={phase.value} hint_count={hint_count}")
        return hint_count

    def submit_answer(self, channel_id: str, user_id: str, answer: str, timestamp: float) -> str:
        state = self.load_state(channel_id)
        if state.round is None:
            return '' if state.answer_shushed else NO_ACTIVE_QUESTION

        current = state.round
        correct = is_correct(current.answer, answer, self.settings.similarity_threshold, self.logger)
        window = self.settings.seconds_to_answer

        if current.is_expired(timestamp):
            if self.claim_round(channel_id, current) is None:
                return ''
            name = self.directory.display_name(user_id)
            if correct:
                return (f"That is correct, {name}, but time's up! "
                        f"Remember, you have {window} seconds to answer.")
            return (f"Time's up, {name}! Remember, you have {window} seconds to answer. "
                    f"The correct answer is `{current.answer}`.")

        if correct:
            hint_count = self.claim_round(channel_id, current)
            if hint_count is None:
                self.logger.info(f"[answer-late] channel={channel_id} user={user_id} id={current.id}")
                return ''
            points = adjusted_points(current.value, hint_count)
            score = self.ledger.add_score(user_id, points)
            earned = currency_format(points)
            if points != current.value:
                earned += f" (adjusted from: {currency_format(current.value)})"
            name = self.directory.display_name(user_id)
            return (f"That is correct, *{name}*. The answer was `{current.answer}`. "
                    f"You have earned {earned}. Your total score is {currency_format(score)}.")

        self.store.setex(keys.answered_key(channel_id, current.id, user_id), window, 'true')
        return f"{answer.strip()} is incorrect, {self.directory.display_name(user_id)}."

    def reset_channel(self, channel_id: str) -> None:
        """Drop the channel's round state, every user score and both cached boards."""
        phase = transition(self.load_state(channel_id).phase, RoundEvent.RESET)
        pipe = self.store.pipeline(transaction=True)
        pipe.delete(
            keys.round_key(channel_id),
            keys.hint_count_key(channel_id),
            keys.question_shush_key(channel_id),
            keys.answer_shush_key(channel_id),
            keys.LEADERBOARD_KEY,
            keys.LOSERBOARD_KEY,
        )
        answered = list(self.store.scan_iter(match=keys.answered_pattern(channel_id)))
        if answered:
            pipe.delete(*answered)
        self.ledger.reset_all(pipe)
        pipe.execute()
        self.logger.info(f"[admin] reset channel={channel_id} phase={phase.value}")
