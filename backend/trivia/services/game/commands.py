import logging
import re
from typing import Any, Mapping, Optional

from .leaderboard import Leaderboard
from .rounds import RoundManager
from .scoring import ScoreLedger, currency_format
from .settings import GameSettings

ANSWER = re.compile(r'!a\s+')
START = re.compile(r'!t$', re.IGNORECASE)
HINT = re.compile(r'!h$', re.IGNORECASE)
SKIP = re.compile(r'!skip$', re.IGNORECASE)
TOP = re.compile(r'!top$', re.IGNORECASE)
RESET = re.compile(r'reset$', re.IGNORECASE)
HELP = re.compile(r'help$', re.IGNORECASE)
JEOPARDY_ME = re.compile(r'jeopardy me', re.IGNORECASE)
MY_SCORE = re.compile(r'my score$', re.IGNORECASE)
LEADERBOARD = re.compile(r'show (me\s+)?(the\s+)?leaderboard$', re.IGNORECASE)
LOSERBOARD = re.compile(r'show (me\s+)?(the\s+)?loserboard$', re.IGNORECASE)

INVALID_TOKEN = 'Invalid token'
BLACKLISTED = "Sorry, can't play in this channel."


class TriviaBot:
    """Routes one inbound chat command to the game services and returns the reply text."""

    def __init__(self, settings: GameSettings, rounds: RoundManager, ledger: ScoreLedger,
                 leaderboard: Leaderboard, directory, logger: Optional[logging.Logger] = None):
        self.settings = settings
        self.rounds = rounds
        self.ledger = ledger
        self.leaderboard = leaderboard
        self.directory = directory
        self.logger = logger or logging.getLogger(__name__)

    def handle(self, params: Mapping[str, Any]) -> str:
        if params.get('token') != self.settings.webhook_token:
            return INVALID_TOKEN
        if self.settings.is_channel_blacklisted(params.get('channel_name')):
            return BLACKLISTED

        channel_id = params.get('channel_id') or ''
        user_id = params.get('user_id') or ''
        text = (params.get('text') or '').strip()
        timestamp = float(params.get('timestamp') or 0)

        answer = ANSWER.search(text)
        if answer:
            return self.rounds.submit_answer(channel_id, user_id, text[answer.end():], timestamp)
        if START.search(text) or JEOPARDY_ME.search(text):
            return self.rounds.start_or_repeat(channel_id, timestamp)
        if HINT.search(text):
            return self.rounds.request_hint(channel_id, timestamp)
        if SKIP.search(text):
            reply = self.rounds.skip(channel_id)
            if not reply:
                # Another request already closed this round and chains its own start
                return ''
            return reply + self.rounds.start_or_repeat(channel_id, timestamp)
        if TOP.search(text) or LEADERBOARD.search(text):
            return self.leaderboard.top()
        if RESET.search(text):
            return self.reset(channel_id, params.get('user_name'))
        if HELP.search(text):
            return self.help_text()
        if MY_SCORE.search(text):
            score = self.ledger.get_score(user_id)
            return f"{self.directory.display_name(user_id)}, your score is {currency_format(score)}."
        if LOSERBOARD.search(text):
            return self.leaderboard.bottom()
        return ''

    def reset(self, channel_id: str, user_name: Optional[str]) -> str:
        if not self.settings.is_admin(user_name):
            self.logger.info(f"[admin] user={user_name} tried reset without admin privileges")
            return ''
        reply = self.leaderboard.final() + '\n\nStarting a new round of jeopardy'
        self.rounds.reset_channel(channel_id)
        return reply

    def help_text(self) -> str:
        window = self.settings.seconds_to_answer
        bot = self.settings.bot_username or 'trebekbot'
        return '\n'.join([
            'Type `!t` to start a new round of Slack Jeopardy. I will pick the category and price. '
            'Anyone in the channel can respond.',
            f"Type `!a` to respond to the active question. You have {window} seconds to answer.",
            'Type `!h` to get a one-letter hint. This reduces the value of the question by $100.',
            'Type `!skip` to skip the current question, see the answer, and get a new question.',
            'Type `!top` to see the top scores.',
            f"Type `{bot} what is my score` to see your current score.",
            f"Type `{bot} show the loserboard` to see the bottom scores.",
        ])
