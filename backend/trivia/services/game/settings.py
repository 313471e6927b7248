from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple


def _split_list(raw: Optional[str], strip_chars: str = '') -> Tuple[str, ...]:
    if not raw:
        return ()
    items = []
    for part in raw.split(','):
        part = part.replace(strip_chars, '').strip() if strip_chars else part.strip()
        if part:
            items.append(part)
    return tuple(items)


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class GameSettings:
    """Runtime tunables, assembled once by the application factory."""

    seconds_to_answer: int = 30
    similarity_threshold: float = 0.9
    webhook_token: Optional[str] = None
    channel_blacklist: Tuple[str, ...] = ()
    admin_users: Tuple[str, ...] = ()
    bot_username: Optional[str] = None
    bot_icon: Optional[str] = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'GameSettings':
        return cls(
            seconds_to_answer=_as_int(config.get('SECONDS_TO_ANSWER'), 30),
            similarity_threshold=_as_float(config.get('SIMILARITY_THRESHOLD'), 0.9),
            webhook_token=config.get('OUTGOING_WEBHOOK_TOKEN'),
            channel_blacklist=_split_list(config.get('CHANNEL_BLACKLIST'), strip_chars='#'),
            admin_users=_split_list(config.get('ADMIN_USERS')),
            bot_username=config.get('BOT_USERNAME'),
            bot_icon=config.get('BOT_ICON'),
        )

    def is_channel_blacklisted(self, channel_name: Optional[str]) -> bool:
        return bool(channel_name) and channel_name in self.channel_blacklist

    def is_admin(self, user_name: Optional[str]) -> bool:
        return bool(user_name) and user_name in self.admin_users
