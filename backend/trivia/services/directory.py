import json
import logging
from typing import Dict, Optional

import requests
from redis import Redis

from trivia.services.game import keys

NAME_CACHE_TTL_SEC = 60 * 60 * 24 * 30
PLACEHOLDER_NAME = 'Sean Connery'
USERS_LIST_URL = 'https://slack.com/api/users.list'


class UserDirectory:
    """Display names for Slack user ids, cached in redis for a month.

    Outgoing webhooks only carry the user id, so names come from the Slack
    users.list API. Any lookup failure yields a placeholder name instead of
    an error.
    """

    def __init__(self, store: Redis, api_token: Optional[str], timeout: int = 10,
                 logger: Optional[logging.Logger] = None):
        self.store = store
        self.api_token = api_token
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    def display_name(self, user_id: str, use_real_name: bool = False) -> str:
        key = keys.user_names_key(user_id)
        cached = self.store.get(key)
        if cached is None:
            names = self.lookup_names(user_id)
            self.store.setex(key, NAME_CACHE_TTL_SEC, json.dumps(names))
        else:
            names = json.loads(cached)
        preferred = names.get('real_name') if use_real_name else names.get('first_name')
        return preferred or names.get('name') or PLACEHOLDER_NAME

    def lookup_names(self, user_id: str) -> Dict[str, str]:
        fallback = {'id': user_id, 'name': PLACEHOLDER_NAME}
        if not self.api_token:
            self.logger.warning(f"[directory] no api token, using placeholder for user={user_id}")
            return fallback
        try:
            resp = requests.get(USERS_LIST_URL, params={'token': self.api_token}, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            self.logger.warning(f"[directory] lookup failed user={user_id}: {exc}")
            return fallback
        if not isinstance(payload, dict):
            self.logger.warning(f"[directory] unexpected payload user={user_id}: {type(payload).__name__}")
            return fallback
        if not payload.get('ok'):
            self.logger.warning(f"[directory] slack error user={user_id}: {payload.get('error')}")
            return fallback
        members = payload.get('members') or []
        user = next((m for m in members if isinstance(m, dict) and m.get('id') == user_id), None)
        if user is None:
            self.logger.warning(f"[directory] unknown user={user_id}")
            return fallback
        names = {'id': user_id, 'name': user.get('name') or PLACEHOLDER_NAME}
        profile = user.get('profile') or {}
        for field in ('real_name', 'first_name', 'last_name'):
            if profile.get(field):
                names[field] = profile[field]
        return names
