"""Redis key layout. One namespace per entity, scoped by channel/user/round."""

LEADERBOARD_KEY = 'leaderboard:1'
LOSERBOARD_KEY = 'loserboard:1'
USER_SCORE_PATTERN = 'user_score:*'


def round_key(channel_id: str) -> str:
    return f"current_question:{channel_id}"


def hint_count_key(channel_id: str) -> str:
    return f"current_question:{channel_id}:hint_count"


def question_shush_key(channel_id: str) -> str:
    return f"shush:question:{channel_id}"


def answer_shush_key(channel_id: str) -> str:
    return f"shush:answer:{channel_id}"


def user_score_key(user_id: str) -> str:
    return f"user_score:{user_id}"


def user_id_from_score_key(key: str) -> str:
    return key[len('user_score:'):]


def answered_key(channel_id: str, round_id, user_id: str) -> str:
    return f"user_answer:{channel_id}:{round_id}:{user_id}"


def answered_pattern(channel_id: str) -> str:
    return f"user_answer:{channel_id}:*"


def user_names_key(user_id: str) -> str:
    return f"slack_user_names:2:{user_id}"
