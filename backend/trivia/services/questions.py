import logging
from typing import Any, Dict, Optional

import requests


class QuestionSourceError(Exception):
    """No usable question could be fetched."""


def is_usable(question: Dict[str, Any]) -> bool:
    """Some records have no question text, some were flagged invalid upstream."""
    text = question.get('question')
    if text is None or not str(text).strip():
        return False
    invalid_count = question.get('invalid_count')
    try:
        return invalid_count is None or int(invalid_count) <= 0
    except (TypeError, ValueError):
        return False


class QuestionSource:
    """Random clues from a jService-compatible HTTP API."""

    def __init__(self, url: str, timeout: int = 10, max_attempts: int = 5,
                 logger: Optional[logging.Logger] = None):
        self.url = url
        self.timeout = timeout
        self.max_attempts = max(1, int(max_attempts))
        self.logger = logger or logging.getLogger(__name__)

    def _fetch_once(self) -> Dict[str, Any]:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise QuestionSourceError(f"question source request failed: {exc}") from exc
        if isinstance(payload, list):
            payload = payload[0] if payload else {}
        if not isinstance(payload, dict):
            raise QuestionSourceError(f"unexpected question payload: {payload!r}")
        return payload

    def fetch_random_question(self) -> Dict[str, Any]:
        for attempt in range(1, self.max_attempts + 1):
            question = self._fetch_once()
            if is_usable(question):
                self.logger.info(
                    f"[question] id={question.get('id')} attempt={attempt} "
                    f"question={question.get('question')!r} answer={question.get('answer')!r} value={question.get('value')}"
                )
                return question
            self.logger.info(f"[question-retry] id={question.get('id')} attempt={attempt} unusable")
        raise QuestionSourceError(f"no usable question after {self.max_attempts} attempts")
