"""Answer text canonicalization.

Both the stored answer and the user's guess are pushed through the same kind
of cleanup before comparison: punctuation is dropped, leading articles are
removed and everything is lowercased. The user side additionally loses the
"what is ..." phrasing players are encouraged to use.
"""

import html
import re

_AMPERSAND = re.compile(r'\s+(&nbsp;|&)\s+', re.IGNORECASE)
_TAGS = re.compile(r'<[^>]*>')
_NON_WORD = re.compile(r'[^\w\s]')
_ARTICLE = re.compile(r'^(the|a|an) ', re.IGNORECASE)
_INTERROGATIVE = re.compile(r'^(what|whats|where|wheres|who|whos) ', re.IGNORECASE)
_COPULA = re.compile(r'^(is|are|was|were) ', re.IGNORECASE)
_TRAILING_QUESTION = re.compile(r'\?+$')
_WHITESPACE = re.compile(r'\s+')

# Abbreviations expanded on both sides so "mt everest" meets "mount everest"
ABBREVIATIONS = {
    'mt': 'mount',
    'ft': 'fort',
    'st': 'saint',
    'dr': 'doctor',
    'jr': 'junior',
    'sr': 'senior',
}


def sanitize_answer(raw: str) -> str:
    """Clean an answer as delivered by the question source: no markup, '&' spelled out."""
    text = html.unescape(raw or '')
    text = _TAGS.sub('', text).replace('\\', '')
    text = _AMPERSAND.sub(' and ', text)
    return _WHITESPACE.sub(' ', text).strip()


def _expand_abbreviations(text: str) -> str:
    return ' '.join(ABBREVIATIONS.get(word, word) for word in text.split())


def normalize_canonical(answer: str) -> str:
    text = _NON_WORD.sub('', answer or '')
    text = _ARTICLE.sub('', text)
    text = _WHITESPACE.sub(' ', text).strip().lower()
    return _expand_abbreviations(text)


def normalize_guess(guess: str) -> str:
    text = _AMPERSAND.sub(' and ', guess or '')
    text = _NON_WORD.sub('', text)
    text = _INTERROGATIVE.sub('', text)
    text = _COPULA.sub('', text)
    text = _ARTICLE.sub('', text)
    text = _TRAILING_QUESTION.sub('', text)
    text = _WHITESPACE.sub(' ', text).strip().lower()
    return _expand_abbreviations(text)


def is_question_format(guess: str) -> bool:
    """True when the guess starts with what/where/who. Question marks are optional."""
    return bool(_INTERROGATIVE.match(_NON_WORD.sub('', guess or '').strip()))
