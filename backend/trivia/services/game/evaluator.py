import logging
from dataclasses import dataclass
from typing import Optional

from .similarity import white_similarity
from .text import is_question_format, normalize_canonical, normalize_guess


@dataclass(frozen=True)
class Judgement:
    correct: bool
    canonical: str
    guess: str
    similarity: float
    question_format: bool


def judge_answer(canonical_answer: str, raw_guess: str, similarity_threshold: float) -> Judgement:
    """Normalize both sides; an exact match wins outright, otherwise fall back to fuzzy matching.

    Question phrasing ("what is ...") is reported but never required.
    """
    canonical = normalize_canonical(canonical_answer)
    guess = normalize_guess(raw_guess)
    similarity = white_similarity(canonical, guess)
    correct = bool(guess) and (canonical == guess or similarity >= similarity_threshold)
    return Judgement(
        correct=correct,
        canonical=canonical,
        guess=guess,
        similarity=similarity,
        question_format=is_question_format(raw_guess),
    )


def is_correct(canonical_answer: str, raw_guess: str, similarity_threshold: float,
               logger: Optional[logging.Logger] = None) -> bool:
    judgement = judge_answer(canonical_answer, raw_guess, similarity_threshold)
    if logger is not None:
        logger.info(
            f"[answer] correct_answer={judgement.canonical!r} user_answer={judgement.guess!r} "
            f"similarity={judgement.similarity:.3f} question_format={judgement.question_format} "
            f"result={judgement.correct}"
        )
    return judgement.correct
