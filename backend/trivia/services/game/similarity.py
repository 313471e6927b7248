from typing import List


def word_letter_pairs(text: str) -> List[str]:
    """Adjacent character pairs of every whitespace-separated word, uppercased."""
    pairs: List[str] = []
    for word in text.upper().split():
        pairs.extend(word[i:i + 2] for i in range(len(word) - 1))
    return pairs


def white_similarity(first: str, second: str) -> float:
    """Simon White's letter-pair similarity, in [0, 1].

    Twice the size of the shared pair multiset over the total pair count.
    Strings with no pairs at all (empty or single letters) only match
    themselves.
    """
    pairs1 = word_letter_pairs(first)
    pairs2 = word_letter_pairs(second)
    union = len(pairs1) + len(pairs2)
    if union == 0:
        return 1.0 if first.upper() == second.upper() else 0.0
    intersection = 0
    for pair in pairs1:
        try:
            pairs2.remove(pair)
        except ValueError:
            continue
        intersection += 1
    return (2.0 * intersection) / union
