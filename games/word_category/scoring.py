"""
Scoring for one category of the word category game.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from utils.helpers import first_letter, normalize_answer


@dataclass
class AnswerScore:
    """Score of a single participant's answer in one category."""
    participant_id: str
    answer: str
    points: int = 0
    valid_words: int = 0
    rejected: bool = False
    duplicate: bool = False
    wrong_letter: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'participant_id': self.participant_id,
            'answer': self.answer,
            'points': self.points,
            'valid_words': self.valid_words,
            'rejected': self.rejected,
            'duplicate': self.duplicate,
            'wrong_letter': self.wrong_letter
        }


def count_valid_words(answer: str, letter: str) -> int:
    """
    Count the words of an answer that start with the given letter.

    Leading punctuation of each word is ignored.

    Args:
        answer: Submitted answer
        letter: Required starting letter

    Returns:
        Number of matching words
    """
    target = (letter or '').lower()
    if not target:
        return 0
    return sum(1 for word in (answer or '').split() if first_letter(word) == target)


def starts_with_letter(answer: str, letter: str) -> bool:
    return first_letter(normalize_answer(answer)) == (letter or '').lower()


def score_category(submissions: Mapping[str, str], letter: str,
                   rejected: Optional[Iterable[str]] = None,
                   points_per_word: int = 10) -> List[AnswerScore]:
    """
    Score every submission for one category.

    Rejected and empty answers score nothing, as do answers that do not
    start with the category letter. Among the rest, an answer given by more
    than one participant (after trimming and case-folding) scores nothing for
    all of them. Everything else earns points for each word starting with
    the letter.

    Args:
        submissions: participant id -> answer
        letter: Category letter
        rejected: Participants whose answers were rejected by vote
        points_per_word: Points per valid word

    Returns:
        One AnswerScore per submission, in submission order
    """
    rejected = set(rejected or ())
    scores = []
    candidates = {}

    for participant_id, answer in submissions.items():
        score = AnswerScore(participant_id=participant_id, answer=answer)
        scores.append(score)

        if participant_id in rejected:
            score.rejected = True
            continue
        if not normalize_answer(answer):
            continue
        if not starts_with_letter(answer, letter):
            score.wrong_letter = True
            continue
        candidates[participant_id] = normalize_answer(answer)

    counts = Counter(candidates.values())
    for score in scores:
        normalized = candidates.get(score.participant_id)
        if normalized is None:
            continue
        if counts[normalized] > 1:
            score.duplicate = True
            continue
        score.valid_words = count_valid_words(score.answer, letter)
        score.points = score.valid_words * points_per_word

    return scores
