"""
Similarity scoring between a title query and provider candidates.

Scores are integers clamped to [0, 100]:
- Base metric: Sorensen-Dice over character bigrams, case-insensitive,
  symmetric in its arguments.
- Prefix bonus path: Jaro-Winkler similarity, which rewards a common opening.
  It is only taken when the query and the candidate agree on the year, so the
  scoring is intentionally asymmetric toward matching-year pairs.
- Year penalty: both years known and more than 2 years apart costs 20 points,
  floored at 0.
- Cross-script fallback: a title written in another script is transliterated
  toward the other side before being compared again; the best variant wins.

Scoring is deterministic for reproducible cascades.
"""

from collections import Counter
from typing import Iterable, Optional

from rapidfuzz.distance import JaroWinkler

from kinosync.core.entities import Candidate, MediaRecord
from kinosync.services.transliteration import detect_script, transliterate
from kinosync.utils.helpers import collapse_non_alnum

YEAR_TOLERANCE = 2
YEAR_PENALTY = 20


def _bigrams(text: str) -> Counter:
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


def _dice_similarity(first: str, second: str) -> float:
    """
    Sorensen-Dice coefficient over bigram multisets (0.0 - 1.0).

    Strings too short to have a bigram only match when identical.
    """
    if first == second:
        return 1.0
    first_bigrams = _bigrams(first)
    second_bigrams = _bigrams(second)
    total = sum(first_bigrams.values()) + sum(second_bigrams.values())
    if total == 0:
        return 0.0
    common = sum((first_bigrams & second_bigrams).values())
    return 2.0 * common / total


def clamp_score(score: float) -> int:
    return max(0, min(100, int(score)))


def compute_similarity_score(first: str, second: str, prefer_prefix: bool = False) -> int:
    """
    Similarity of two titles after normalization (0-100).

    Both titles are NFC-normalized, non-alphanumeric runs collapsed to a
    single space and compared case-insensitively.

    Args:
        first: First title
        second: Second title
        prefer_prefix: Use Jaro-Winkler to reward a shared opening phrase

    Returns:
        Integer score, 100 for titles identical after normalization
    """
    first = collapse_non_alnum(first).lower()
    second = collapse_non_alnum(second).lower()
    if first == second:
        return 100 if first else 0

    if prefer_prefix:
        similarity = JaroWinkler.normalized_similarity(first, second)
    else:
        similarity = _dice_similarity(first, second)
    return clamp_score(similarity * 100)


def apply_year_penalty(score: int, year_a: str, year_b: str) -> int:
    """
    Subtract YEAR_PENALTY when both years are known and too far apart.

    The result never goes below 0. Unknown or unparsable years never
    penalize.
    """
    if not (year_a and year_b and year_a.isdigit() and year_b.isdigit()):
        return score
    if abs(int(year_a) - int(year_b)) > YEAR_TOLERANCE:
        return max(0, score - YEAR_PENALTY)
    return score


def _cross_script_score(first: str, second: str, prefer_prefix: bool) -> int:
    """Best score after transliterating each title toward the other's script."""
    first_script = detect_script(first)
    second_script = detect_script(second)
    if first_script is second_script:
        return 0
    return max(
        compute_similarity_score(transliterate(first, second_script), second, prefer_prefix),
        compute_similarity_score(first, transliterate(second, first_script), prefer_prefix),
    )


def score_titles(
    first: str,
    second: str,
    year_a: str = "",
    year_b: str = "",
    prefer_prefix_bonus: bool = False,
) -> int:
    """
    Full score between two titles: base metric, cross-script fallback, year penalty.

    Args:
        first: Query title
        second: Candidate title
        year_a: Query year ("" when unknown)
        year_b: Candidate year ("" when unknown)
        prefer_prefix_bonus: Use the prefix-weighted metric

    Returns:
        Score clamped to [0, 100]
    """
    score = compute_similarity_score(first, second, prefer_prefix_bonus)
    if score < 100:
        score = max(score, _cross_script_score(first, second, prefer_prefix_bonus))
    return clamp_score(apply_year_penalty(score, year_a, year_b))


def score_candidate(query: str, year: str, record: MediaRecord) -> int:
    """
    Score a provider record against a query title and year.

    The query is compared to every title of the record (localized, original,
    alternative) and the best comparison is kept. When both years are known
    but differ, each side gets its year appended so that remakes with the
    same title do not reach 100.

    Returns:
        Score clamped to [0, 100], 0 for a record without any title
    """
    titles = record.titles()
    if not titles:
        return 0

    prefer_prefix = year == record.year
    query_text = query
    if year and record.year and year != record.year:
        query_text = f"{query} ({year})"
        titles = [f"{title} ({record.year})" for title in titles]

    best = max(
        compute_similarity_score(title, query_text, prefer_prefix)
        for title in titles
    )
    if best < 100:
        best = max(
            best,
            max(_cross_script_score(title, query_text, prefer_prefix) for title in titles),
        )
    return clamp_score(apply_year_penalty(best, year, record.year))


def best_candidate(
    query: str, year: str, records: Iterable[MediaRecord]
) -> Optional[Candidate]:
    """
    Best scoring record of one page of results.

    Ties keep the first record, in provider order. Scanning stops at a
    perfect score.
    """
    best: Optional[Candidate] = None
    for record in records:
        score = score_candidate(query, year, record)
        if best is None or score > best.score:
            best = Candidate(record=record, score=score)
        if score == 100:
            break
    return best
