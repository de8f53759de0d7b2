"""Relevance-ranked search over catalog items.

Opt-in alternative to the plain substring filter. Every query word must match
the item somewhere (name, description or category name, accent-insensitive).
Items are then ordered by score, with emergency services boosted.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from price_catalog.config import settings
from price_catalog.ingest.category_index import collation_key, fold_text
from price_catalog.models import ServicePriceItem

logger = logging.getLogger(__name__)

# Per-word weights for exact (substring) matches
NAME_PREFIX_WEIGHT = 1.0
NAME_WEIGHT = 0.8
DESCRIPTION_WEIGHT = 0.6
CATEGORY_WEIGHT = 0.4

# Weights for the subsequence fallback when a word has no exact match
FUZZY_NAME_WEIGHT = 0.5
FUZZY_DESCRIPTION_WEIGHT = 0.3
FUZZY_CATEGORY_WEIGHT = 0.2

EMERGENCY_BOOST = 1.2


@dataclass(frozen=True)
class ScoredItem:
    item: ServicePriceItem
    score: float


def fuzzy_score(search: str, target: str) -> float:
    """
    Fraction of `search` characters found in order inside `target`.

    "glcse" vs "glucose" -> 1.0, "xyz" vs "glucose" -> 0.0.
    """
    if not search or not target:
        return 0.0
    if search == target:
        return 1.0

    matched = 0
    for ch in target:
        if matched == len(search):
            break
        if ch == search[matched]:
            matched += 1
    return matched / len(search)


def _word_score(word: str, name: str, description: str, category: str, fuzzy: bool) -> float:
    score = 0.0
    if word in name:
        score += NAME_PREFIX_WEIGHT if name.startswith(word) else NAME_WEIGHT
    if word in description:
        score += DESCRIPTION_WEIGHT
    if word in category:
        score += CATEGORY_WEIGHT

    if fuzzy and score == 0:
        score = (
            fuzzy_score(word, name) * FUZZY_NAME_WEIGHT
            + fuzzy_score(word, description) * FUZZY_DESCRIPTION_WEIGHT
            + fuzzy_score(word, category) * FUZZY_CATEGORY_WEIGHT
        )
    return score


def score_item(
    item: ServicePriceItem,
    words: List[str],
    fuzzy: bool = True,
    prioritize_emergency: bool = True,
) -> float:
    """Average per-word score; 0 unless every word matched."""
    if not words:
        return 0.0

    name = fold_text(item.name)
    description = fold_text(item.description)
    category = fold_text(item.category_name)

    total = 0.0
    for word in words:
        word_score = _word_score(word, name, description, category, fuzzy)
        if word_score <= 0:
            return 0.0
        total += word_score

    score = total / len(words)
    if prioritize_emergency and item.is_emergency:
        score *= EMERGENCY_BOOST
    return score


def rank_items(
    items: Iterable[ServicePriceItem],
    query: str,
    fuzzy: Optional[bool] = None,
    prioritize_emergency: Optional[bool] = None,
    min_score: Optional[float] = None,
) -> List[ServicePriceItem]:
    """
    Filter and order items by relevance to `query`.

    Args:
        items: Candidate items (already category-filtered)
        query: Free-text query; words are matched independently
        fuzzy: Fall back to subsequence matching for words with no exact hit
        prioritize_emergency: Boost emergency service scores
        min_score: Items scoring below this are dropped

    Returns:
        Matching items, best first; ties go to emergency services, then name
        order. A blank query returns the items unchanged.
    """
    items = list(items)
    words = fold_text(query or "").split()
    if not words:
        return items

    fuzzy = settings.fuzzy_search if fuzzy is None else fuzzy
    if prioritize_emergency is None:
        prioritize_emergency = settings.prioritize_emergency
    min_score = settings.ranked_min_score if min_score is None else min_score

    scored = [
        ScoredItem(item=item, score=score_item(item, words, fuzzy, prioritize_emergency))
        for item in items
    ]
    matches = [s for s in scored if s.score > 0 and s.score >= min_score]

    # Scores within 0.01 of each other count as a tie
    matches.sort(
        key=lambda s: (
            -round(s.score, 2),
            not s.item.is_emergency,
            collation_key(s.item.name),
        )
    )

    logger.debug(f"Ranked search '{query}': {len(matches)} of {len(items)} items")
    return [s.item for s in matches]
