"""Search and category filtering over catalog items."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from price_catalog.config import settings
from price_catalog.ingest.category_index import fold_text
from price_catalog.models import ServicePriceItem
from price_catalog.search.ranking import rank_items

logger = logging.getLogger(__name__)

ItemPredicate = Callable[[ServicePriceItem], bool]


@dataclass(frozen=True)
class FilterCriteria:
    """Effective filter inputs. `category_id=None` means all categories."""

    search_term: str = ""
    category_id: Optional[int] = None


def normalize_query(query: Optional[str], max_length: Optional[int] = None) -> str:
    """Normalize search query by trimming and collapsing whitespace."""
    if not query:
        return ""

    normalized = re.sub(r"\s+", " ", query.strip())

    max_length = max_length or settings.max_query_length
    if len(normalized) > max_length:
        logger.warning(f"Query too long, truncating: {len(normalized)} chars")
        normalized = normalized[:max_length]

    return normalized


def build_predicate(
    criteria: FilterCriteria,
    fold_diacritics: Optional[bool] = None,
) -> ItemPredicate:
    """
    Combine the category and search predicates with AND.

    The search term matches case-insensitively as a substring of the item
    name or description.
    """
    if fold_diacritics is None:
        fold_diacritics = settings.fold_diacritics

    category_id = criteria.category_id
    term = normalize_query(criteria.search_term)

    if fold_diacritics:
        casefold = fold_text
    else:
        casefold = str.casefold
    needle = casefold(term)

    def predicate(item: ServicePriceItem) -> bool:
        if category_id is not None and item.category_id != category_id:
            return False
        if not needle:
            return True
        return needle in casefold(item.name) or needle in casefold(item.description)

    return predicate


def filter_items(
    items: Iterable[ServicePriceItem],
    criteria: FilterCriteria,
    fold_diacritics: Optional[bool] = None,
    ranked: Optional[bool] = None,
) -> List[ServicePriceItem]:
    """
    Return the items matching `criteria`.

    By default the result keeps the original item order. With `ranked`, the
    search term goes through relevance ranking instead of the substring
    match and the result is ordered best first.
    """
    if ranked is None:
        ranked = settings.ranked_search

    if not ranked:
        predicate = build_predicate(criteria, fold_diacritics=fold_diacritics)
        return [item for item in items if predicate(item)]

    in_category = build_predicate(FilterCriteria(category_id=criteria.category_id))
    return rank_items(
        [item for item in items if in_category(item)],
        normalize_query(criteria.search_term),
    )
