"""Category index built from the source category collection."""

import unicodedata
from collections import Counter
from typing import Dict, Iterable, List, Optional, Set, Tuple

from price_catalog.models import Category, CategoryRecord, ServicePriceItem


def fold_text(text: str) -> str:
    """Lowercase and strip Vietnamese diacritics ("Đường" -> "duong")."""
    decomposed = unicodedata.normalize("NFD", text.casefold())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("đ", "d")


def collation_key(name: str) -> Tuple[str, str, str]:
    """Sort key that keeps accented letters next to their base letter."""
    return (fold_text(name), name.casefold(), name)


def build_category_index(
    records: Iterable[CategoryRecord],
    items: Optional[Iterable[ServicePriceItem]] = None,
    emergency_first: bool = False,
) -> List[Category]:
    """
    Build the deduplicated, name-sorted category list.

    Args:
        records: Source categories; the first record seen for an id wins
        items: Optional extracted items; when given, item counts are filled in
        emergency_first: Put categories holding emergency services ahead of
            the rest (each group still sorted by name)

    Returns:
        Categories sorted by name, including categories with no items
    """
    seen: Dict[int, str] = {}
    for record in records:
        if record.id not in seen:
            seen[record.id] = record.title

    counts: Counter = Counter()
    emergency_ids: Set[int] = set()
    for item in items or []:
        counts[item.category_id] += 1
        if item.is_emergency:
            emergency_ids.add(item.category_id)

    categories = [
        Category(id=category_id, name=name, item_count=counts.get(category_id, 0))
        for category_id, name in seen.items()
    ]
    if emergency_first:
        categories.sort(key=lambda c: (c.id not in emergency_ids, collation_key(c.name)))
    else:
        categories.sort(key=lambda c: collation_key(c.name))
    return categories
