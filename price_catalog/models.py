"""Catalog data model.

Items and categories are immutable dataclasses derived from the content
service; `CategoryRecord` validates the raw category collection on its way in.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from pydantic import BaseModel, field_validator

DEFAULT_CATEGORY_TITLE = "Không có tên"


@dataclass(frozen=True)
class ServicePriceItem:
    """One priced procedure extracted from a category table."""

    id: int
    name: str
    description: str
    price: int  # Whole VND, never negative
    category_id: int
    category_name: str
    row_index: int = 0  # Position of the source row in its table
    is_emergency: bool = False

    @property
    def key(self) -> Tuple[int, int]:
        """Stable identity; `id` alone is not unique across categories."""
        return (self.category_id, self.row_index)


@dataclass(frozen=True)
class Category:
    """A price category, unique by `id`."""

    id: int
    name: str
    item_count: int = 0


def _rendered(value: Any) -> Optional[str]:
    # WordPress wraps title/content as {"rendered": "..."}
    if isinstance(value, dict):
        value = value.get("rendered")
    return value


class CategoryRecord(BaseModel):
    """One category page as handed over by the content service."""

    id: int
    title: str = DEFAULT_CATEGORY_TITLE
    content: str = ""

    @field_validator("title", mode="before")
    @classmethod
    def unwrap_title(cls, v):
        v = _rendered(v)
        if v is None or not str(v).strip():
            return DEFAULT_CATEGORY_TITLE
        return str(v).strip()

    @field_validator("content", mode="before")
    @classmethod
    def unwrap_content(cls, v):
        v = _rendered(v)
        return "" if v is None else str(v)
