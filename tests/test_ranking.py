"""Tests for relevance-ranked search."""

import pytest

from price_catalog.ingest.catalog_loader import CatalogLoader
from price_catalog.ingest.table_extractor import TableExtractor
from price_catalog.models import ServicePriceItem
from price_catalog.search.filters import FilterCriteria, filter_items
from price_catalog.search.ranking import fuzzy_score, rank_items, score_item

from conftest import IMAGING_CATEGORY_ID


def _item(name, row_index, description="", is_emergency=False, category_name="Khám bệnh"):
    return ServicePriceItem(
        id=row_index + 1,
        name=name,
        description=description,
        price=100000,
        category_id=1,
        category_name=category_name,
        row_index=row_index,
        is_emergency=is_emergency,
    )


@pytest.fixture
def items(category_records):
    return CatalogLoader(TableExtractor(cache_enabled=False)).build(category_records).items


class TestFuzzyScore:

    def test_subsequence_fraction(self):
        assert fuzzy_score("glcse", "glucose") == 1.0
        assert fuzzy_score("xyz", "glucose") == 0.0
        assert fuzzy_score("gx", "glucose") == 0.5
        assert fuzzy_score("", "glucose") == 0.0
        assert fuzzy_score("abc", "") == 0.0


class TestRankItems:
    """Test scoring and ordering."""

    def setup_method(self):
        self.endoscopy = _item("Nội soi tổng quát", 0)
        self.dermatology = _item("Tổng quát da liễu", 1)
        self.emergency = _item("Khám cấp cứu tổng quát", 2, is_emergency=True)
        self.catalog = [self.endoscopy, self.dermatology, self.emergency]

    def test_emergency_boost_and_prefix_ordering(self):
        ranked = rank_items(self.catalog, "tổng quát", fuzzy=False)

        assert ranked == [self.emergency, self.dermatology, self.endoscopy]

    def test_without_emergency_boost_ties_still_prefer_emergency(self):
        ranked = rank_items(self.catalog, "tong quat", fuzzy=False, prioritize_emergency=False)

        assert ranked == [self.dermatology, self.emergency, self.endoscopy]

    def test_every_word_must_match(self, items):
        assert [i.name for i in rank_items(items, "sieu bung", fuzzy=False)] == ["Siêu âm ổ bụng"]
        assert rank_items(items, "sieu glucose", fuzzy=False) == []

    def test_category_name_matches(self, items):
        ranked = rank_items(items, "hình ảnh", fuzzy=False)

        assert {item.category_id for item in ranked} == {IMAGING_CATEGORY_ID}
        assert len(ranked) == 2

    def test_accent_insensitive_with_name_order_on_ties(self, items):
        ranked = rank_items(items, "mau", fuzzy=False)

        assert [item.name for item in ranked] == ["Định nhóm máu ABO", "Tổng phân tích tế bào máu"]

    def test_fuzzy_fallback(self):
        glucose = _item("Glucose", 0, category_name="Xét nghiệm")
        ultrasound = _item("Siêu âm ổ bụng", 1, category_name="Xét nghiệm")

        assert rank_items([glucose, ultrasound], "glcse") == [glucose]
        assert rank_items([glucose, ultrasound], "glcse", fuzzy=False) == []

    def test_min_score(self):
        assert score_item(self.endoscopy, ["tong", "quat"], fuzzy=False) == pytest.approx(0.8)
        assert rank_items(self.catalog, "tong quat", fuzzy=False, min_score=0.85) == [
            self.emergency,
            self.dermatology,
        ]

    def test_blank_query_keeps_order(self):
        assert rank_items(self.catalog, "   ") == self.catalog


class TestRankedFilter:
    """Test ranked mode in the filter pipeline."""

    def test_substring_mode_is_default(self, items):
        assert filter_items(items, FilterCriteria(search_term="mau")) == []

    def test_ranked_mode_respects_category(self, items):
        criteria = FilterCriteria(search_term="máu ABO", category_id=IMAGING_CATEGORY_ID)

        ranked = filter_items(items, criteria, ranked=True)

        assert all(item.category_id == IMAGING_CATEGORY_ID for item in ranked)

    def test_ranked_mode_orders_best_first(self, items):
        ranked = filter_items(items, FilterCriteria(search_term="máu ABO"), ranked=True)

        assert ranked[0].name == "Định nhóm máu ABO"
