"""Tests for the category index and catalog building."""

from price_catalog.ingest.catalog_loader import CatalogLoader, coerce_records
from price_catalog.ingest.category_index import build_category_index, fold_text
from price_catalog.ingest.table_extractor import TableExtractor
from price_catalog.models import Category, CategoryRecord, ServicePriceItem


def _record(category_id, title, content=""):
    return CategoryRecord(id=category_id, title=title, content=content)


class TestCategoryIndex:
    """Test deduplication and ordering of categories."""

    def test_dedup_and_alphabetical_order(self):
        records = [_record(2, "B"), _record(1, "A"), _record(2, "B")]

        index = build_category_index(records)

        assert index == [Category(id=1, name="A"), Category(id=2, name="B")]

    def test_first_seen_title_wins(self):
        records = [_record(7, "Nội soi"), _record(7, "Nội soi (cũ)")]

        index = build_category_index(records)

        assert [c.name for c in index] == ["Nội soi"]

    def test_vietnamese_ordering(self):
        records = [
            _record(1, "Xét nghiệm"),
            _record(2, "Đo điện tim"),
            _record(3, "Chẩn đoán hình ảnh"),
            _record(4, "Dịch vụ khác"),
            _record(5, "Ánh sáng trị liệu"),
        ]

        index = build_category_index(records)

        assert [c.name for c in index] == [
            "Ánh sáng trị liệu",
            "Chẩn đoán hình ảnh",
            "Dịch vụ khác",
            "Đo điện tim",
            "Xét nghiệm",
        ]

    def test_empty_category_kept_with_counts(self):
        records = [_record(1, "Xét nghiệm"), _record(2, "Phục hồi chức năng")]
        items = [
            ServicePriceItem(id=1, name="Glucose", description="", price=40000,
                             category_id=1, category_name="Xét nghiệm"),
            ServicePriceItem(id=2, name="HbA1c", description="", price=120000,
                             category_id=1, category_name="Xét nghiệm", row_index=1),
        ]

        index = build_category_index(records, items)

        counts = {c.id: c.item_count for c in index}
        assert counts == {1: 2, 2: 0}

    def test_emergency_categories_first(self):
        records = [_record(1, "Chẩn đoán hình ảnh"), _record(2, "Khám bệnh"), _record(3, "Xét nghiệm")]
        items = [
            ServicePriceItem(id=1, name="Khám cấp cứu", description="", price=300000,
                             category_id=2, category_name="Khám bệnh", is_emergency=True),
            ServicePriceItem(id=1, name="Glucose", description="", price=40000,
                             category_id=3, category_name="Xét nghiệm"),
        ]

        by_name = build_category_index(records, items)
        by_priority = build_category_index(records, items, emergency_first=True)

        assert [c.id for c in by_name] == [1, 2, 3]
        assert [c.id for c in by_priority] == [2, 1, 3]

    def test_fold_text(self):
        assert fold_text("Đường huyết") == "duong huyet"
        assert fold_text("MÁU") == "mau"


class TestCatalogLoader:
    """Test building a whole catalog."""

    def setup_method(self):
        self.loader = CatalogLoader(TableExtractor(cache_enabled=False))

    def test_build_catalog(self, category_records):
        catalog = self.loader.build(category_records)

        assert len(catalog.items) == 5
        assert [c.name for c in catalog.categories] == ["Chẩn đoán hình ảnh", "Xét nghiệm"]
        category_ids = {c.id for c in catalog.categories}
        assert all(item.category_id in category_ids for item in catalog.items)

    def test_wordpress_pages_accepted(self, wordpress_pages):
        catalog = self.loader.build(wordpress_pages)

        assert len(catalog.items) == 5
        assert {c.name for c in catalog.categories} == {"Xét nghiệm", "Chẩn đoán hình ảnh"}

    def test_no_categories_gives_empty_catalog(self):
        for empty in (None, []):
            catalog = self.loader.build(empty)
            assert catalog.items == []
            assert catalog.categories == []
            assert catalog.is_empty

    def test_empty_content_category_still_indexed(self):
        catalog = self.loader.build([{"id": 9, "title": "Đang cập nhật", "content": ""}])

        assert catalog.items == []
        assert catalog.categories == [Category(id=9, name="Đang cập nhật", item_count=0)]

    def test_invalid_records_skipped(self):
        raw = [
            {"id": "not-a-number", "title": "Hỏng"},
            {"title": "Thiếu id"},
            {"id": 3, "title": {"rendered": ""}, "content": None},
        ]

        records = coerce_records(raw)

        assert len(records) == 1
        assert records[0].title == "Không có tên"
        assert records[0].content == ""

        catalog = self.loader.build(raw)
        assert catalog.skipped_records == 2
