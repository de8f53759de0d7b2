"""Shared fixtures: a small two-category price catalog."""

import pytest

from price_catalog.models import CategoryRecord

LAB_TESTS_HTML = """
<p>Bảng giá áp dụng từ 01/01/2024</p>
<table>
  <thead>
    <tr><th>STT</th><th>Tên dịch vụ</th><th>Mô tả</th><th>Giá</th></tr>
  </thead>
  <tbody>
    <tr><td>I/</td><td>XÉT NGHIỆM HUYẾT HỌC</td><td></td><td></td></tr>
    <tr><td>1</td><td>Tổng phân tích tế bào máu</td><td>Máy đếm laser 18 chỉ số</td><td>95.000 đ</td></tr>
    <tr><td>2</td><td>Định nhóm máu ABO</td><td>Phương pháp ống nghiệm</td><td>1.500.000 đ</td></tr>
    <tr><td>3</td><td>Glucose</td><td>Xét nghiệm đường huyết lúc đói</td><td>40.000</td></tr>
  </tbody>
</table>
"""

IMAGING_HTML = """
<table>
  <tbody>
    <tr><td>1</td><td>Siêu âm ổ bụng</td><td>Siêu âm tổng quát</td><td>150.000 đ</td></tr>
    <tr><td>2</td><td>Chụp X-quang ngực thẳng</td><td>Không bao gồm thuốc cản quang</td><td>120.000 đ</td></tr>
  </tbody>
</table>
"""

LAB_CATEGORY_ID = 101
IMAGING_CATEGORY_ID = 102


@pytest.fixture
def category_records():
    """Two categories: lab tests (3 priced rows + 1 header row) and imaging (2 rows)."""
    return [
        CategoryRecord(id=LAB_CATEGORY_ID, title="Xét nghiệm", content=LAB_TESTS_HTML),
        CategoryRecord(id=IMAGING_CATEGORY_ID, title="Chẩn đoán hình ảnh", content=IMAGING_HTML),
    ]


@pytest.fixture
def wordpress_pages():
    """The same catalog as raw WordPress REST API page objects."""
    return [
        {
            "id": LAB_CATEGORY_ID,
            "slug": "xet-nghiem",
            "title": {"rendered": "Xét nghiệm"},
            "content": {"rendered": LAB_TESTS_HTML, "protected": False},
        },
        {
            "id": IMAGING_CATEGORY_ID,
            "slug": "chan-doan-hinh-anh",
            "title": {"rendered": "Chẩn đoán hình ảnh"},
            "content": {"rendered": IMAGING_HTML, "protected": False},
        },
    ]
