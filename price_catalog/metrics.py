"""Prometheus metrics for the service price catalog."""

from prometheus_client import Counter, Gauge, Histogram, Info

# Application info
app_info = Info("price_catalog", "Service price catalog application info")
app_info.info({"version": "0.1.0", "name": "price-catalog"})

# Extraction metrics
rows_extracted_total = Counter(
    "catalog_rows_extracted_total",
    "Total number of priced rows materialized as items",
)

rows_skipped_total = Counter(
    "catalog_rows_skipped_total",
    "Total number of table rows skipped during extraction",
    ["reason"],
)

parse_duration_seconds = Histogram(
    "catalog_parse_duration_seconds",
    "Time spent building the catalog from category content",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

parse_cache_hits_total = Counter(
    "catalog_parse_cache_hits_total",
    "Total number of extraction results served from the parse cache",
)

parse_cache_misses_total = Counter(
    "catalog_parse_cache_misses_total",
    "Total number of extractions that had to parse markup",
)

# Catalog size
catalog_items = Gauge(
    "catalog_items",
    "Number of priced items in the current catalog",
)

catalog_categories = Gauge(
    "catalog_categories",
    "Number of categories in the current catalog",
)

# Filter metrics
filter_recomputes_total = Counter(
    "catalog_filter_recomputes_total",
    "Total number of filter pipeline recomputations",
)

filter_duration_seconds = Histogram(
    "catalog_filter_duration_seconds",
    "Time spent filtering the catalog",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1],
)

debounce_cancellations_total = Counter(
    "catalog_debounce_cancellations_total",
    "Total number of pending search updates superseded by newer input",
)

# Content service metrics
content_fetches_total = Counter(
    "catalog_content_fetches_total",
    "Total number of content service fetch attempts",
    ["status"],
)
