"""Application configuration using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # App Settings
    debug: bool = False
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_max_bytes: int = 10 * 1024 * 1024
    log_backup_count: int = 5
    app_host: str = "0.0.0.0"
    app_port: int = 8001

    # ==========================================================================
    # Content Service (WordPress REST API)
    # ==========================================================================
    content_base_url: str = "https://benhvien.example.vn"
    service_price_parent_id: int = 7224  # Parent page holding one child page per price category
    content_per_page: int = 100
    content_request_timeout: float = 15.0
    catalog_refresh_minutes: int = 10

    # ==========================================================================
    # Extraction Settings
    # ==========================================================================
    min_cells: int = 4
    parse_cache_enabled: bool = True
    parse_cache_max_size: int = 100
    parse_cache_ttl_seconds: int = 600  # 10 minutes
    emergency_keywords: str = "cấp cứu,khẩn cấp,emergency,urgent"

    # ==========================================================================
    # Search & Pagination Settings
    # ==========================================================================
    page_size: int = 10
    page_window_size: int = 5  # Page buttons shown in the page-number control
    search_debounce_ms: int = 300
    max_query_length: int = 500
    fold_diacritics: bool = False  # "mau" also matches "máu" when enabled
    ranked_search: bool = False  # Relevance-ordered multi-word search instead of substring filtering
    fuzzy_search: bool = True  # Ranked search only: subsequence fallback per word
    prioritize_emergency: bool = True  # Ranked search only: boost emergency services
    ranked_min_score: float = 0.3
    emergency_categories_first: bool = False  # List categories with emergency services first

    # ==========================================================================
    # Virtualized List Settings
    # ==========================================================================
    row_height: int = 72  # Estimated row height in pixels
    overscan: int = 5  # Extra rows rendered above and below the viewport

    # Formatting
    price_locale: str = "vi-VN"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
