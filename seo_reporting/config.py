"""
Configuration management for the SEO reporting service
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "SEO Reporting Service"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = True

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Upstream dashboard data API (snapshots, rank tracker, tasks, KVPs, backlinks)
    data_api_base_url: str = "http://localhost:3000/api"
    data_api_token: Optional[str] = None
    request_timeout_seconds: float = 10.0

    # Reporting defaults
    default_directory_depth: int = 2
    max_directory_depth: int = 5
    default_page_size: int = 25
    upcoming_window_days: int = 7
    report_timezone: str = "Europe/Zurich"
    # Brand terms to exclude from non-brand query views (comma-separated)
    brand_terms: str = ""  # e.g., "raiffeisen,raiffeisenbank"

    # Business categories used by rank tracker keywords and KVP URLs
    keyword_categories: List[str] = [
        "Mortgages",
        "Accounts&Cards",
        "Investing",
        "Pension",
        "Digital Banking",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
