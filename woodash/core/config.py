"""
core/config.py
----------------

Application configuration module.

Defines strongly‑typed settings loaded from the environment using
``pydantic-settings``. These settings control the upstream HTTP client,
the page loop guards used when walking WooCommerce collections, the
per-entity cache lifetimes and the session cookie. Values can be
overridden via environment variables at deployment time.
"""

from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The settings structure is flat and uses environment variables
    prefixed with ``APP_``.  For example, to shorten the orders cache
    lifetime you can set ``APP_CACHE_TTL_ORDERS=60``.
    """

    # HTTP client settings
    http_timeout: float = Field(30.0, gt=0, description="Hard timeout for upstream requests in seconds.")
    http_max_retries: int = Field(2, ge=0, description="Maximum number of retries for idempotent operations (GET).")
    http_backoff_factor: float = Field(1.0, ge=0, description="Backoff factor for exponential retry delays.")

    # Pagination guards
    page_size: int = Field(100, ge=1, le=100, description="Records requested per upstream page.")
    max_pages: int = Field(50, ge=1, description="Maximum number of pages to request when paginating.")

    # Cache lifetimes (seconds)
    cache_ttl_orders: int = Field(120, gt=0)
    cache_ttl_customers: int = Field(180, gt=0)
    cache_ttl_products: int = Field(300, gt=0)
    cache_sweep_interval: float = Field(60.0, ge=0, description="Seconds between expired-entry sweeps; 0 disables.")
    cache_single_flight: bool = Field(True, description="Share one upstream fetch between concurrent misses on a key.")

    # Sessions
    session_cookie_name: str = "woodash_session"
    session_max_age: int = Field(14 * 24 * 3600, gt=0)
    session_cookie_secure: bool = False

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="APP_", env_file=None, case_sensitive=False)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""
    return Settings()
