"""
schemas/auth.py
----------------

Pydantic models related to authentication against a WooCommerce store.
These schemas are used for request bodies in the ``auth`` routes and
services.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from woodash.core.auth import normalize_store_url


class LoginData(BaseModel):
    url: str = Field(..., min_length=1, max_length=255, description="Store URL, e.g. https://shop.example.com")
    key: str = Field(..., min_length=1, pattern=r"^ck_[a-zA-Z0-9]+$", description="Consumer key (ck_...)")
    secret: str = Field(..., min_length=1, pattern=r"^cs_[a-zA-Z0-9]+$", description="Consumer secret (cs_...)")

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = normalize_store_url(value)
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        if len(value.split("://", 1)[1]) == 0:
            raise ValueError("Invalid URL format")
        return value
