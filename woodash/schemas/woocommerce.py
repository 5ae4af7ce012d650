"""
schemas/woocommerce.py
-----------------------

Query parameter models for the WooCommerce collection endpoints.  Dates
are accepted in ISO 8601 and handed to WooCommerce in the same format;
``to_params`` drops unset filters so they neither reach the upstream
call nor change the cache key.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class OrderStatus(str, Enum):
    any = "any"
    pending = "pending"
    processing = "processing"
    on_hold = "on-hold"
    completed = "completed"
    cancelled = "cancelled"
    refunded = "refunded"
    failed = "failed"


class DateRangeQuery(BaseModel):
    after: Optional[datetime] = None
    before: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_range(self) -> "DateRangeQuery":
        if self.after is None or self.before is None:
            return self
        if (self.after.tzinfo is None) != (self.before.tzinfo is None):
            raise ValueError("after and before must both include a timezone or neither")
        if self.after > self.before:
            raise ValueError("after must not be later than before")
        return self

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for name in ("after", "before"):
            value = getattr(self, name)
            if value is not None:
                params[name] = value.isoformat()
        return params


class OrderQuery(DateRangeQuery):
    status: Optional[OrderStatus] = None

    def to_params(self) -> Dict[str, Any]:
        params = super().to_params()
        if self.status is not None:
            params["status"] = self.status.value
        return params


class CustomerQuery(DateRangeQuery):
    role: Optional[str] = Field(None, pattern=r"^[a-z_]+$")

    def to_params(self) -> Dict[str, Any]:
        params = super().to_params()
        if self.role is not None:
            params["role"] = self.role
        return params
