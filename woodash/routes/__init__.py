"""
Route aggregation package for the WooCommerce dashboard API.

Each module defines an ``APIRouter`` instance grouping related
endpoints: store login/logout, the WooCommerce collections, cache
introspection and the health check.  The application factory imports
these routers and includes them in the FastAPI instance.
"""

__all__ = [
    "auth",
    "cache",
    "health",
    "woocommerce",
]

from . import auth, cache, health, woocommerce  # noqa: E402,F401
