"""
woodash package
---------------

This package contains the FastAPI application that serves WooCommerce
orders, customers and products to the dashboard through an in‑memory
response cache.  Importing ``woodash`` will load the :mod:`main` module
and expose the ``app`` instance for ASGI servers.
"""

from .main import app, create_app  # noqa: F401
