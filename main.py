"""
Root application entry point for the WooCommerce dashboard API
==============================================================

This module exposes the FastAPI application instance defined in
``woodash/main.py`` so that deployment tools like Uvicorn can import
``main:app`` from the repository root.  The application setup and
router registration remain centralized in the ``woodash`` package.

Usage
-----

.. code-block:: bash

    uvicorn main:app --host 0.0.0.0 --port 8000

Run a single worker: sessions and the response cache live in process
memory and are not shared between workers.
"""

from woodash.main import app  # noqa: F401 re-export for Uvicorn

__all__ = ["app"]
