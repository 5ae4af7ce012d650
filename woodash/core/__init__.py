"""
Core helpers package for the WooCommerce dashboard API.

This package contains low-level infrastructure: settings, credential
handling and request signing, the session store, the error hierarchy
and the JSON response envelope.
"""

__all__ = []
