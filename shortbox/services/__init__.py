"""
Services module for business logic separation.

This module contains the key-value link store, slug generation and the
link service used by the API endpoints.
"""
