"""
shortbox: a minimal public link-shortening service.

Clients submit a URL and receive a short code; visiting the short code
issues a redirect. Everything untrusted passes through shortbox.core before
it reaches the key-value store.
"""

__version__ = "1.0.0"
