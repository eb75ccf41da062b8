"""Request logging and security header middleware."""
