"""HTTP routes and response helpers."""
