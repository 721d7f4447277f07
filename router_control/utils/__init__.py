"""Shared helpers: filesystem access and logging setup."""
