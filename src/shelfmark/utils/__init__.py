"""Shared utilities: retry with backoff and circuit breakers."""
