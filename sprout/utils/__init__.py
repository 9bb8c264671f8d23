"""Shared helpers: exceptions and the in-memory item store."""
