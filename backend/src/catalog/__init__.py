"""Catalog module - public locations and events, visitor join requests."""
