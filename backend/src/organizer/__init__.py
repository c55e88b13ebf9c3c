"""Organizer module - tenant scoped event, join request and team management."""
