"""Infrastructure adapters (object storage)."""
