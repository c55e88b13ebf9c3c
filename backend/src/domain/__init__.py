"""Domain rules independent of HTTP and persistence."""
