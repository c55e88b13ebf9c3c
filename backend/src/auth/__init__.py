"""Auth module - JWT issuance, password hashing, login rate limiting and account flows."""
