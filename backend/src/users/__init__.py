"""Users module - the authenticated user's own profile, requests and trips."""
