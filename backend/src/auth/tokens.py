"""Opaque token and slug helpers."""

import hashlib
import re
import secrets


def sha256_hex(value: str) -> str:
    """Hex sha256 digest, used to store refresh tokens without the raw value."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def random_token(size: int = 32) -> str:
    """Cryptographically random token of ``size`` bytes, hex encoded."""
    return secrets.token_hex(size)


def slugify(value: str) -> str:
    """Lowercase URL slug: runs of non-alphanumerics become a single dash.

    >>> slugify("Desert Trails & Co.")
    'desert-trails-co'
    """
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "organizer"
