"""Deterministic NetBox slugs."""

from __future__ import annotations

from slugify import slugify

# NetBox slug fields are limited to 100 characters.
SLUG_MAX_LENGTH = 100


def make_slug(value: str) -> str:
    """Return the NetBox slug for ``value``; equal inputs always give equal slugs."""

    return slugify(value, max_length=SLUG_MAX_LENGTH, word_boundary=False)
