"""
Small helpers shared by the module services.

Includes:
- Slug generation (workspace slugs)
- UTC timestamp helpers for Supabase timestamptz columns
"""

import re
from datetime import datetime, timezone


def generate_slug(name: str) -> str:
    """Lowercase, hyphen-separated, alphanumeric slug for a display name."""
    slug = name.lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9\-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_timestamp(value) -> datetime:
    """Parse a Supabase timestamptz string (or pass a datetime through) as aware UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
