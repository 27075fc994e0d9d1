"""Catalog path normalization."""

from __future__ import annotations

THUMBS_PREFIX = "thumbs/"


def split_path(value: str) -> list[str]:
    return [seg.strip() for seg in value.replace("\\", "/").split("/") if seg.strip()]


def norm_path(value: str | None) -> str:
    """Canonical catalog path: ``/`` separated, trimmed, first segment upper-cased.

    >>> norm_path(" bags\\\\Tote / ")
    'BAGS/Tote'
    """
    if not value:
        return ""
    parts = split_path(value)
    if not parts:
        return ""
    parts[0] = parts[0].upper()
    return "/".join(parts)


def match_key(value: str | None) -> str:
    """Case-insensitive key used to line up catalog paths with storage folders."""
    if not value:
        return ""
    return "/".join(split_path(value)).lower()


def parent_prefixes(path: str) -> list[str]:
    segs = path.split("/") if path else []
    return ["/".join(segs[:i]) for i in range(1, len(segs))]


def to_thumb_site_path(rel: str | None) -> str:
    if not rel:
        return ""
    path = rel.replace("\\", "/").lstrip("/")
    if not path.startswith(THUMBS_PREFIX):
        path = THUMBS_PREFIX + path
    return "/" + path
