# crud/common.py
"""Helpers for shaping flat joined rows into nested view objects.

Queries select joined columns with a prefix (``owner__username``,
``latest_video__title``) and the helpers below fold them back into a nested
dict, so a to-one join never comes back wrapped in a list and a missed left
join comes back as ``None``.
"""
from typing import Any, Dict, Iterable, List, Optional

USER_SUMMARY_FIELDS = ("id", "username", "full_name", "avatar_url")

VIDEO_CARD_FIELDS = (
    "id",
    "video_file_url",
    "thumbnail_url",
    "title",
    "description",
    "duration",
    "views",
    "created_at",
)


def columns(alias: str, fields: Iterable[str], prefix: str) -> str:
    """Render ``alias.field AS prefix__field`` select items"""
    return ",\n            ".join(f"{alias}.{field} AS {prefix}__{field}" for field in fields)


def nest(row: Dict[str, Any], prefix: str, key: Optional[str] = None) -> Dict[str, Any]:
    """Move ``prefix__*`` columns of ``row`` into ``row[key]``.

    The nested value is ``None`` when every folded column is NULL.
    """
    marker = f"{prefix}__"
    nested = {}
    for column in [c for c in row if c.startswith(marker)]:
        nested[column[len(marker):]] = row.pop(column)
    row[key or prefix] = nested if any(v is not None for v in nested.values()) else None
    return row


def nest_all(rows: List[Dict[str, Any]], *prefixes: str) -> List[Dict[str, Any]]:
    for row in rows:
        for prefix in prefixes:
            nest(row, prefix)
    return rows


def wrap(rows: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    """Wrap each row under a single key, e.g. ``{"subscriber": {...}}``"""
    return [{key: row} for row in rows]
