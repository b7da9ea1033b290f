"""Normalised lookup keys for names matched across tables.

Department and subject names are typed by hand in several places, so two
spellings of one name ("Data Structures", " data  structures") must compare
equal.  ``name_key`` is stored next to every such name and is the only value
used for cross-entity matching.
"""

from __future__ import annotations


def name_key(value: str | None) -> str:
    """Return the case-folded, whitespace-collapsed form of *value*.

    ``None`` and blank strings map to ``""``.
    """
    if not value:
        return ""
    return " ".join(value.split()).casefold()


def clean(value: str | None) -> str:
    """Trim and collapse internal whitespace, preserving case."""
    if not value:
        return ""
    return " ".join(value.split())
