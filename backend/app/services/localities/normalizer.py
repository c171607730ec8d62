"""Locality normalization helpers.

Surveys are matched on lowercased, trimmed locality fields, registry entries
are keyed by a hyphenated slug of the same value, and listings are shown to
users with each word capitalized.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List

_WHITESPACE_RE = re.compile(r'\s+')
_WORD_START_RE = re.compile(r'\b\w')


def _clean(value: Any) -> str:
    return str(value).strip().lower()


def normalize_locality(locality: Dict[str, Any]) -> Dict[str, Any]:
    """Lowercase and trim state/city/area; pincode passes through unchanged."""
    return {
        'state': _clean(locality['state']),
        'city': _clean(locality['city']),
        'area': _clean(locality['area']),
        'pincode': locality.get('pincode') or '',
    }


def slugify_value(value: Any) -> str:
    """Registry identifier for a value: normalized, whitespace runs -> '-'."""
    return _WHITESPACE_RE.sub('-', _clean(value))


def build_locality_id(locality: Dict[str, Any]) -> str:
    # Built from the raw fields, unlike the normalized survey locality.
    return '-'.join([
        str(locality['state']),
        str(locality['city']),
        str(locality['area']),
        str(locality.get('pincode') or ''),
    ])


def capitalize_words(text: str) -> str:
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), text)


def capitalize_array(values: Iterable[str]) -> List[str]:
    return [capitalize_words(v) for v in values]
