"""Dashboard search and category filtering over already-fetched registrations.

Filtering never queries the database and never mutates the list it is given;
the dashboard recomputes the visible subset on every render from the fetched
rows, the search text and the selected category.
"""

from typing import Iterable, List


CATEGORY_ALL = 'all'
CATEGORY_DEV = 'DEV'
CATEGORY_ID = 'ID'

CATEGORIES = (CATEGORY_ALL, CATEGORY_DEV, CATEGORY_ID)


def _field(registration, name):
    if isinstance(registration, dict):
        return registration.get(name) or ''
    return getattr(registration, name, None) or ''


def matches_query(registration, query: str) -> bool:
    """Case-insensitive substring match on full name, email or group code."""
    q = (query or '').strip().lower()
    if not q:
        return True
    return (
        q in _field(registration, 'full_name').lower()
        or q in _field(registration, 'email').lower()
        or q in _field(registration, 'group_code').lower()
    )


def matches_category(registration, category: str) -> bool:
    """Category match on the group code prefix.

    ``DEV`` is any code starting with "D", ``ID`` any code starting with "ID".
    Unknown categories match nothing.
    """
    if not category or category == CATEGORY_ALL:
        return True
    group_code = _field(registration, 'group_code')
    if category == CATEGORY_DEV:
        return group_code.startswith('D')
    if category == CATEGORY_ID:
        return group_code.startswith('ID')
    return False


def filter_registrations(registrations: Iterable, query: str = '',
                         category: str = CATEGORY_ALL) -> List:
    """Return the visible subset, preserving the input order."""
    return [
        registration for registration in registrations
        if matches_query(registration, query)
        and matches_category(registration, category)
    ]
