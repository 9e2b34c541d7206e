"""Utility modules for the chess-signup application."""

from .registration_validator import (
    normalize_email,
    normalize_phone,
    validate_registration,
)
from .registration_filter import filter_registrations

__all__ = [
    'normalize_email',
    'normalize_phone',
    'validate_registration',
    'filter_registrations',
]
