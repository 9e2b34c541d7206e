"""Registration Validation - normalization and field rules for the public form.

Every registration passes through this module before anything is written to
the ``registrations`` table. The pipeline is pure: it never touches the
database, the session or the request, so it can be exercised directly.

Pipeline (fixed order):
    1. group      - must be one of the enumerated DEV/ID group codes
    2. full_name  - trimmed, 3 to 100 characters
    3. phone      - whitespace and invisible bidi marks removed, only digits
                    and a single leading '+' kept, then matched against the
                    Moroccan shape (+212 or 0, followed by 9 digits)
    4. email      - whitespace removed, then matched against
                    13 digits + '@ofppt-edu.ma' (max 255 characters)

Normalization always happens before the pattern check, so input pasted with
stray spaces, hyphens or direction marks still validates.

Usage:
    result = validate_registration(request.form)

    if not result.is_valid:
        flash(result.first_error.message, 'error')
    else:
        insert_registration(result.record)
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


GROUP_OPTIONS = {
    'DEV': [
        'DD101', 'DD102', 'DD103', 'DD104', 'DD105', 'DD106', 'DD107',
        'DEVOWS201', 'DEVOWS202', 'DEVOWS203', 'DEVOWS204',
    ],
    'ID': [
        'ID101', 'ID102', 'ID103', 'ID104',
        'IDOSR201', 'IDOSR202', 'IDOSR203', 'IDOSR204',
    ],
}

VALID_GROUP_CODES = frozenset(
    code for codes in GROUP_OPTIONS.values() for code in codes
)

FULL_NAME_MIN_LENGTH = 3
FULL_NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255

EMAIL_PATTERN = re.compile(r'[0-9]{13}@ofppt-edu\.ma')
MOROCCAN_PHONE_PATTERN = re.compile(r'(?:\+212|0)(?:[ \-]?[0-9]){9}')

# Whitespace plus LRM/RLM, the embedding/override marks, the isolates and BOM
_PHONE_INVISIBLES = re.compile(r'[\s\u200E\u200F\u202A-\u202E\u2066-\u2069\uFEFF]+')
_NON_LEADING_PLUS = re.compile(r'(?!^)\+')
_NOT_DIGIT_OR_PLUS = re.compile(r'[^0-9+]')
_WHITESPACE = re.compile(r'[\s\uFEFF]+')


def normalize_phone(value: Any) -> Any:
    """Reduce a phone number to digits with an optional leading '+'.

    Non-string values are returned untouched so the field rule can reject them.
    """
    if not isinstance(value, str):
        return value
    stripped = _PHONE_INVISIBLES.sub('', value).strip()
    without_inner_plus = _NON_LEADING_PLUS.sub('', stripped)
    return _NOT_DIGIT_OR_PLUS.sub('', without_inner_plus)


def normalize_email(value: Any) -> Any:
    """Remove every whitespace character from an email address."""
    if not isinstance(value, str):
        return value
    return _WHITESPACE.sub('', value).strip()


@dataclass(frozen=True)
class RegistrationInput:
    """Raw, untrusted form values for a single submission attempt."""
    group: Any = None
    full_name: Any = None
    phone: Any = None
    email: Any = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> 'RegistrationInput':
        return cls(
            group=form.get('group'),
            full_name=form.get('full_name'),
            phone=form.get('phone'),
            email=form.get('email'),
        )


@dataclass(frozen=True)
class RegistrationRecord:
    """Normalized registration that passed every field rule."""
    group_code: str
    full_name: str
    phone: str
    email: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'group_code': self.group_code,
            'full_name': self.full_name,
            'phone': self.phone,
            'email': self.email,
        }


@dataclass
class ValidationError:
    """A single field rule violation."""
    field: str
    message: str


@dataclass
class ValidationResult:
    """Outcome of running the pipeline over one ``RegistrationInput``."""
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    record: Optional[RegistrationRecord] = None

    def add_error(self, field: str, message: str):
        self.errors.append(ValidationError(field, message))
        self.is_valid = False
        self.record = None

    @property
    def first_error(self) -> Optional[ValidationError]:
        """The first violated rule, in pipeline order."""
        return self.errors[0] if self.errors else None

    def field_errors(self) -> Dict[str, str]:
        """Map each failing field to its message, for inline form display."""
        return {error.field: error.message for error in self.errors}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'errors': [
                {'field': e.field, 'message': e.message}
                for e in self.errors
            ],
            'record': self.record.to_dict() if self.record else None,
        }


class RegistrationValidator:
    """Runs the four field rules over a ``RegistrationInput``."""

    def validate(self, draft: RegistrationInput) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        group_code = self._validate_group(result, draft.group)
        full_name = self._validate_full_name(result, draft.full_name)
        phone = self._validate_phone(result, draft.phone)
        email = self._validate_email(result, draft.email)

        if result.is_valid:
            result.record = RegistrationRecord(
                group_code=group_code,
                full_name=full_name,
                phone=phone,
                email=email,
            )
        return result

    def _validate_group(self, result: ValidationResult, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value:
            result.add_error('group_code', 'Please select your group')
            return None
        if value not in VALID_GROUP_CODES:
            result.add_error('group_code', 'Please select a valid group')
            return None
        return value

    def _validate_full_name(self, result: ValidationResult, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            result.add_error('full_name', 'Full name is required')
            return None
        full_name = value.strip()
        if len(full_name) < FULL_NAME_MIN_LENGTH:
            result.add_error(
                'full_name',
                f'Full name must be at least {FULL_NAME_MIN_LENGTH} characters'
            )
            return None
        if len(full_name) > FULL_NAME_MAX_LENGTH:
            result.add_error(
                'full_name',
                f'Full name must be at most {FULL_NAME_MAX_LENGTH} characters'
            )
            return None
        return full_name

    def _validate_phone(self, result: ValidationResult, value: Any) -> Optional[str]:
        phone = normalize_phone(value)
        if not isinstance(phone, str) or not MOROCCAN_PHONE_PATTERN.fullmatch(phone):
            result.add_error(
                'phone',
                'Enter a valid Moroccan phone (0XXXXXXXXX or +212XXXXXXXXX)'
            )
            return None
        return phone

    def _validate_email(self, result: ValidationResult, value: Any) -> Optional[str]:
        email = normalize_email(value)
        if not isinstance(email, str) or not EMAIL_PATTERN.fullmatch(email):
            result.add_error(
                'email',
                'Email must be 13 digits followed by @ofppt-edu.ma'
            )
            return None
        if len(email) > EMAIL_MAX_LENGTH:
            result.add_error(
                'email',
                f'Email must be less than {EMAIL_MAX_LENGTH} characters'
            )
            return None
        return email


def validate_registration(draft) -> ValidationResult:
    """Validate a ``RegistrationInput`` or any form-like mapping."""
    if not isinstance(draft, RegistrationInput):
        draft = RegistrationInput.from_form(draft)
    return RegistrationValidator().validate(draft)


class RegistrationFormState:
    """Mutable state of the public form between renders.

    Holds what the user typed and the per-field messages of the last
    validation; rendering reads from it, ``submit`` runs the pipeline.
    """

    FIELDS = ('group', 'full_name', 'phone', 'email')
    _ERROR_KEYS = {'group_code': 'group'}

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self.values: Dict[str, str] = {name: '' for name in self.FIELDS}
        self.errors: Dict[str, str] = {}
        if values:
            self.update(values)

    def update(self, values: Mapping[str, Any]):
        for name in self.FIELDS:
            if name in values:
                self.values[name] = values.get(name) or ''

    def submit(self) -> ValidationResult:
        result = validate_registration(RegistrationInput(**self.values))
        self.errors = {
            self._ERROR_KEYS.get(name, name): message
            for name, message in result.field_errors().items()
        }
        return result

    def reset(self):
        self.values = {name: '' for name in self.FIELDS}
        self.errors = {}
