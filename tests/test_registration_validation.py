"""
Tests for the registration normalization and validation pipeline.
"""

import pytest

from chess_signup.utils.registration_validator import (
    VALID_GROUP_CODES,
    RegistrationFormState,
    RegistrationInput,
    normalize_email,
    normalize_phone,
    validate_registration,
)

VALID_FORM = {
    'group': 'DD101',
    'full_name': 'Amine El Idrissi',
    'phone': '0612345678',
    'email': '1234567890123@ofppt-edu.ma',
}


def _form(**overrides):
    data = dict(VALID_FORM)
    data.update(overrides)
    return data


def test_valid_registration_produces_record():
    result = validate_registration(VALID_FORM)

    assert result.is_valid
    assert result.errors == []
    assert result.first_error is None
    assert result.record.to_dict() == {
        'group_code': 'DD101',
        'full_name': 'Amine El Idrissi',
        'phone': '0612345678',
        'email': '1234567890123@ofppt-edu.ma',
    }


@pytest.mark.parametrize('raw', [
    '0612345678',
    '06 12 34 56 78',
    '06-12-34-56-78',
    '06 12-34 56-78',
    ' 0612345678 ',
    '\u200e06 12 34 56 78\u200f',
    '\u202a0612345678\u202c',
    '\u20660612345678\u2069',
    '06.12.34.56.78',
    '(06) 12 34 56 78',
])
def test_local_phone_separators_normalize_to_same_digits(raw):
    result = validate_registration(_form(phone=raw))

    assert result.is_valid, result.errors
    assert result.record.phone == '0612345678'


@pytest.mark.parametrize('raw', [
    '+212612345678',
    '+212 6 12 34 56 78',
    '+212-612-345-678',
    '+212 612+345678',
    '\ufeff+212612345678',
])
def test_international_phone_keeps_leading_plus(raw):
    result = validate_registration(_form(phone=raw))

    assert result.is_valid, result.errors
    assert result.record.phone == '+212612345678'


@pytest.mark.parametrize('raw', [
    '061234567',
    '06123456789',
    '612345678',
    '+33612345678',
    '+2126123456789',
    '212612345678',
    'phone',
    '',
    None,
])
def test_invalid_phone_is_rejected(raw):
    result = validate_registration(_form(phone=raw))

    assert not result.is_valid
    assert result.first_error.field == 'phone'
    assert 'Moroccan phone' in result.first_error.message


def test_normalize_phone_drops_inner_plus_signs():
    assert normalize_phone('+2+12 61234 5678') == '+212612345678'
    assert normalize_phone('06+12+34+56+78') == '0612345678'


def test_byte_order_mark_is_stripped():
    assert normalize_phone('\ufeff06 12 34 56 78') == '0612345678'
    assert normalize_email('1234567890123@ofppt-edu.ma\ufeff') == '1234567890123@ofppt-edu.ma'


def test_normalize_leaves_non_strings_alone():
    assert normalize_phone(None) is None
    assert normalize_email(42) == 42


@pytest.mark.parametrize('raw', [
    '1234567890123@ofppt-edu.ma',
    ' 1234567890123@ofppt-edu.ma ',
    '1234567890123 @ofppt-edu.ma',
    '12345 67890 123@ofppt-edu.ma',
    '1234567890123@ofppt-edu.ma\n',
    '\ufeff1234567890123@ofppt-edu.ma',
])
def test_valid_email_after_whitespace_removal(raw):
    result = validate_registration(_form(email=raw))

    assert result.is_valid, result.errors
    assert result.record.email == '1234567890123@ofppt-edu.ma'


@pytest.mark.parametrize('raw', [
    '123456789012@ofppt-edu.ma',
    '12345678901234@ofppt-edu.ma',
    '1234567890123@ofppt.ma',
    '1234567890123@gmail.com',
    'a1234567890123@ofppt-edu.ma',
    '1234567890123@ofppt-edu.ma.evil.com',
    '1234567890123@ofppt-edu.mab',
    '1234567890123@ofppt-eduXma',
    'abcdefghijklm@ofppt-edu.ma',
    '',
    None,
])
def test_invalid_email_is_rejected(raw):
    result = validate_registration(_form(email=raw))

    assert not result.is_valid
    assert result.first_error.field == 'email'
    assert result.first_error.message == 'Email must be 13 digits followed by @ofppt-edu.ma'


@pytest.mark.parametrize('full_name, valid', [
    ('ab', False),
    ('abc', True),
    ('a' * 100, True),
    ('a' * 101, False),
    ('   ab   ', False),
    ('', False),
])
def test_full_name_length_boundaries(full_name, valid):
    result = validate_registration(_form(full_name=full_name))

    assert result.is_valid is valid
    if not valid:
        assert result.first_error.field == 'full_name'


def test_full_name_is_trimmed():
    result = validate_registration(_form(full_name='   Sara Bennani  '))

    assert result.record.full_name == 'Sara Bennani'


def test_missing_group_is_rejected():
    result = validate_registration(_form(group=''))

    assert result.first_error.field == 'group_code'
    assert result.first_error.message == 'Please select your group'


@pytest.mark.parametrize('group', ['DD108', 'dd101', 'ID105', 'DEV', ' DD101'])
def test_unknown_group_is_rejected(group):
    result = validate_registration(_form(group=group))

    assert result.first_error.field == 'group_code'
    assert result.first_error.message == 'Please select a valid group'


def test_every_listed_group_is_accepted():
    for group in VALID_GROUP_CODES:
        assert validate_registration(_form(group=group)).is_valid


def test_first_error_follows_pipeline_order():
    result = validate_registration({
        'group': '',
        'full_name': 'x',
        'phone': '123',
        'email': 'nope',
    })

    assert [e.field for e in result.errors] == ['group_code', 'full_name', 'phone', 'email']
    assert result.first_error.field == 'group_code'
    assert result.record is None


def test_first_error_is_the_only_failing_field():
    result = validate_registration(_form(email='bad@ofppt-edu.ma'))

    assert [e.field for e in result.errors] == ['email']


def test_normalizing_a_normalized_record_changes_nothing():
    first = validate_registration(_form(
        full_name='  Amine  ',
        phone='+212 6-12 34 56 78',
        email=' 1234567890123@ofppt-edu.ma ',
    )).record
    again = validate_registration(RegistrationInput(
        group=first.group_code,
        full_name=first.full_name,
        phone=first.phone,
        email=first.email,
    )).record

    assert again == first
    assert normalize_phone(first.phone) == first.phone
    assert normalize_email(first.email) == first.email


def test_result_to_dict():
    payload = validate_registration(_form(phone='12')).to_dict()

    assert payload['is_valid'] is False
    assert payload['record'] is None
    assert payload['errors'][0]['field'] == 'phone'


def test_form_state_keeps_values_and_field_errors():
    form = RegistrationFormState(_form(group='', email='wrong'))
    result = form.submit()

    assert not result.is_valid
    assert form.values['email'] == 'wrong'
    assert set(form.errors) == {'group', 'email'}

    form.reset()
    assert form.values == {'group': '', 'full_name': '', 'phone': '', 'email': ''}
    assert form.errors == {}
