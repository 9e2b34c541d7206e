from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SubmitField
from wtforms.validators import DataRequired, Email, Length


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class AdminLoginForm(FlaskForm):
    email = StringField('Email', filters=[_strip], validators=[
        DataRequired(message='Enter your email'),
        Email(message='Enter a valid email'),
        Length(max=255, message='Email is too long'),
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Enter your password'),
        Length(min=8, message='Password must be at least 8 characters'),
        Length(max=72, message='Password is too long'),
    ])
    submit = SubmitField('Sign in')


class AdminSignupForm(AdminLoginForm):
    submit = SubmitField('Create account')


def first_form_error(form):
    """First error message of a failed ``validate_on_submit``, in field order."""
    for field in form:
        if field.errors:
            return field.errors[0]
    return None
