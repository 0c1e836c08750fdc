"""
Authentication forms using Flask-WTF.
Login, registration, profile and verification forms.
All accept JSON bodies as well as form posts.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Length, Optional, ValidationError

from utils.messages import MESSAGES
from utils import validators


class LoginForm(FlaskForm):
    """Login form with email and password."""

    email = StringField('Email', validators=[
        DataRequired(message=MESSAGES['field_required'])
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message=MESSAGES['field_required'])
    ])

    remember_me = BooleanField('Remember me')


class RegisterForm(FlaskForm):
    """Client self-registration form."""

    name = StringField('Name', validators=[
        DataRequired(message=MESSAGES['field_required']),
        Length(max=120)
    ])

    email = StringField('Email', validators=[
        DataRequired(message=MESSAGES['field_required']),
        Length(max=254)
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message=MESSAGES['field_required']),
        Length(min=8, message=MESSAGES['password_too_short'])
    ])

    phone = StringField('Phone', validators=[Optional(), Length(max=40)])

    def validate_email(self, field):
        if not validators.validate_email((field.data or '').strip()):
            raise ValidationError(MESSAGES['invalid_email'])

    def validate_phone(self, field):
        if field.data and not validators.validate_phone(field.data):
            raise ValidationError(MESSAGES['invalid_value'])


class ProfileForm(FlaskForm):
    """Self-service profile update."""

    name = StringField('Name', validators=[
        DataRequired(message=MESSAGES['field_required']),
        Length(max=120)
    ])

    phone = StringField('Phone', validators=[Optional(), Length(max=40)])

    address = StringField('Address', validators=[Optional(), Length(max=255)])

    def validate_phone(self, field):
        if field.data and not validators.validate_phone(field.data):
            raise ValidationError(MESSAGES['invalid_value'])


class ResendVerificationForm(FlaskForm):
    """Request a new verification link."""

    email = StringField('Email', validators=[
        DataRequired(message=MESSAGES['field_required']),
        Length(max=254)
    ])


def first_form_error(form) -> tuple:
    """
    First validation error of a form.

    Returns:
        Tuple of (field_name, message)
    """
    for name, errors in form.errors.items():
        if errors:
            return name, errors[0]
    return None, MESSAGES['invalid_value']
