"""
Authentication forms using Flask-WTF.
Validates JSON login payloads (CSRF is off for the token API).
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Email


class LoginForm(FlaskForm):
    """Login form with email and password."""

    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email format')
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
