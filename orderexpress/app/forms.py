from __future__ import annotations
from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SelectField
from wtforms.validators import DataRequired, Length, Email, Optional, EqualTo

from .models import ROLES, format_role_label

ROLE_CHOICES = [(r, format_role_label(r)) for r in ROLES]


class RegisterForm(FlaskForm):
    first_name = StringField("first_name", validators=[Optional(), Length(max=120)])
    last_name = StringField("last_name", validators=[Optional(), Length(max=120)])
    email = StringField("email", validators=[DataRequired(), Email(), Length(max=255)])
    password = PasswordField("password", validators=[DataRequired(), Length(min=8)])


class LoginForm(FlaskForm):
    email = StringField("email", validators=[DataRequired(), Email(), Length(max=255)])
    password = PasswordField("password", validators=[DataRequired()])


class ResendConfirmationForm(FlaskForm):
    email = StringField("email", validators=[DataRequired(), Email(), Length(max=255)])


class BusinessForm(FlaskForm):
    business_name = StringField("business_name", validators=[DataRequired(), Length(min=2, max=255)])
    address1 = StringField("address1", validators=[DataRequired(), Length(max=255)])
    address2 = StringField("address2", validators=[Optional(), Length(max=255)])
    city = StringField("city", validators=[DataRequired(), Length(max=120)])
    state = StringField("state", validators=[Optional(), Length(max=120)])
    country = StringField("country", validators=[Optional(), Length(max=120)])
    zip = StringField("zip", validators=[DataRequired(), Length(max=32)])

    def full_address(self) -> str:
        street = " ".join(p for p in (self.address1.data, self.address2.data) if p)
        parts = [street, self.city.data, self.state.data, self.country.data, self.zip.data]
        return ", ".join(p.strip() for p in parts if p and p.strip())


class InviteUserForm(FlaskForm):
    email = StringField("email", validators=[DataRequired(), Email(), Length(max=255)])
    role = SelectField("role", choices=ROLE_CHOICES, default="inventory_manager", validators=[DataRequired()])


class ChangeRoleForm(FlaskForm):
    role = SelectField("role", choices=ROLE_CHOICES, validators=[DataRequired()])


class AcceptInviteForm(FlaskForm):
    token = StringField("token", validators=[DataRequired()])
    first_name = StringField("first_name", validators=[Optional(), Length(max=120)])
    last_name = StringField("last_name", validators=[Optional(), Length(max=120)])
    password = PasswordField(
        "password", validators=[DataRequired(), Length(min=8, message="Password must be at least 8 characters.")]
    )
    confirm = PasswordField("confirm", validators=[DataRequired(), EqualTo("password", message="Passwords do not match.")])


class ConfirmAcceptForm(FlaskForm):
    """Accepting while already signed in as the invitee: only the token is needed."""

    token = StringField("token", validators=[DataRequired()])
