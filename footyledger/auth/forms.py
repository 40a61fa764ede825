"""Forms for the auth blueprint."""

from flask_wtf import FlaskForm  # type: ignore
from wtforms import PasswordField, StringField, ValidationError
from wtforms.validators import DataRequired, Length, Optional

from footyledger.constants import MIN_PASSWORD_LENGTH, ROLES


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class LoginForm(FlaskForm):
    """Login form."""

    class Meta:
        # CSRFProtect already checks the X-CSRFToken header of JSON requests.
        csrf = False

    email = StringField("Email", validators=[DataRequired()], filters=[_strip])
    password = PasswordField("Password", validators=[DataRequired()])


class RegisterForm(FlaskForm):
    """Registration form."""

    class Meta:
        csrf = False

    email = StringField("Email", validators=[DataRequired()], filters=[_strip])
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(),
            Length(
                min=MIN_PASSWORD_LENGTH,
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            ),
        ],
    )
    role = StringField("Role", validators=[Optional()], filters=[_strip])

    def validate_role(self, field):
        """Only accept known roles."""
        if field.data and field.data not in ROLES:
            raise ValidationError("Unknown role.")
