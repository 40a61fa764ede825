"""Forms for the tournament blueprint."""

from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired, Length


def _strip(value):
    return str(value).strip() if value is not None else value


class TournamentForm(FlaskForm):
    """Form for creating or renaming a tournament."""

    class Meta:
        # CSRFProtect already checks the X-CSRFToken header of JSON requests.
        csrf = False

    name = StringField(
        "Tournament Name",
        validators=[DataRequired(message="name required"), Length(max=200)],
        filters=[_strip],
    )


class TeamForm(FlaskForm):
    """Form for adding a team to a tournament."""

    class Meta:
        csrf = False

    name = StringField(
        "Team Name",
        validators=[DataRequired(message="team name required"), Length(max=100)],
        filters=[_strip],
    )
