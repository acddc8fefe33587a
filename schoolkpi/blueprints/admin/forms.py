from flask_wtf import FlaskForm
from wtforms import DecimalField, IntegerField, PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Email, InputRequired, Length, NumberRange, Optional

from ...models.user import Role


class JobTypeForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=200)])


class KpiForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=255)])
    weight = DecimalField("Weight", places=2, validators=[InputRequired(), NumberRange(min=0, max=100)])
    min_accepted_evidence = IntegerField("Minimum accepted evidence", validators=[Optional(), NumberRange(min=1)])


class EvidenceItemForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=255)])


class UserForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=200)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=8)])
    role = SelectField("Role", choices=[(Role.ADMIN, "Admin"), (Role.SCHOOL_MANAGER, "School manager"),
                                        (Role.TEACHER, "Teacher")], default=Role.TEACHER)
    school_id = IntegerField("School", validators=[Optional()])
    job_type_id = IntegerField("Job type", validators=[Optional()])
