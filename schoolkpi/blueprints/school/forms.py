from flask_wtf import FlaskForm
from wtforms import DecimalField, IntegerField, PasswordField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional


class ReviewForm(FlaskForm):
    action = SelectField("Action", choices=[("accept", "Accept"), ("reject", "Reject")], validators=[DataRequired()])
    rating = IntegerField("Rating", validators=[Optional(), NumberRange(min=1, max=5)])
    reject_reason = TextAreaField("Reject reason", validators=[Optional(), Length(max=2000)])


class SchoolKpiForm(FlaskForm):
    job_type_id = IntegerField("Job type", validators=[Optional()])
    name = StringField("Name", validators=[Optional(), Length(max=255)])
    weight = DecimalField("Weight", places=2, validators=[Optional(), NumberRange(min=0, max=100)])
    min_accepted_evidence = IntegerField("Minimum accepted evidence", validators=[Optional(), NumberRange(min=1)])


class SchoolEvidenceForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=255)])


class TeacherForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=200)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=8, max=200)])
    job_type_id = IntegerField("Job type", validators=[DataRequired()])


class TeacherUpdateForm(FlaskForm):
    # status comes from the raw JSON body (see utils.json_body)
    name = StringField("Name", validators=[Optional(), Length(max=200)])
    job_type_id = IntegerField("Job type", validators=[Optional()])
