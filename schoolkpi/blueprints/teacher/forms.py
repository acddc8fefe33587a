from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional


class SubmitEvidenceForm(FlaskForm):
    kpi_id = IntegerField("KPI", validators=[DataRequired()])
    evidence_id = IntegerField("Evidence", validators=[DataRequired()])
    # uploads are stored elsewhere; only the resulting URL is recorded
    file_url = StringField("File URL", validators=[DataRequired(), Length(max=512)])
    description = TextAreaField("Description", validators=[Optional(), Length(max=2000)])
