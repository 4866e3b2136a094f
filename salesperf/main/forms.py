# ==============================================================================
# salesperf/main/forms.py
# ------------------------------------------------------------------------------
# Defines request-parameter forms using Flask-WTF for input validation.
# ==============================================================================

from flask_wtf import FlaskForm
from wtforms import IntegerField
from wtforms.validators import NumberRange, Optional

class YearField(IntegerField):
    """An integer year that also accepts 'all' (or nothing) to mean every year."""

    def process_formdata(self, valuelist):
        if valuelist and str(valuelist[0]).strip().lower() in ('', 'all'):
            self.data = None
            self.raw_data = []
            return
        super().process_formdata(valuelist)

class ReportParamsForm(FlaskForm):
    """Query parameters of the performance report."""
    year = YearField('Year', validators=[Optional(), NumberRange(min=1900, max=2999, message="Year must be between 1900 and 2999.")])
