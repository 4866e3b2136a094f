# ==============================================================================
# salesperf/main/routes.py
# ------------------------------------------------------------------------------
# Defines the HTTP routes of the main blueprint. The performance report is
# exposed as a read-only JSON endpoint.
# ==============================================================================

from flask import jsonify, request, current_app

from salesperf.main import bp
from salesperf.analytics.engine import run_report
from salesperf.analytics.extractor import ExtractionError, PerformanceReportError
from salesperf.main.forms import ReportParamsForm
from salesperf.main.utils import report_to_dict

@bp.route('/api/performance', methods=['GET'])
def performance_report():
    """
    Runs the sales performance report.

    Query parameters:
        year: a single year to report on, or 'all' / nothing for every year.
    """
    form = ReportParamsForm(formdata=request.args)
    if not form.validate():
        return jsonify({'errors': form.errors}), 400

    selected_year = form.year.data
    current_app.logger.info(f"Performance report requested for year: {selected_year if selected_year is not None else 'all'}")

    try:
        report = run_report(selected_year=selected_year)
    except ExtractionError as e:
        current_app.logger.error(f"Performance report could not read its source data: {e}")
        return jsonify({'error': str(e), 'details': e.errors}), 502
    except PerformanceReportError as e:
        current_app.logger.error(f"Performance report failed: {e}")
        return jsonify({'error': str(e)}), 500

    return jsonify(report_to_dict(report))
