# ==============================================================================
# run.py
# ------------------------------------------------------------------------------
# The main entry point to launch the Flask application.
# ==============================================================================

from salesperf import create_app, db
from salesperf.models import AppSetting, SalesOrderHeader, SalesOrderDetail, SalesPerson, SalesTerritory

# Create the Flask application instance using the factory function
app = create_app()

@app.shell_context_processor
def make_shell_context():
    """Provides a shell context for the `flask shell` command."""
    return {
        'db': db,
        'AppSetting': AppSetting,
        'SalesOrderHeader': SalesOrderHeader,
        'SalesOrderDetail': SalesOrderDetail,
        'SalesPerson': SalesPerson,
        'SalesTerritory': SalesTerritory
    }

if __name__ == '__main__':
    app.run(debug=True)
