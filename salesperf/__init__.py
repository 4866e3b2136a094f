# ==============================================================================
# salesperf/__init__.py
# ------------------------------------------------------------------------------
# Application factory for creating and configuring the Flask app instance.
# ==============================================================================

import os
import json
import logging
import click
from flask import Flask
from config import Config
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Initialize extensions globally to be accessible by other modules
db = SQLAlchemy()
migrate = Migrate()

def create_app(config_class=Config):
    """
    Application factory function. Creates and configures the Flask application.

    Args:
        config_class (class): The configuration class to use.

    Returns:
        Flask: The configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    # Configure logging
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    # Ensure the instance folder exists for the SQLite database
    os.makedirs(app.instance_path, exist_ok=True)

    # Initialize extensions with the application instance
    db.init_app(app)
    migrate.init_app(app, db)

    # Register blueprints with the application
    from salesperf.main import bp as main_bp
    app.register_blueprint(main_bp)

    @app.cli.command("seed")
    @click.option('--demo', is_flag=True, help='Also load a small demonstration sales dataset.')
    def seed(demo):
        """Seeds the database with default settings (and optional demo data)."""
        from salesperf.seed import seed_data, seed_demo_sales
        db.create_all()
        seed_data()
        if demo:
            seed_demo_sales()
        app.logger.info("Database has been seeded with default values.")

    @app.cli.command("report")
    @click.option('--year', type=int, default=None, help='Restrict the report to a single year.')
    def report(year):
        """Runs the sales performance report and prints it as JSON."""
        from salesperf.analytics.engine import run_report
        from salesperf.analytics.extractor import PerformanceReportError
        from salesperf.main.utils import report_to_dict

        if year is None:
            year = app.config.get('REPORT_DEFAULT_YEAR')
        try:
            result = run_report(selected_year=year)
        except PerformanceReportError as e:
            click.echo(f"Performance report failed: {e}", err=True)
            raise SystemExit(1)
        click.echo(json.dumps(report_to_dict(result), indent=2, ensure_ascii=False))

    app.logger.info('Sales Performance Analytics startup complete')

    return app
