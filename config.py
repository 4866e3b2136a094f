# ==============================================================================
# config.py
# ------------------------------------------------------------------------------
# Configuration settings for the Flask application.
# Uses environment variables for sensitive data to keep them out of version control.
# ==============================================================================

import os
from dotenv import load_dotenv

# Determine the absolute path of the project directory
basedir = os.path.abspath(os.path.dirname(__file__))

# Load environment variables from a .env file located in the project root
load_dotenv(os.path.join(basedir, '.env'))

class Config:
    """
    Base configuration class. Contains default settings that can be overridden
    by environment-specific configurations.
    """
    # --- Security ---
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-should-really-set-a-secret-key-in-your-env-file'

    # --- Database Configuration ---
    # The source tables (orders, products, employees, territories) are read from here.
    # Defaults to a SQLite file in the 'instance' folder.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance/app.db')

    # Disable an SQLAlchemy feature that is not needed and adds overhead.
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- Report Parameters ---
    # The performance API is a read-only GET endpoint, so CSRF protection is not needed there.
    WTF_CSRF_ENABLED = False

    # Optional year used by `flask report` when no --year is given (empty means all years).
    REPORT_DEFAULT_YEAR = int(os.environ['REPORT_DEFAULT_YEAR']) if os.environ.get('REPORT_DEFAULT_YEAR') else None
