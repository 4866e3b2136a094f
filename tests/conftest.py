# tests/conftest.py

import pytest
import pandas as pd

from config import Config


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False


@pytest.fixture
def app_with_db():
    """
    Creates a new app instance for a test, sets up an in-memory database,
    and yields the app within an application context.
    """
    from salesperf import create_app, db
    from salesperf.analytics.engine import CalculationConfig

    app = create_app(TestingConfig)
    # Invalidate any cached config singleton before and after the test
    CalculationConfig._instance = None

    with app.app_context():
        db.create_all()
        yield app  # The tests will run here
        db.session.remove()
        db.drop_all()

    CalculationConfig._instance = None


@pytest.fixture
def demo_sales_db(app_with_db):
    """The in-memory database loaded with the demonstration sales dataset."""
    from salesperf.seed import seed_data, seed_demo_sales

    seed_data()
    seed_demo_sales()
    return app_with_db


@pytest.fixture
def make_panel():
    """
    Returns a factory building a raw panel frame from partial rows.
    Every row needs at least 'sales_person_id' and 'line_total'.
    """
    from salesperf.analytics.schema import PANEL_COLUMNS

    defaults = {
        'first_name': 'Sam',
        'last_name': 'Seller',
        'hire_date': None,
        'order_qty': 1,
        'standard_cost': 0.0,
        'year_sale': 2012,
        'territory': 'Northwest',
        'customer_id': 1,
        'sales_quota': None,
    }

    def _make(rows):
        records = []
        for row in rows:
            record = dict(defaults)
            record.update(row)
            records.append(record)
        return pd.DataFrame(records, columns=PANEL_COLUMNS)

    return _make
