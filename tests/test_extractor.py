# tests/test_extractor.py

from datetime import datetime
import math

import pandas as pd
import pytest

from salesperf.analytics.extractor import (build_panel, extract_snapshot, load_panel_rows,
                                           snapshot_scope, ExtractionError, SnapshotReleasedError)
from salesperf.analytics.schema import PANEL_COLUMNS
from salesperf.analytics.validator import validate_panel


def _add_order(order_id, order_date, customer_id, sales_person_id, lines):
    from salesperf import db
    from salesperf.models import SalesOrderHeader, SalesOrderDetail

    db.session.add(SalesOrderHeader(sales_order_id=order_id, order_date=order_date,
                                    customer_id=customer_id, sales_person_id=sales_person_id))
    for line_id, product_id, qty, line_total in lines:
        db.session.add(SalesOrderDetail(sales_order_id=order_id, sales_order_detail_id=line_id,
                                        product_id=product_id, order_qty=qty, line_total=line_total))
    db.session.commit()


# --- Database Panel ---

def test_panel_joins_source_tables(demo_sales_db):
    panel = load_panel_rows()

    assert list(panel.columns) == PANEL_COLUMNS
    # Every demo order line is distinct
    assert len(panel) == 9

    blythe = panel[(panel['sales_person_id'] == 275) & (panel['year_sale'] == 2012)].iloc[0]
    assert blythe['first_name'] == 'Michael'
    assert blythe['last_name'] == 'Blythe'
    assert blythe['territory'] == 'Northwest'
    assert blythe['customer_id'] == 11001
    assert blythe['standard_cost'] == pytest.approx(2171.29)
    assert blythe['sales_quota'] == pytest.approx(300000.0)


def test_panel_year_filter(demo_sales_db):
    panel = load_panel_rows(2011)

    assert len(panel) == 5
    assert set(panel['year_sale']) == {2011}


def test_orders_without_salesperson_are_left_out(demo_sales_db):
    _add_order(70000, datetime(2012, 8, 1), 11000, None, [(1, 707, 1, 34.99)])

    panel = load_panel_rows(2012)
    assert 34.99 not in set(panel['line_total'])


def test_identical_lines_collapse_into_one_fact(demo_sales_db):
    # Same salesperson, customer, product, quantity, amount and year as order 51133
    _add_order(70001, datetime(2012, 9, 1), 11004, 277, [(1, 749, 1, 2000.00)])

    panel = load_panel_rows(2012)
    assert len(panel[(panel['sales_person_id'] == 277) & (panel['line_total'] == 2000.00)]) == 1


def test_snapshot_from_database_derives_profit(demo_sales_db):
    snapshot = extract_snapshot(2011)
    facts = snapshot.facts

    helmet = facts[(facts['sales_person_id'] == 277) & (facts['order_qty'] == 6)].iloc[0]
    assert helmet['profit'] == pytest.approx(120.71 - 13.09 * 6)
    assert helmet['unit_profit'] == pytest.approx(120.71 / 6 - 13.09)

    zero_quantity = facts[facts['order_qty'] == 0].iloc[0]
    assert math.isnan(zero_quantity['unit_profit'])
    assert zero_quantity.name not in snapshot.profit_positive().index


def test_empty_source_gives_empty_snapshot(app_with_db):
    snapshot = extract_snapshot()

    assert len(snapshot) == 0
    assert snapshot.profit_positive().empty


def test_database_failure_raises_extraction_error(app_with_db):
    from salesperf import db

    db.drop_all()
    with pytest.raises(ExtractionError):
        load_panel_rows()
    db.session.rollback()
    db.create_all()


# --- Panel Building ---

def test_build_panel_removes_duplicate_rows(make_panel):
    panel = build_panel(make_panel([
        {'sales_person_id': 1, 'line_total': 100.0},
        {'sales_person_id': 1, 'line_total': 100.0},
        {'sales_person_id': 1, 'line_total': 120.0},
    ]))

    assert len(panel) == 2
    assert list(panel.index) == [0, 1]


def test_build_panel_rejects_malformed_frame(make_panel):
    frame = make_panel([{'sales_person_id': 1, 'line_total': 100.0}]).drop(columns=['territory'])

    with pytest.raises(ExtractionError) as excinfo:
        build_panel(frame)
    assert "territory" in excinfo.value.errors[0]


def test_snapshot_scope_releases_on_error(make_panel):
    frame = make_panel([{'sales_person_id': 1, 'line_total': 100.0}])

    with pytest.raises(RuntimeError):
        with snapshot_scope(loader=lambda year: frame) as snapshot:
            assert len(snapshot) == 1
            raise RuntimeError("stage failed")

    assert snapshot.released
    with pytest.raises(SnapshotReleasedError):
        snapshot.profit_positive()


# --- Validator ---

def test_validator_accepts_well_formed_panel(make_panel):
    assert validate_panel(make_panel([{'sales_person_id': 1, 'line_total': 100.0}])) == []


def test_validator_reports_missing_columns():
    errors = validate_panel(pd.DataFrame(columns=['sales_person_id', 'line_total']))

    assert len(errors) == 1
    assert 'territory' in errors[0]


def test_validator_reports_bad_values(make_panel):
    frame = make_panel([
        {'sales_person_id': 1, 'line_total': None},
        {'sales_person_id': 2, 'line_total': 10.0, 'order_qty': 'two'},
        {'sales_person_id': 3, 'line_total': 10.0, 'order_qty': -1},
    ])

    errors = validate_panel(frame)

    assert any("row 0" in e and "'line_total'" in e for e in errors)
    assert any("row 1" in e and "'two'" in e for e in errors)
    assert any("row 2" in e and "negative" in e for e in errors)


def test_validator_rejects_fractional_ids_and_years(make_panel):
    frame = make_panel([
        {'sales_person_id': 1, 'line_total': 10.0, 'year_sale': 2011.5},
        {'sales_person_id': 2.0, 'line_total': 10.0},
    ])

    errors = validate_panel(frame)

    assert len(errors) == 1
    assert "row 0" in errors[0] and "'year_sale'" in errors[0] and "whole number" in errors[0]

    with pytest.raises(ExtractionError):
        build_panel(frame)
