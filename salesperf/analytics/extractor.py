# ==============================================================================
# salesperf/analytics/extractor.py
# ------------------------------------------------------------------------------
# Builds the run-scoped snapshot ("panel") of order-line facts that every
# report stage reads from.
# ==============================================================================

import logging
from contextlib import contextmanager

import pandas as pd
from sqlalchemy import select, extract
from sqlalchemy.exc import SQLAlchemyError

from salesperf import db
from salesperf.models import (SalesOrderHeader, SalesOrderDetail, Product, Employee,
                              Person, SalesPerson, Customer, SalesTerritory)
from .schema import PANEL_COLUMNS, NUMERIC_COLUMNS, INTEGER_COLUMNS, MONEY_DECIMALS
from .validator import validate_panel


class PerformanceReportError(Exception):
    """Base class for every failure that aborts a performance report run."""


class ExtractionError(PerformanceReportError):
    """The source data could not be read or is malformed."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []


class SnapshotReleasedError(PerformanceReportError):
    """A snapshot was read after its run finished."""


# --- Source Query ---

def panel_query(selected_year=None):
    """
    Returns the SELECT DISTINCT joining orders, lines, products, employees,
    salespeople, customers and territories into one row per order line.
    Orders without a salesperson drop out of the inner joins.
    """
    year_sale = extract('year', SalesOrderHeader.order_date)
    stmt = (
        select(
            SalesOrderHeader.sales_person_id,
            Person.first_name,
            Person.last_name,
            Employee.hire_date,
            SalesOrderDetail.line_total,
            SalesOrderDetail.order_qty,
            Product.standard_cost,
            year_sale.label('year_sale'),
            SalesTerritory.name.label('territory'),
            Customer.customer_id,
            SalesPerson.sales_quota,
        )
        .select_from(SalesOrderHeader)
        .join(SalesOrderDetail, SalesOrderHeader.sales_order_id == SalesOrderDetail.sales_order_id)
        .join(Product, SalesOrderDetail.product_id == Product.product_id)
        .join(Employee, Employee.business_entity_id == SalesOrderHeader.sales_person_id)
        .join(Person, Employee.business_entity_id == Person.business_entity_id)
        .join(SalesPerson, Person.business_entity_id == SalesPerson.business_entity_id)
        .join(Customer, SalesOrderHeader.customer_id == Customer.customer_id)
        .join(SalesTerritory, Customer.territory_id == SalesTerritory.territory_id)
        .distinct()
    )
    if selected_year is not None:
        stmt = stmt.where(year_sale == selected_year)
    return stmt


def load_panel_rows(selected_year=None):
    """Reads the raw panel from the database in a single statement."""
    try:
        rows = db.session.execute(panel_query(selected_year)).all()
    except SQLAlchemyError as e:
        logging.error(f"Could not read the sales panel from the database: {e}", exc_info=True)
        raise ExtractionError(f"Source data is unreachable: {e}") from e
    logging.info(f"Loaded {len(rows)} distinct order lines (year filter: {selected_year or 'all'}).")
    return pd.DataFrame([tuple(row) for row in rows], columns=PANEL_COLUMNS)


def build_panel(frame):
    """
    Validates a raw panel frame and derives the profit columns.

    profit      = line_total - standard_cost * order_qty
    unit_profit = line_total / order_qty - standard_cost  (NaN when order_qty is 0)

    Raises:
        ExtractionError: If the frame does not match the panel schema.
    """
    errors = validate_panel(frame)
    if errors:
        for error in errors:
            logging.warning(f"  - {error}")
        raise ExtractionError(f"Source data is malformed ({len(errors)} problem(s) found).", errors)

    panel = frame[PANEL_COLUMNS].copy()
    for col in NUMERIC_COLUMNS:
        panel[col] = pd.to_numeric(panel[col]).astype(float)
    for col in INTEGER_COLUMNS:
        panel[col] = pd.to_numeric(panel[col]).astype('int64')

    panel = panel.drop_duplicates(ignore_index=True)

    quantity = panel['order_qty']
    panel['profit'] = (panel['line_total'] - panel['standard_cost'] * quantity).round(MONEY_DECIMALS)
    panel['unit_profit'] = (panel['line_total'] / quantity.where(quantity != 0)
                            - panel['standard_cost']).round(MONEY_DECIMALS)

    zero_quantity = int((quantity == 0).sum())
    if zero_quantity:
        logging.warning(f"{zero_quantity} order line(s) have zero quantity; their unit profit is undefined.")
    return panel


# --- Snapshot ---

class Snapshot:
    """
    The facts of a single report run, optionally limited to one year.

    Stages only read from it. Once released, the facts are dropped and any
    further access raises SnapshotReleasedError.
    """

    def __init__(self, facts, selected_year=None):
        self._facts = facts
        self.selected_year = selected_year

    @property
    def released(self):
        return self._facts is None

    @property
    def facts(self):
        if self._facts is None:
            raise SnapshotReleasedError("The snapshot has already been released.")
        return self._facts

    def profit_positive(self):
        """Facts whose unit profit is strictly positive (undefined unit profit never is)."""
        facts = self.facts
        return facts[facts['unit_profit'] > 0]

    def release(self):
        self._facts = None

    def __len__(self):
        return len(self.facts)


def extract_snapshot(selected_year=None, loader=None):
    """
    Builds the snapshot for one run.

    Args:
        selected_year (int | None): Year to restrict the facts to, or None for all years.
        loader (callable | None): Returns the raw panel frame for a year filter.
            Defaults to reading the database.
    """
    loader = loader or load_panel_rows
    try:
        raw = loader(selected_year)
    except PerformanceReportError:
        raise
    except Exception as e:
        raise ExtractionError(f"Source data could not be loaded: {e}") from e

    facts = build_panel(raw)
    if selected_year is not None:
        # Loaders other than the database one may hand back every year.
        facts = facts[facts['year_sale'] == selected_year].reset_index(drop=True)
    return Snapshot(facts, selected_year)


@contextmanager
def snapshot_scope(selected_year=None, loader=None):
    """
    Context manager owning the snapshot of a run.

    Usage:
        with snapshot_scope(2011) as snapshot:
            ...
    The snapshot is released on every exit path, including errors.
    """
    snapshot = extract_snapshot(selected_year, loader)
    logging.info(f"Snapshot built with {len(snapshot)} facts.")
    try:
        yield snapshot
    finally:
        snapshot.release()
        logging.info("Snapshot released.")
