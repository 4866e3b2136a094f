# ==============================================================================
# salesperf/analytics/engine.py
# ------------------------------------------------------------------------------
# Profitability aggregation, employee ranking and categorization, and the
# best-selling territory per year, all computed from one run snapshot.
# ==============================================================================

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from salesperf import db
from salesperf.models import AppSetting
from .extractor import PerformanceReportError, snapshot_scope
from .schema import VITAL_EMPLOYEE, VALUABLE_EMPLOYEE, REQUIRES_TRAINING, MONEY_DECIMALS

DEFAULT_COMMISSION_RATES = {
    VITAL_EMPLOYEE: 0.08,
    VALUABLE_EMPLOYEE: 0.05,
    REQUIRES_TRAINING: 0.03,
}
DEFAULT_VITAL_PROFIT_MULTIPLIER = 2.0


class ReportRunError(PerformanceReportError):
    """A report stage failed; no partial results are returned."""


# --- Configuration Loader Class ---

class CalculationConfig:
    """
    A singleton class to load and hold the report's business rules from the database.
    This ensures the database is queried only once per application lifecycle.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            logging.info("Creating and loading CalculationConfig instance...")
            instance = super(CalculationConfig, cls).__new__(cls)
            try:
                instance.load_settings()
                logging.info("CalculationConfig loaded successfully.")
            except Exception as e:
                logging.error(f"FATAL: Could not load settings from database. Engine cannot run. Error: {e}", exc_info=True)
                raise
            cls._instance = instance
        return cls._instance

    def load_settings(self):
        """Loads all settings from the AppSetting table into attributes."""
        settings = AppSetting.query.all()
        settings_dict = {s.key: s.get_value() for s in settings}

        rates = dict(DEFAULT_COMMISSION_RATES)
        rates.update(settings_dict.get('COMMISSION_RATES', {}))
        self.COMMISSION_RATES = rates
        self.VITAL_PROFIT_MULTIPLIER = settings_dict.get('VITAL_PROFIT_MULTIPLIER', DEFAULT_VITAL_PROFIT_MULTIPLIER)


# --- Result Types ---

@dataclass(frozen=True)
class SalesPersonSummary:
    sales_person_id: int
    first_name: str
    last_name: str
    total_profit: float
    average_profit_per_sale: float
    rank: int
    category: str
    commission_rate: float
    bonus: float
    top_territory: str
    top_territory_customer_count: int

    @property
    def name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def commission(self):
        """The commission rate as a percentage label, e.g. '8%'."""
        return f"{self.commission_rate:.0%}"


@dataclass(frozen=True)
class TerritoryYearSummary:
    year: int
    territory: str
    total_profit: float


@dataclass
class Profitability:
    # One row per salesperson with profit-positive facts:
    # sales_person_id, first_name, last_name, total_profit, average_profit_per_sale, sales_count
    per_salesperson: pd.DataFrame
    # None when no salesperson has a profit-positive fact
    average_total_profit: Optional[float]


@dataclass
class PerformanceReport:
    selected_year: Optional[int]
    average_total_profit: Optional[float]
    employee_summaries: List[SalesPersonSummary] = field(default_factory=list)
    territory_by_year: List[TerritoryYearSummary] = field(default_factory=list)


# --- Helper Functions ---

def competition_ranks(values):
    """
    Standard competition ranks ("1224") for values already sorted best-first.
    Tied values share a rank; the next distinct value is ranked by its position.
    """
    ranks = []
    previous_value, previous_rank = None, 0
    for position, value in enumerate(values, start=1):
        if position == 1 or value != previous_value:
            previous_value, previous_rank = value, position
        ranks.append(previous_rank)
    return ranks


def categorize(total_profit, average_total_profit, commission_rates=None,
               vital_multiplier=DEFAULT_VITAL_PROFIT_MULTIPLIER):
    """
    Returns (category, commission_rate) for a salesperson's total profit.

    An undefined average counts as +infinity, so everyone lands in the lowest tier.
    """
    rates = commission_rates or DEFAULT_COMMISSION_RATES
    if average_total_profit is None:
        return REQUIRES_TRAINING, rates[REQUIRES_TRAINING]
    if total_profit > round(average_total_profit * vital_multiplier, MONEY_DECIMALS):
        return VITAL_EMPLOYEE, rates[VITAL_EMPLOYEE]
    if total_profit >= average_total_profit:
        return VALUABLE_EMPLOYEE, rates[VALUABLE_EMPLOYEE]
    return REQUIRES_TRAINING, rates[REQUIRES_TRAINING]


# --- Report Stages ---

def aggregate_profitability(snapshot):
    """Per-salesperson profit totals over profit-positive facts, and their average."""
    positive = snapshot.profit_positive()
    if positive.empty:
        logging.warning("No profit-positive order lines in the snapshot; average total profit is undefined.")
        columns = ['sales_person_id', 'first_name', 'last_name', 'total_profit',
                   'average_profit_per_sale', 'sales_count']
        return Profitability(pd.DataFrame(columns=columns), None)

    per_salesperson = (
        positive.groupby('sales_person_id')
        .agg(first_name=('first_name', 'first'),
             last_name=('last_name', 'first'),
             total_profit=('profit', 'sum'),
             average_profit_per_sale=('profit', 'mean'),
             sales_count=('profit', 'size'))
        .reset_index()
    )
    # Unweighted across salespeople, not across lines
    per_salesperson[['total_profit', 'average_profit_per_sale']] = (
        per_salesperson[['total_profit', 'average_profit_per_sale']].round(MONEY_DECIMALS))
    average_total_profit = round(float(per_salesperson['total_profit'].mean()), MONEY_DECIMALS)
    logging.info(f"Aggregated {len(positive)} profit-positive lines for {len(per_salesperson)} salespeople. "
                 f"Average total profit: {average_total_profit:,.2f}")
    return Profitability(per_salesperson, average_total_profit)


def top_territories(snapshot):
    """
    Most profitable territory per salesperson, indexed by sales_person_id, with
    columns territory, territory_profit and customer_count. Equal profits go to
    the territory whose name sorts first.
    """
    positive = snapshot.profit_positive()
    if positive.empty:
        return pd.DataFrame(columns=['territory', 'territory_profit', 'customer_count'])

    by_territory = (
        positive.groupby(['sales_person_id', 'territory'])
        .agg(territory_profit=('profit', 'sum'),
             customer_count=('customer_id', pd.Series.nunique))
        .reset_index()
    )
    by_territory['territory_profit'] = by_territory['territory_profit'].round(MONEY_DECIMALS)
    best = (
        by_territory
        .sort_values(['sales_person_id', 'territory_profit', 'territory'], ascending=[True, False, True])
        .drop_duplicates('sales_person_id', keep='first')
    )
    return best.set_index('sales_person_id')


def rank_employees(snapshot, profitability, commission_rates=None,
                   vital_multiplier=DEFAULT_VITAL_PROFIT_MULTIPLIER):
    """
    Builds the ranked list of SalesPersonSummary, best first.
    Salespeople with equal total profit share a rank and are listed by id.
    """
    per_salesperson = profitability.per_salesperson
    if per_salesperson.empty:
        return []

    best_territories = top_territories(snapshot)
    ordered = per_salesperson.sort_values(['total_profit', 'sales_person_id'], ascending=[False, True])
    ranks = competition_ranks(ordered['total_profit'].tolist())

    summaries = []
    for rank, row in zip(ranks, ordered.itertuples(index=False)):
        total_profit = float(row.total_profit)
        category, rate = categorize(total_profit, profitability.average_total_profit,
                                    commission_rates, vital_multiplier)
        territory = best_territories.loc[row.sales_person_id]
        summary = SalesPersonSummary(
            sales_person_id=int(row.sales_person_id),
            first_name=row.first_name,
            last_name=row.last_name,
            total_profit=total_profit,
            average_profit_per_sale=float(row.average_profit_per_sale),
            rank=rank,
            category=category,
            commission_rate=rate,
            bonus=total_profit * rate,
            top_territory=territory['territory'],
            top_territory_customer_count=int(territory['customer_count']),
        )
        logging.debug(f"  #{summary.rank} {summary.name}: profit={summary.total_profit:,.2f}, "
                      f"category='{summary.category}', bonus={summary.bonus:,.2f}, "
                      f"top territory='{summary.top_territory}'")
        summaries.append(summary)
    return summaries


def best_territory_by_year(snapshot, selected_year=None):
    """
    Highest-profit territory per year, ordered by year.

    With a selected year only that year is considered and the row carries the
    requested year. Years without profit-positive facts produce no row.
    """
    positive = snapshot.profit_positive()
    if selected_year is not None:
        positive = positive[positive['year_sale'] == selected_year]
    if positive.empty:
        return []

    yearly = positive.groupby(['year_sale', 'territory'], as_index=False)['profit'].sum()
    yearly['profit'] = yearly['profit'].round(MONEY_DECIMALS)
    best = (
        yearly
        .sort_values(['year_sale', 'profit', 'territory'], ascending=[True, False, True])
        .drop_duplicates('year_sale', keep='first')
    )
    return [
        TerritoryYearSummary(
            year=selected_year if selected_year is not None else int(row.year_sale),
            territory=row.territory,
            total_profit=float(row.profit),
        )
        for row in best.itertuples(index=False)
    ]


# --- Main Report Orchestrator ---

def run_report(selected_year=None, config=None, loader=None):
    """
    Runs the whole performance report over one snapshot.

    Must be called inside an application context. Either every result set is
    returned or the run raises; the snapshot is released either way.

    Args:
        selected_year (int | None): Restrict the report to one year.
        config (CalculationConfig | None): Business rules; loaded from the database if omitted.
        loader (callable | None): Source of the raw panel, defaults to the database.

    Returns:
        PerformanceReport

    Raises:
        ExtractionError: The source data is unreachable or malformed.
        ReportRunError: Any other stage failed.
    """
    logging.info("=" * 80)
    logging.info(f"STARTING PERFORMANCE REPORT (year: {selected_year if selected_year is not None else 'all'})")
    logging.info("=" * 80)

    try:
        config = config or CalculationConfig()
        with snapshot_scope(selected_year, loader) as snapshot:
            logging.info("--- Stage 1: Aggregating profitability per salesperson. ---")
            profitability = aggregate_profitability(snapshot)

            logging.info("--- Stage 2: Ranking and categorizing salespeople. ---")
            employee_summaries = rank_employees(snapshot, profitability,
                                                config.COMMISSION_RATES, config.VITAL_PROFIT_MULTIPLIER)

            logging.info("--- Stage 3: Finding the best-selling territory per year. ---")
            territory_by_year = best_territory_by_year(snapshot, selected_year)
    except PerformanceReportError as e:
        db.session.rollback()
        logging.error(f"Performance report aborted: {e}")
        raise
    except Exception as e:
        db.session.rollback()
        logging.error(f"Performance report failed: {e}", exc_info=True)
        raise ReportRunError(f"Performance report failed: {e}") from e

    logging.info(f"--- Report finished: {len(employee_summaries)} salespeople, "
                 f"{len(territory_by_year)} territory-year rows. ---")
    return PerformanceReport(
        selected_year=selected_year,
        average_total_profit=profitability.average_total_profit,
        employee_summaries=employee_summaries,
        territory_by_year=territory_by_year,
    )
