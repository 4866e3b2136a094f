# ==============================================================================
# salesperf/analytics/schema.py
# ------------------------------------------------------------------------------
# Defines the expected structure of the performance panel (one row per order
# line after joining orders, products, employees, customers and territories).
# This schema is the single source of truth for the extractor and validator.
# ==============================================================================

# Columns as selected from the source tables, in query order.
PANEL_COLUMNS = [
    'sales_person_id', 'first_name', 'last_name', 'hire_date',
    'line_total', 'order_qty', 'standard_cost', 'year_sale',
    'territory', 'customer_id', 'sales_quota',
]

# Columns computed from the source columns.
DERIVED_COLUMNS = ['profit', 'unit_profit']

# Columns that must never be null.
REQUIRED_COLUMNS = [
    'sales_person_id', 'first_name', 'last_name', 'line_total',
    'order_qty', 'standard_cost', 'year_sale', 'territory', 'customer_id',
]

NUMERIC_COLUMNS = ['line_total', 'order_qty', 'standard_cost', 'sales_quota']

INTEGER_COLUMNS = ['sales_person_id', 'year_sale', 'customer_id']

# --- Employee categories, highest tier first ---
VITAL_EMPLOYEE = 'Vital Employee'
VALUABLE_EMPLOYEE = 'Valuable Employee'
REQUIRES_TRAINING = 'Requires More Sales Training'

CATEGORIES = [VITAL_EMPLOYEE, VALUABLE_EMPLOYEE, REQUIRES_TRAINING]

# Money is compared at the source's precision (4 places) so equal amounts tie exactly.
MONEY_DECIMALS = 4
