# ==============================================================================
# salesperf/analytics/validator.py
# ------------------------------------------------------------------------------
# Handles the validation of the raw panel's structure and data types before
# any profit figure is derived from it.
# ==============================================================================

import pandas as pd
from .schema import PANEL_COLUMNS, REQUIRED_COLUMNS, NUMERIC_COLUMNS, INTEGER_COLUMNS

def validate_panel(df):
    """
    Validates the structure and basic data types of a raw panel frame.

    Args:
        df (pd.DataFrame): Rows as returned by the source query.

    Returns:
        list: Human-readable error messages. Empty if the panel is valid.
    """
    errors = []

    # 1. Check for required columns
    missing_columns = [col for col in PANEL_COLUMNS if col not in df.columns]
    if missing_columns:
        errors.append(f"Panel is missing required columns: {', '.join(missing_columns)}")
        return errors  # Nothing else can be checked reliably

    # 2. Check required columns for nulls
    for col in REQUIRED_COLUMNS:
        null_rows = df[df[col].isna()]
        for index in null_rows.index:
            errors.append(f"Panel row {index}: column '{col}' must not be empty.")

    # 3. Check numeric columns for non-numeric values
    for col in NUMERIC_COLUMNS + INTEGER_COLUMNS:
        # Coerce to numeric, making non-numbers NaN
        numeric_series = pd.to_numeric(df[col], errors='coerce')
        # Find rows where the original value was not empty but the numeric version is NaN
        invalid_rows = df[numeric_series.isna() & df[col].notna()]
        for index in invalid_rows.index:
            value = invalid_rows.loc[index, col]
            errors.append(f"Panel row {index}: value '{value}' in column '{col}' must be a number.")

    # 4. Ids and years must be whole numbers
    for col in INTEGER_COLUMNS:
        numeric_series = pd.to_numeric(df[col], errors='coerce')
        fractional_rows = df[numeric_series.notna() & (numeric_series % 1 != 0)]
        for index in fractional_rows.index:
            value = fractional_rows.loc[index, col]
            errors.append(f"Panel row {index}: value '{value}' in column '{col}' must be a whole number.")

    # 5. Quantities cannot be negative (zero is allowed and yields no unit profit)
    quantities = pd.to_numeric(df['order_qty'], errors='coerce')
    for index in df[quantities < 0].index:
        errors.append(f"Panel row {index}: order quantity {df.loc[index, 'order_qty']} is negative.")

    return errors
