# ==============================================================================
# salesperf/main/utils.py
# ------------------------------------------------------------------------------
# Turns engine results into plain, JSON-ready dictionaries for the API and CLI.
# ==============================================================================

def employee_summary_to_dict(summary):
    return {
        'sales_person_id': summary.sales_person_id,
        'first_name': summary.first_name,
        'last_name': summary.last_name,
        'total_profit': summary.total_profit,
        'average_profit_per_sale': summary.average_profit_per_sale,
        'rank': summary.rank,
        'category': summary.category,
        'commission': summary.commission,
        'commission_rate': summary.commission_rate,
        'bonus': summary.bonus,
        'top_territory': summary.top_territory,
        'top_territory_customer_count': summary.top_territory_customer_count,
    }

def territory_year_to_dict(summary):
    return {
        'year': summary.year,
        'best_selling_territory': summary.territory,
        'total_profit': summary.total_profit,
    }

def report_to_dict(report):
    """
    Transforms a PerformanceReport into the structure returned to clients.
    Employee rows keep their rank order and territory rows their year order.
    """
    return {
        'selected_year': report.selected_year,
        'average_total_profit': report.average_total_profit,
        'employee_summaries': [employee_summary_to_dict(s) for s in report.employee_summaries],
        'territory_by_year': [territory_year_to_dict(t) for t in report.territory_by_year],
    }
